"""Allow running with ``python -m trade_feed``."""

import sys

from trade_feed.main import main

if __name__ == "__main__":
    sys.exit(main())
