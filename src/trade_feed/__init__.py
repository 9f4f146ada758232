"""Exchange trade feed normalizer.

Connects to exchange WebSocket feeds and converts their trade messages
into canonical trade records.
"""

__version__ = "0.1.0"
