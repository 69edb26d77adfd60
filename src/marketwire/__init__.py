"""MarketWire — real-time layer for the classifieds marketplace.

Chat delivery, user presence, notification fan-out, live listing view
counts and search telemetry, all coordinated through Redis lists,
counters and pub/sub channels.
"""

__version__ = "0.1.0"
