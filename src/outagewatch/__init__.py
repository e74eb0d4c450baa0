"""
OutageWatch - water-outage change notifier.

Checks the MPWiK Warszawa outage pages for one district, detects changes
against the last notified state, and sends a Telegram message when new or
updated outage information appears.
"""

__version__ = "0.1.0"
__app_name__ = "outagewatch"
