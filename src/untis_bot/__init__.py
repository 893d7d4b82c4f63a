"""
WebUntis Cancellation Bot

Polls WebUntis for cancelled lessons of one class and announces them
in a Telegram chat.
"""

__version__ = "1.0.0"
