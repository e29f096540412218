"""Deliver new RSS/Atom feed items to a Telegram chat."""

__version__ = "1.0.0"
