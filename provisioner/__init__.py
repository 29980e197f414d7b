"""Database provisioner for deployed projects."""

__version__ = "0.1.0"
