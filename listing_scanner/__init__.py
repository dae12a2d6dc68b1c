"""Listing Scanner: fetch classified-ad feeds, filter by keyword, log and notify."""

__version__ = "0.1.0"
