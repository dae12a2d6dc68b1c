"""Domain models."""

from .models import AnnotatedListing, Listing, LogEntry

__all__ = ["Listing", "AnnotatedListing", "LogEntry"]
