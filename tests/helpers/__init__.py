"""Test helper utilities for Listing Scanner tests."""

from .feeds import StaticFetcher, build_feed, load_feed_fixture

__all__ = ["StaticFetcher", "build_feed", "load_feed_fixture"]
