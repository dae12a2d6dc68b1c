"""Non-fatal configuration checks surfaced as Python warnings."""

import warnings
from typing import Any, Dict, List

from .models import PAGE_SIZE


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """Inspect the raw YAML mapping for settings that load but look wrong.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    messages = []

    num_posts = config_dict.get("numPosts", config_dict.get("num_posts"))
    if isinstance(num_posts, int) and num_posts > 0 and num_posts % PAGE_SIZE:
        pages = -(-num_posts // PAGE_SIZE)
        messages.append(
            f"numPosts ({num_posts}) is not a multiple of {PAGE_SIZE}; "
            f"{pages} full pages ({pages * PAGE_SIZE} listings) will be fetched"
        )

    keywords = config_dict.get("keywords", [])
    if isinstance(keywords, list):
        normalized = [kw.strip().lower() for kw in keywords if isinstance(kw, str) and kw.strip()]
        duplicates = sorted({kw for kw in normalized if normalized.count(kw) > 1})
        if duplicates:
            messages.append(f"Duplicate keywords have no effect: {', '.join(duplicates)}")

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)
