"""Parsing for the daemon trigger interval (``scan_interval``)."""

import re

MIN_INTERVAL_SECONDS = 300
MAX_INTERVAL_SECONDS = 7 * 86400

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_HUMAN_RE = re.compile(r"(\d+)([smhd])")
_ISO_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$")


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""


def parse_duration(value: str) -> int:
    """Convert ``"30m"``, ``"1h30m"``, ``"PT6H"`` or ``"P1D"`` to seconds.

    Raises:
        DurationParseError: If the string is empty, malformed or zero
    """
    text = re.sub(r"\s+", "", value or "")
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.upper().startswith("P"):
        match = _ISO_RE.match(text.upper())
        if not match or text.upper() in ("P", "PT"):
            raise DurationParseError(
                f"Invalid ISO-8601 duration: '{value}'. Expected e.g. 'PT30M', 'PT6H' or 'P1D'"
            )
        days, hours, minutes, seconds = (int(part or 0) for part in match.groups())
        total = days * 86400 + hours * 3600 + minutes * 60 + seconds
    else:
        pairs = _HUMAN_RE.findall(text.lower())
        if not pairs or "".join(n + u for n, u in pairs) != text.lower():
            raise DurationParseError(
                f"Invalid duration: '{value}'. Expected e.g. '30m', '6h', '1d' or '1h30m'"
            )
        total = sum(int(n) * _UNIT_SECONDS[u] for n, u in pairs)

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")
    return total


def validate_duration_range(
    seconds: int,
    min_seconds: int = MIN_INTERVAL_SECONDS,
    max_seconds: int = MAX_INTERVAL_SECONDS,
) -> None:
    """Reject intervals outside ``[min_seconds, max_seconds]``.

    Raises:
        DurationParseError: If the interval is out of range
    """
    if seconds < min_seconds:
        raise DurationParseError(
            f"Scan interval too short: {seconds}s. Minimum is {min_seconds}s."
        )
    if seconds > max_seconds:
        raise DurationParseError(
            f"Scan interval too long: {seconds}s. Maximum is {max_seconds}s."
        )
