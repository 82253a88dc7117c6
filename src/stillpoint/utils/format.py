"""Display formatting and setup input parsing"""

import math

from stillpoint.models.errors import InvalidDurationError


def format_time(ms: float) -> str:
    """
    Convert milliseconds to a "mm:ss" string.

    Seconds are rounded up so the display shows the current second ticking
    down instead of sitting on 00:00 for a full second before completion.
    """
    total_seconds = max(0, math.ceil(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def parse_duration_minutes(raw, min_minutes: int = 1, max_minutes: int = 180) -> int:
    """
    Validate a setup-screen duration entry and convert it to milliseconds.

    Args:
        raw: User input (int or numeric string, whole minutes)
        min_minutes: Smallest accepted value
        max_minutes: Largest accepted value

    Returns:
        Duration in milliseconds

    Raises:
        InvalidDurationError: not an integer, or outside [min_minutes, max_minutes]
    """
    if isinstance(raw, bool):
        raise InvalidDurationError(raw, "minutes must be a whole number")
    try:
        minutes = int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidDurationError(raw, "minutes must be a whole number")

    if minutes < min_minutes or minutes > max_minutes:
        raise InvalidDurationError(
            raw, f"minutes must be between {min_minutes} and {max_minutes}"
        )
    return minutes * 60 * 1000
