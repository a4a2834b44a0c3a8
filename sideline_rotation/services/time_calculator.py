"""
Time arithmetic for stint tracking.

All timestamps are epoch milliseconds supplied by the caller; results are
whole seconds rounded half up.
"""
import math
from typing import Optional, Union

Timestamp = Optional[Union[int, float]]


def _is_valid_timestamp(value: Timestamp) -> bool:
    return value is not None and not isinstance(value, bool) and value > 0


def is_valid_time_range(start: Timestamp, end: Timestamp) -> bool:
    """True when start is a real timestamp and end is not before it."""
    return _is_valid_timestamp(start) and end is not None and end >= start


def calculate_duration_seconds(start: Timestamp, end: Timestamp) -> int:
    """
    Seconds between two epoch millisecond timestamps.

    Args:
        start: Start of the interval
        end: End of the interval

    Returns:
        Whole seconds rounded half up, or 0 for an invalid interval

    Example:
        >>> calculate_duration_seconds(1000, 2500)
        2
        >>> calculate_duration_seconds(2000, 1000)
        0
    """
    if not _is_valid_timestamp(end) or not is_valid_time_range(start, end):
        return 0
    return int(math.floor((end - start) / 1000 + 0.5))


def should_skip_time_calculation(is_paused: bool, start: Timestamp) -> bool:
    """True if the clock is paused or the stint never started."""
    return bool(is_paused) or not _is_valid_timestamp(start)


def calculate_current_stint_duration(start: Timestamp, now: Timestamp, is_paused: bool = False) -> int:
    if should_skip_time_calculation(is_paused, start):
        return 0
    return calculate_duration_seconds(start, now)


def calculate_undo_timer_target(value_at_substitution: int, substitution_timestamp: Timestamp,
                                now_timestamp: Timestamp) -> int:
    """
    Substitution clock value to restore when a substitution is undone.

    Args:
        value_at_substitution: Clock value captured at the substitution
        substitution_timestamp: When the substitution happened
        now_timestamp: Current time

    Returns:
        The value the clock would show had the substitution never happened
    """
    if not _is_valid_timestamp(substitution_timestamp):
        return value_at_substitution
    return value_at_substitution + calculate_duration_seconds(substitution_timestamp, now_timestamp)
