"""
Utility functions for the Sideline Rotation engine.

The rotation engine itself never reads the clock; these helpers are used
by callers (match session, web adapter) that have to supply a timestamp.
"""
import time


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
    """
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def now_ms() -> int:
    """Get current timestamp in epoch milliseconds."""
    return int(time.time() * 1000)
