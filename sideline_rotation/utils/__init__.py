"""
Utilities package for the Sideline Rotation engine.

This package contains utility functions and constants.
"""
from .time_utils import fmt_mmss, now_ms
from .constants import APP_TITLE

__all__ = ["fmt_mmss", "now_ms", "APP_TITLE"]
