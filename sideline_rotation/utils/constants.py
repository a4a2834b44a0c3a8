"""
Constants for the Sideline Rotation engine.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Sideline Rotation"

# Match formats
FORMAT_5V5 = "5v5"
FORMAT_7V7 = "7v7"

FIELD_PLAYERS_BY_FORMAT = {
    FORMAT_5V5: 4,
    FORMAT_7V7: 6,
}

# Squad size limits (goalie included)
MIN_SQUAD_SIZE = 5
MAX_SQUAD_SIZE_BY_FORMAT = {
    FORMAT_5V5: 11,
    FORMAT_7V7: 15,
}

# On-field shapes available per format, first entry is the default
SHAPES_BY_FORMAT = {
    FORMAT_5V5: ["2-2", "1-2-1"],
    FORMAT_7V7: ["2-2-2", "2-3-1"],
}

# Pairs substitution is only offered for this exact configuration
PAIRS_FORMAT = FORMAT_5V5
PAIRS_SHAPE = "2-2"
PAIRS_SQUAD_SIZE = 7

# Slot keys shared across definitions
GOALIE_SLOT = "goalie"
LEFT_PAIR = "leftPair"
RIGHT_PAIR = "rightPair"
SUB_PAIR = "subPair"
SUBSTITUTE_PREFIX = "substitute_"

# Animation measurements (pixels)
ANIMATION_BOX_PADDING = 16
ANIMATION_BOX_BORDER = 4
ANIMATION_BOX_GAP = 8
ANIMATION_CONTENT_HEIGHT_PAIRS = 84
ANIMATION_CONTENT_HEIGHT_INDIVIDUAL = 76
ANIMATION_DISTANCE_FACTOR = 0.9025

# Web server defaults
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 8765

# Number of operation descriptions kept by a match session
MAX_HISTORY_SIZE = 50
