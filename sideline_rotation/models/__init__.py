"""
Models package for the Sideline Rotation engine.

This package contains the core data models used throughout the application.
"""
from .team_config import (
    SubstitutionType, TeamConfig, TeamConfigError,
    create_default_team_config, validate_team_config,
)
from .player import Player, PlayerRole, PlayerStats, PlayerStatus, StintState
from .formation import Formation, PairSlot
from .game_state import GameState, LastSubstitution

__all__ = [
    "SubstitutionType", "TeamConfig", "TeamConfigError",
    "create_default_team_config", "validate_team_config",
    "Player", "PlayerRole", "PlayerStats", "PlayerStatus", "StintState",
    "Formation", "PairSlot", "GameState", "LastSubstitution",
]
