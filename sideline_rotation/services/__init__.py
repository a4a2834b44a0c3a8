"""
Services package for the Sideline Rotation engine.

This package contains the formation definitions, time accounting and the
rotation calculator, plus the session that applies operations for a UI.
"""
from .formation_definitions import (
    FormationDefinition, FormationDefinitionError,
    get_formation_definition, get_mode_definition,
)
from .rotation_queue import RotationQueue
from .rotation_calculator import (
    OperationResult, OperationStatus, SubstitutionRejected,
    calculate_general_substitute_swap, calculate_goalie_switch,
    calculate_next_substitution_target, calculate_pair_position_swap,
    calculate_pause_resume, calculate_player_toggle_inactive,
    calculate_position_switch, calculate_substitute_reorder,
    calculate_substitution, calculate_undo, evaluate_operation,
    initialize_game_state,
)
from .animation_support import calculate_all_player_animations, capture_all_player_positions
from .formation_validator import GameStateValidator, ValidationResult
from .match_session import MatchSession, NoMatchInProgressError, OperationOutcome

__all__ = [
    "FormationDefinition", "FormationDefinitionError",
    "get_formation_definition", "get_mode_definition",
    "RotationQueue",
    "OperationResult", "OperationStatus", "SubstitutionRejected",
    "calculate_general_substitute_swap", "calculate_goalie_switch",
    "calculate_next_substitution_target", "calculate_pair_position_swap",
    "calculate_pause_resume", "calculate_player_toggle_inactive",
    "calculate_position_switch", "calculate_substitute_reorder",
    "calculate_substitution", "calculate_undo", "evaluate_operation",
    "initialize_game_state",
    "calculate_all_player_animations", "capture_all_player_positions",
    "GameStateValidator", "ValidationResult",
    "MatchSession", "NoMatchInProgressError", "OperationOutcome",
]
