"""
Sideline Rotation

A live substitution rotation engine for small-sided team sport matches:
who is on the field, on the bench or in goal, the fair order in which
players cycle through those roles, and the time each player spends in
each role.
"""
__version__ = "1.0.0"

from .models import GameState, Player, TeamConfig, SubstitutionType
from .services import MatchSession, get_formation_definition, initialize_game_state
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ms, APP_TITLE

__all__ = [
    "GameState", "Player", "TeamConfig", "SubstitutionType",
    "MatchSession", "get_formation_definition", "initialize_game_state",
    "create_app", "run_web_app",
    "fmt_mmss", "now_ms", "APP_TITLE",
]
