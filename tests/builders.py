"""Shared game state builders for the test suite."""
from typing import Iterable, List, Optional

from sideline_rotation.models import (
    Formation, PairSlot, Player, PlayerStats, SubstitutionType, TeamConfig,
)
from sideline_rotation.services import get_formation_definition, initialize_game_state

START = 1_000_000


def seconds_after_start(seconds: int) -> int:
    return START + seconds * 1000


def make_players(count: int, inactive: Iterable[str] = ()) -> List[Player]:
    inactive = set(inactive)
    return [
        Player(id=str(i), name=f"Player {i}", stats=PlayerStats(is_inactive=str(i) in inactive))
        for i in range(1, count + 1)
    ]


def individual_formation(team_config: TeamConfig, shape: Optional[str] = None) -> Formation:
    """Field slots get players 1..n in order, then the bench; the last player is goalie."""
    definition = get_formation_definition(team_config, shape)
    ids = [str(i) for i in range(1, team_config.squad_size + 1)]
    slots = dict(zip(definition.field_positions + definition.substitute_positions, ids))
    return Formation(goalie=ids[-1], slots=slots)


def individual_state(squad_size: int = 7, format: str = "5v5", shape: str = "2-2", now: int = START):
    config = TeamConfig(format, squad_size, shape, SubstitutionType.INDIVIDUAL)
    return initialize_game_state(config, individual_formation(config), make_players(squad_size), now)


def pairs_state(now: int = START):
    config = TeamConfig("5v5", 7, "2-2", SubstitutionType.PAIRS)
    formation = Formation(goalie="7", slots={
        "leftPair": PairSlot("1", "2"),
        "rightPair": PairSlot("3", "4"),
        "subPair": PairSlot("5", "6"),
    })
    return initialize_game_state(config, formation, make_players(7), now)
