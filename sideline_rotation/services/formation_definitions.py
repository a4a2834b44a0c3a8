"""
Formation definitions for the Sideline Rotation engine.

A FormationDefinition is the slot table for one team configuration: the
ordered field slots with their roles, the ordered substitute slots, and
the capabilities of the substitution scheme. Every other service looks
slots up here instead of naming them directly.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple

from ..models import (
    PlayerRole, PlayerStatus,
    SubstitutionType, TeamConfig, TeamConfigError, validate_team_config,
)
from ..utils.constants import (
    FIELD_PLAYERS_BY_FORMAT,
    GOALIE_SLOT,
    LEFT_PAIR,
    RIGHT_PAIR,
    SUB_PAIR,
    SUBSTITUTE_PREFIX,
)

logger = logging.getLogger(__name__)


class FormationDefinitionError(ValueError):
    """Raised when no formation definition exists for a configuration."""


D = PlayerRole.DEFENDER
M = PlayerRole.MIDFIELDER
A = PlayerRole.ATTACKER

# Field slots and their roles, in display order, per shape
FIELD_LAYOUTS: Dict[str, Tuple[Tuple[str, PlayerRole], ...]] = {
    "2-2": (
        ("leftDefender", D), ("rightDefender", D),
        ("leftAttacker", A), ("rightAttacker", A),
    ),
    "1-2-1": (
        ("defender", D), ("left", M), ("right", M), ("attacker", A),
    ),
    "2-2-2": (
        ("leftDefender", D), ("rightDefender", D),
        ("leftMidfielder", M), ("rightMidfielder", M),
        ("leftAttacker", A), ("rightAttacker", A),
    ),
    "2-3-1": (
        ("leftDefender", D), ("rightDefender", D),
        ("leftMidfielder", M), ("centerMidfielder", M), ("rightMidfielder", M),
        ("attacker", A),
    ),
}

PAIR_LABEL_ROLES = {"defender": D, "attacker": A}


@dataclass(frozen=True)
class FormationDefinition:
    """Slot table and scheme capabilities for one team configuration."""
    format: str
    squad_size: int
    shape: str
    substitution_type: SubstitutionType
    field_positions: Tuple[str, ...]
    substitute_positions: Tuple[str, ...]
    field_roles: Tuple[Tuple[str, PlayerRole], ...] = ()

    @property
    def is_pairs(self) -> bool:
        return self.substitution_type is SubstitutionType.PAIRS

    @property
    def position_order(self) -> Tuple[str, ...]:
        """Goalie, field slots, then substitute slots."""
        return (GOALIE_SLOT,) + self.field_positions + self.substitute_positions

    @property
    def substitute_count(self) -> int:
        return len(self.substitute_positions)

    @property
    def supports_inactive_players(self) -> bool:
        return not self.is_pairs

    @property
    def supports_next_next_indicators(self) -> bool:
        return not self.is_pairs and self.substitute_count >= 2

    @property
    def max_inactive_count(self) -> int:
        return self.substitute_count - 1 if self.supports_inactive_players else 0

    @property
    def bottom_substitute_position(self) -> str:
        return self.substitute_positions[-1]

    def is_field_position(self, slot: Optional[str]) -> bool:
        return slot in self.field_positions

    def is_substitute_position(self, slot: Optional[str]) -> bool:
        return slot in self.substitute_positions

    def position_index(self, slot: str) -> int:
        """Rank of a slot in the position order, or -1 when unknown."""
        try:
            return self.position_order.index(slot)
        except ValueError:
            return -1

    def role_for_slot(self, slot: Optional[str], label: Optional[str] = None) -> Optional[PlayerRole]:
        """
        Role a player takes when placed in a slot.

        Args:
            slot: Slot key
            label: Pair label ('defender' or 'attacker') for pair slots

        Returns:
            Role for the slot, or None for unknown slots
        """
        if slot == GOALIE_SLOT:
            return PlayerRole.GOALIE
        if self.is_substitute_position(slot):
            return PlayerRole.SUBSTITUTE
        if not self.is_field_position(slot):
            return None
        if self.is_pairs:
            return PAIR_LABEL_ROLES.get(label)
        return dict(self.field_roles).get(slot)

    def status_for_slot(self, slot: Optional[str]) -> Optional[PlayerStatus]:
        if slot == GOALIE_SLOT:
            return PlayerStatus.GOALIE
        if self.is_field_position(slot):
            return PlayerStatus.ON_FIELD
        if self.is_substitute_position(slot):
            return PlayerStatus.SUBSTITUTE
        return None


@lru_cache(maxsize=64)
def _build_definition(format: str, squad_size: int, shape: str,
                      substitution_type: SubstitutionType) -> FormationDefinition:
    if substitution_type is SubstitutionType.PAIRS:
        return FormationDefinition(
            format=format,
            squad_size=squad_size,
            shape=shape,
            substitution_type=substitution_type,
            field_positions=(LEFT_PAIR, RIGHT_PAIR),
            substitute_positions=(SUB_PAIR,),
        )

    layout = FIELD_LAYOUTS[shape]
    substitute_count = squad_size - 1 - len(layout)
    if substitute_count < 1:
        raise FormationDefinitionError(
            f"Squad of {squad_size} leaves no substitutes for shape {shape}"
        )
    substitutes = tuple(f"{SUBSTITUTE_PREFIX}{i}" for i in range(1, substitute_count + 1))
    logger.debug("Built %s definition %s with %d substitutes", format, shape, substitute_count)
    return FormationDefinition(
        format=format,
        squad_size=squad_size,
        shape=shape,
        substitution_type=substitution_type,
        field_positions=tuple(slot for slot, _ in layout),
        substitute_positions=substitutes,
        field_roles=layout,
    )


def get_formation_definition(team_config: TeamConfig, shape: Optional[str] = None) -> FormationDefinition:
    """
    Look up the formation definition for a team configuration.

    Args:
        team_config: Match configuration
        shape: Optional shape override (e.g. a per-period selection)

    Returns:
        The matching FormationDefinition

    Raises:
        FormationDefinitionError: If the configuration and shape are not supported
    """
    if team_config is None:
        raise FormationDefinitionError("Team configuration is required")
    config = team_config.with_shape(shape)
    try:
        validate_team_config(config)
    except TeamConfigError as e:
        raise FormationDefinitionError(str(e)) from e

    if len(FIELD_LAYOUTS[config.formation]) != FIELD_PLAYERS_BY_FORMAT[config.format]:
        raise FormationDefinitionError(
            f"Shape {config.formation} does not fit format {config.format}"
        )
    return _build_definition(config.format, config.squad_size, config.formation,
                             config.substitution_type)


def get_mode_definition(team_config: TeamConfig) -> FormationDefinition:
    """Definition for a configuration's own shape."""
    return get_formation_definition(team_config)


def definition_for_state(state) -> FormationDefinition:
    """Definition for a game state, honouring its selected shape."""
    return get_formation_definition(state.team_config, state.selected_formation)
