"""
Position diffs for animating player movement.

The UI lists positions top to bottom in the definition's position order
(goalie first). A snapshot maps each player to the index of the box they
occupy; diffing two snapshots gives the vertical distance each player
has to travel.
"""
import logging
from typing import Any, Dict, Optional

from ..models import Formation, PairSlot, TeamConfig
from ..utils.constants import (
    ANIMATION_BOX_BORDER,
    ANIMATION_BOX_GAP,
    ANIMATION_BOX_PADDING,
    ANIMATION_CONTENT_HEIGHT_INDIVIDUAL,
    ANIMATION_CONTENT_HEIGHT_PAIRS,
    ANIMATION_DISTANCE_FACTOR,
    GOALIE_SLOT,
)
from .formation_definitions import FormationDefinitionError, get_formation_definition

logger = logging.getLogger(__name__)

PositionSnapshot = Dict[str, Dict[str, Any]]


def get_box_height(team_config: Optional[TeamConfig]) -> int:
    """Rendered height of one position box including its gap."""
    pairs = team_config is not None and team_config.is_pairs
    content = ANIMATION_CONTENT_HEIGHT_PAIRS if pairs else ANIMATION_CONTENT_HEIGHT_INDIVIDUAL
    return ANIMATION_BOX_PADDING + ANIMATION_BOX_BORDER + content + ANIMATION_BOX_GAP


def calculate_distance(from_index: int, to_index: int, team_config: Optional[TeamConfig]) -> float:
    """
    Signed pixel distance between two position indices.

    Returns:
        Positive for downward movement, negative for upward, 0 when either
        index is unknown or both are equal
    """
    if from_index == -1 or to_index == -1 or from_index == to_index:
        return 0
    distance = abs(to_index - from_index) * get_box_height(team_config) * ANIMATION_DISTANCE_FACTOR
    return distance if to_index > from_index else -distance


def capture_all_player_positions(formation: Optional[Formation], players, team_config: Optional[TeamConfig],
                                 shape: Optional[str] = None) -> PositionSnapshot:
    """
    Snapshot where every player sits in the position order.

    Args:
        formation: Formation to capture
        players: Squad, unused since positions come from the formation
        team_config: Match configuration
        shape: Optional shape override

    Returns:
        Map of player id to ``player_id``, ``position``, ``position_index``
        and, for pair slots, ``role``
    """
    if formation is None or team_config is None:
        return {}
    try:
        definition = get_formation_definition(team_config, shape)
    except FormationDefinitionError as e:
        logger.warning("Cannot capture positions: %s", e)
        return {}

    positions: PositionSnapshot = {}
    if formation.goalie:
        positions[formation.goalie] = {
            "player_id": formation.goalie,
            "position": GOALIE_SLOT,
            "position_index": definition.position_index(GOALIE_SLOT),
        }

    for slot in definition.field_positions + definition.substitute_positions:
        occupant = formation.get(slot)
        index = definition.position_index(slot)
        if isinstance(occupant, PairSlot):
            for role, player_id in (("defender", occupant.defender), ("attacker", occupant.attacker)):
                if player_id:
                    positions[player_id] = {
                        "player_id": player_id,
                        "position": slot,
                        "position_index": index,
                        "role": role,
                    }
        elif occupant:
            positions[occupant] = {
                "player_id": occupant,
                "position": slot,
                "position_index": index,
            }
    return positions


def calculate_all_player_animations(before: Optional[PositionSnapshot], after: Optional[PositionSnapshot],
                                    team_config: Optional[TeamConfig]) -> Dict[str, Dict[str, Any]]:
    """Movement for each player whose position index changed."""
    animations: Dict[str, Dict[str, Any]] = {}
    if not before or not after:
        return animations

    for player_id, start in before.items():
        end = after.get(player_id)
        if not end or start["position_index"] == end["position_index"]:
            continue
        distance = calculate_distance(start["position_index"], end["position_index"], team_config)
        if distance != 0:
            animations[player_id] = {
                "player_id": player_id,
                "distance": distance,
                "direction": "down" if distance > 0 else "up",
                "from_position": start["position"],
                "to_position": end["position"],
            }
    return animations
