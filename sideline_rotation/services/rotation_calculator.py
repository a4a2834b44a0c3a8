"""
Rotation and substitution calculator.

Every public ``calculate_*`` function takes a GameState and returns a new
GameState. When an operation does not apply the same instance is returned
untouched; ``evaluate_operation`` gives the same outcome as a tagged
OperationResult carrying the reason.

Timestamps are epoch milliseconds supplied by the caller.
"""
import functools
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import (
    Formation, GameState, LastSubstitution, PairSlot, Player, PlayerStats,
    PlayerRole, PlayerStatus, StintState, TeamConfig,
)
from ..utils.constants import GOALIE_SLOT, SUB_PAIR
from .formation_definitions import (
    FormationDefinition, FormationDefinitionError,
    definition_for_state, get_formation_definition,
)
from .rotation_queue import RotationQueue
from .stint_manager import (
    handle_pause_resume_time, handle_role_change, transition_stint, update_player_time_stats,
)
from .time_calculator import calculate_duration_seconds, calculate_undo_timer_target

logger = logging.getLogger(__name__)


class SubstitutionRejected(Exception):
    """Raised inside a calculator when an operation does not apply."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class OperationStatus(Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one calculator call."""
    status: OperationStatus
    state: GameState
    players_to_highlight: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status is OperationStatus.APPLIED


def no_op_on_rejection(func: Callable[..., GameState]) -> Callable[..., GameState]:
    """Turn a SubstitutionRejected into returning the input state unchanged."""
    @functools.wraps(func)
    def wrapper(state: GameState, *args, **kwargs) -> GameState:
        try:
            return func(state, *args, **kwargs)
        except SubstitutionRejected as e:
            logger.warning("%s rejected: %s", func.__name__, e.reason)
            return state
    return wrapper


def evaluate_operation(operation: Callable[..., GameState], state: GameState, *args, **kwargs) -> OperationResult:
    """
    Run a calculator and report what happened.

    Args:
        operation: One of the ``calculate_*`` functions
        state: Current game state
        *args: Operation arguments after the state

    Returns:
        OperationResult with APPLIED, UNCHANGED or REJECTED status
    """
    raw = getattr(operation, "__wrapped__", operation)
    try:
        new_state = raw(state, *args, **kwargs)
    except SubstitutionRejected as e:
        logger.warning("%s rejected: %s", getattr(raw, "__name__", "operation"), e.reason)
        return OperationResult(OperationStatus.REJECTED, state, list(state.players_to_highlight), e.reason)

    if new_state is state:
        return OperationResult(OperationStatus.UNCHANGED, state, list(state.players_to_highlight))
    return OperationResult(OperationStatus.APPLIED, new_state, list(new_state.players_to_highlight))


# Helpers

def _definition(state: GameState) -> FormationDefinition:
    if state is None or state.formation is None or state.team_config is None:
        raise SubstitutionRejected("Game state is missing its formation or team configuration")
    try:
        return definition_for_state(state)
    except FormationDefinitionError as e:
        raise SubstitutionRejected(str(e)) from e


def _require_player(state: GameState, player_id: Optional[str]) -> Player:
    player = state.find_player(player_id)
    if player is None:
        raise SubstitutionRejected(f"Unknown player {player_id!r}")
    return player


def _replace_players(players: Iterable[Player], updates: Mapping[str, Player]) -> List[Player]:
    return [updates.get(p.id, p) for p in players]


def _fill_slots(positions: Sequence[str], occupants: Sequence[Optional[str]]) -> Dict[str, Optional[str]]:
    """Assign occupants to slots in order, padding with empty slots."""
    padded = list(occupants) + [None] * (len(positions) - len(occupants))
    return dict(zip(positions, padded))


def _substitute_ids(definition: FormationDefinition, formation: Formation) -> List[str]:
    return [formation.get(slot) for slot in definition.substitute_positions if formation.get(slot)]


def _split_active(ids: Iterable[str], lookup: Mapping[str, Player]):
    active, inactive = [], []
    for player_id in ids:
        player = lookup.get(player_id)
        if player is None:
            raise SubstitutionRejected(f"Unknown substitute {player_id!r}")
        (inactive if player.stats.is_inactive else active).append(player_id)
    return active, inactive


def _bench_key_updates(players: Mapping[str, Player], slots: Mapping[str, Optional[str]],
                       skip: Iterable[str] = ()) -> Dict[str, Player]:
    """Point bench players at their new substitute slots."""
    skip = set(skip)
    updates: Dict[str, Player] = {}
    for slot, player_id in slots.items():
        if not player_id or player_id in skip:
            continue
        player = players[player_id]
        if player.stats.current_pair_key != slot:
            updates[player_id] = player.with_stats(current_pair_key=slot)
    return updates


def _queue_pointers(definition: FormationDefinition, formation: Formation, queue: Sequence[str]) -> dict:
    """Next and next-next pointers taken from the queue head."""
    next_id = queue[0] if queue else None
    next_next_id = None
    if definition.supports_next_next_indicators and len(queue) > 1:
        next_next_id = queue[1]
    return {
        "next_player_id_to_sub_out": next_id,
        "next_next_player_id_to_sub_out": next_next_id,
        "next_player_to_sub_out": _field_slot_of(definition, formation, next_id),
    }


def _field_slot_of(definition: FormationDefinition, formation: Formation, player_id: Optional[str]) -> Optional[str]:
    location = formation.slot_of(player_id)
    if location and definition.is_field_position(location[0]):
        return location[0]
    return None


def _pair_priority_queue(definition: FormationDefinition, formation: Formation, next_pair: Optional[str],
                         lookup: Mapping[str, Player]) -> List[str]:
    """Pairs queue: next pair, the other field pair, then the bench pair, defenders first."""
    field_pairs = list(definition.field_positions)
    if next_pair in field_pairs:
        field_pairs.remove(next_pair)
        field_pairs.insert(0, next_pair)
    queue: List[str] = []
    for slot in field_pairs + list(definition.substitute_positions):
        pair = formation.get(slot)
        if not isinstance(pair, PairSlot):
            continue
        for player_id in pair.ids():
            player = lookup.get(player_id)
            if player is not None and not player.stats.is_inactive:
                queue.append(player_id)
    return queue


def _other_field_pair(definition: FormationDefinition, pair_key: str) -> str:
    left, right = definition.field_positions
    return right if pair_key == left else left


def _snapshot(state: GameState, definition: FormationDefinition, now_epoch_ms: int,
              going_off: List[str], coming_on: List[str]) -> LastSubstitution:
    lookup = state.player_lookup()
    return LastSubstitution(
        timestamp=now_epoch_ms,
        before_formation=state.formation,
        before_next_pair=state.next_physical_pair_to_sub_out,
        before_next_player=state.next_player_to_sub_out,
        before_next_player_id=state.next_player_id_to_sub_out,
        before_next_next_player_id=state.next_next_player_id_to_sub_out,
        before_rotation_queue=list(state.rotation_queue),
        players_going_off_ids=list(going_off),
        players_coming_on_ids=list(coming_on),
        players_coming_on_original_stats={pid: lookup[pid].stats for pid in coming_on},
        players_going_off_original_stats={pid: lookup[pid].stats for pid in going_off},
        substitution_type=definition.substitution_type,
        sub_timer_seconds_at_substitution=state.sub_timer_seconds,
    )


# Substitution

def _pairs_substitution(state: GameState, definition: FormationDefinition, now_epoch_ms: int) -> GameState:
    out_key = state.next_physical_pair_to_sub_out
    if not definition.is_field_position(out_key):
        raise SubstitutionRejected(f"No field pair to substitute: {out_key!r}")

    out_pair = state.formation.get(out_key)
    in_pair = state.formation.get(SUB_PAIR)
    if not isinstance(out_pair, PairSlot) or not isinstance(in_pair, PairSlot) or not in_pair.ids():
        raise SubstitutionRejected("Pair formation is incomplete")

    going_off = out_pair.ids()
    coming_on = in_pair.ids()
    formation = state.formation.with_slots({out_key: in_pair, SUB_PAIR: out_pair})
    paused = state.is_sub_timer_paused

    updates: Dict[str, Player] = {}
    for player in state.all_players:
        if player.id in going_off:
            updates[player.id] = transition_stint(player, now_epoch_ms, paused).with_stats(
                current_status=PlayerStatus.SUBSTITUTE,
                current_role=PlayerRole.SUBSTITUTE,
                current_pair_key=SUB_PAIR,
            )
        elif player.id in coming_on:
            updates[player.id] = transition_stint(player, now_epoch_ms, paused).with_stats(
                current_status=PlayerStatus.ON_FIELD,
                current_role=definition.role_for_slot(out_key, in_pair.label_of(player.id)),
                current_pair_key=out_key,
            )

    next_pair = _other_field_pair(definition, out_key)
    players = _replace_players(state.all_players, updates)
    queue = _pair_priority_queue(definition, formation, next_pair, {p.id: p for p in players})
    logger.debug("Pair %s substituted, next pair %s", out_key, next_pair)

    return replace(
        state,
        formation=formation,
        all_players=players,
        rotation_queue=queue,
        next_physical_pair_to_sub_out=next_pair,
        players_to_highlight=coming_on,
        last_substitution=_snapshot(state, definition, now_epoch_ms, going_off, coming_on),
        sub_timer_seconds=0,
    )


def _individual_substitution(state: GameState, definition: FormationDefinition, now_epoch_ms: int) -> GameState:
    formation = state.formation
    outgoing_id = state.next_player_id_to_sub_out
    out_slot = _field_slot_of(definition, formation, outgoing_id)
    if out_slot is None:
        raise SubstitutionRejected(f"Player to sub out {outgoing_id!r} is not on the field")

    lookup = state.player_lookup()
    first_slot = definition.substitute_positions[0]
    active, inactive = _split_active(_substitute_ids(definition, formation), lookup)
    if not active or active[0] != formation.get(first_slot):
        raise SubstitutionRejected(f"{first_slot} is empty or inactive")

    incoming_id = active[0]
    bench = _fill_slots(definition.substitute_positions, active[1:] + [outgoing_id] + inactive)
    formation = formation.with_slots({out_slot: incoming_id, **bench})
    paused = state.is_sub_timer_paused

    updates = _bench_key_updates(lookup, bench, skip=(outgoing_id,))
    new_bench_slot = next(slot for slot, pid in bench.items() if pid == outgoing_id)
    updates[outgoing_id] = transition_stint(lookup[outgoing_id], now_epoch_ms, paused).with_stats(
        current_status=PlayerStatus.SUBSTITUTE,
        current_role=PlayerRole.SUBSTITUTE,
        current_pair_key=new_bench_slot,
    )
    updates[incoming_id] = transition_stint(lookup[incoming_id], now_epoch_ms, paused).with_stats(
        current_status=PlayerStatus.ON_FIELD,
        current_role=definition.role_for_slot(out_slot),
        current_pair_key=out_slot,
    )

    players = _replace_players(state.all_players, updates)
    queue = RotationQueue(state.rotation_queue, {p.id: p for p in players}.get)
    queue.initialize()
    if queue.contains(outgoing_id):
        queue.rotate_player(outgoing_id)
    else:
        queue.add_player(outgoing_id)
    queue_list = queue.to_list()
    logger.debug("Substituted %s for %s at %s", incoming_id, outgoing_id, out_slot)

    return replace(
        state,
        formation=formation,
        all_players=players,
        rotation_queue=queue_list,
        players_to_highlight=[incoming_id],
        last_substitution=_snapshot(state, definition, now_epoch_ms, [outgoing_id], [incoming_id]),
        sub_timer_seconds=0,
        **_queue_pointers(definition, formation, queue_list),
    )


@no_op_on_rejection
def calculate_substitution(state: GameState, now_epoch_ms: int) -> GameState:
    """
    Perform the timed substitution that is due.

    Pairs scheme: the next field pair swaps with the bench pair and the
    next pair flips. Individual scheme: the next player swaps with
    ``substitute_1`` and the remaining active substitutes move up one
    slot, the outgoing player taking the lowest active substitute slot.

    Args:
        state: Current game state
        now_epoch_ms: Current time

    Returns:
        New state, or the same state when no substitution can be made
    """
    try:
        definition = _definition(state)
        if definition.is_pairs:
            return _pairs_substitution(state, definition, now_epoch_ms)
        return _individual_substitution(state, definition, now_epoch_ms)
    except SubstitutionRejected:
        raise
    except Exception as e:
        logger.exception("Substitution failed, state left unchanged")
        raise SubstitutionRejected(f"Substitution failed: {e}") from e


# Position and goalie changes

@no_op_on_rejection
def calculate_position_switch(state: GameState, player_a_id: str, player_b_id: str,
                              now_epoch_ms: int) -> GameState:
    """Swap two field players' positions, each taking the role of the new position."""
    if not player_a_id or not player_b_id or player_a_id == player_b_id:
        raise SubstitutionRejected("Position switch needs two different players")
    definition = _definition(state)
    player_a = _require_player(state, player_a_id)
    player_b = _require_player(state, player_b_id)
    formation = state.formation
    if formation.goalie in (player_a_id, player_b_id):
        raise SubstitutionRejected("Cannot switch positions with the goalie")

    loc_a = formation.slot_of(player_a_id)
    loc_b = formation.slot_of(player_b_id)
    if not loc_a or not loc_b or not definition.is_field_position(loc_a[0]) \
            or not definition.is_field_position(loc_b[0]):
        raise SubstitutionRejected("Both players must hold field positions")

    (slot_a, label_a), (slot_b, label_b) = loc_a, loc_b
    paused = state.is_sub_timer_paused

    if definition.is_pairs:
        if slot_a == slot_b:
            new_slots = {slot_a: formation.get(slot_a).swapped()}
        else:
            new_slots = {
                slot_a: formation.get(slot_a).with_label(label_a, player_b_id),
                slot_b: formation.get(slot_b).with_label(label_b, player_a_id),
            }
    else:
        new_slots = {slot_a: player_b_id, slot_b: player_a_id}

    updates = {
        player_a_id: handle_role_change(
            player_a, definition.role_for_slot(slot_b, label_b), now_epoch_ms, paused
        ).with_stats(current_pair_key=slot_b),
        player_b_id: handle_role_change(
            player_b, definition.role_for_slot(slot_a, label_a), now_epoch_ms, paused
        ).with_stats(current_pair_key=slot_a),
    }
    new_formation = formation.with_slots(new_slots)
    players = _replace_players(state.all_players, updates)

    changes = {}
    if definition.is_pairs:
        changes["rotation_queue"] = _pair_priority_queue(
            definition, new_formation, state.next_physical_pair_to_sub_out, {p.id: p for p in players}
        )
    else:
        changes["next_player_to_sub_out"] = _field_slot_of(
            definition, new_formation, state.next_player_id_to_sub_out
        ) or state.next_player_to_sub_out

    return replace(
        state,
        formation=new_formation,
        all_players=players,
        players_to_highlight=[player_a_id, player_b_id],
        **changes,
    )


@no_op_on_rejection
def calculate_goalie_switch(state: GameState, new_goalie_id: str, now_epoch_ms: int) -> GameState:
    """
    Put a new player in goal.

    The former goalie takes the new goalie's slot and their exact index in
    the rotation queue.
    """
    definition = _definition(state)
    formation = state.formation
    if not new_goalie_id or new_goalie_id == formation.goalie:
        raise SubstitutionRejected("New goalie must differ from the current goalie")
    new_goalie = _require_player(state, new_goalie_id)
    if new_goalie.stats.is_inactive:
        raise SubstitutionRejected(f"Inactive player {new_goalie_id} cannot be goalie")
    old_goalie_id = formation.goalie
    old_goalie = state.find_player(old_goalie_id)
    if old_goalie is None:
        raise SubstitutionRejected("Current goalie is unknown")

    location = formation.slot_of(new_goalie_id)
    if location is None:
        raise SubstitutionRejected(f"Player {new_goalie_id} has no position")
    slot, label = location

    occupant = formation.get(slot)
    if isinstance(occupant, PairSlot):
        new_slot_value = occupant.with_label(label, old_goalie_id)
    else:
        new_slot_value = old_goalie_id
    new_formation = formation.with_slots({slot: new_slot_value}).with_goalie(new_goalie_id)

    paused = state.is_sub_timer_paused
    updates = {
        old_goalie_id: handle_role_change(
            old_goalie, definition.role_for_slot(slot, label), now_epoch_ms, paused,
            new_status=definition.status_for_slot(slot),
        ).with_stats(current_pair_key=slot),
        new_goalie_id: handle_role_change(
            new_goalie, PlayerRole.GOALIE, now_epoch_ms, paused, new_status=PlayerStatus.GOALIE,
        ).with_stats(current_pair_key=GOALIE_SLOT),
    }
    players = _replace_players(state.all_players, updates)

    queue = RotationQueue.for_state(state)
    if not queue.replace_player(new_goalie_id, old_goalie_id):
        queue.add_player(old_goalie_id)
    queue_list = queue.to_list()

    next_id = state.next_player_id_to_sub_out
    next_next_id = state.next_next_player_id_to_sub_out
    supports_next_next = definition.supports_next_next_indicators
    if new_goalie_id == next_id:
        next_id = queue_list[0] if queue_list else None
        if supports_next_next and len(queue_list) > 1:
            next_next_id = queue_list[1]
    elif new_goalie_id == next_next_id and supports_next_next:
        next_next_id = queue_list[1] if len(queue_list) > 1 else None

    next_slot = state.next_player_to_sub_out
    if not definition.is_pairs:
        next_slot = _field_slot_of(definition, new_formation, next_id) or next_slot

    return replace(
        state,
        formation=new_formation,
        all_players=players,
        rotation_queue=queue_list,
        next_player_id_to_sub_out=next_id,
        next_next_player_id_to_sub_out=next_next_id,
        next_player_to_sub_out=next_slot,
        players_to_highlight=[old_goalie_id, new_goalie_id],
    )


# Bench management

def _require_bench_scheme(definition: FormationDefinition, minimum_substitutes: int = 1) -> None:
    if definition.is_pairs or definition.substitute_count < minimum_substitutes:
        raise SubstitutionRejected("Operation needs an individual scheme with more substitutes")


@no_op_on_rejection
def calculate_player_toggle_inactive(state: GameState, player_id: str) -> GameState:
    """
    Deactivate or reactivate a substitute.

    A deactivated player drops to the bottom substitute slot and leaves the
    rotation queue; a reactivated one moves to ``substitute_1`` and rejoins
    the queue ahead of the other substitutes.
    """
    definition = _definition(state)
    if not definition.supports_inactive_players:
        raise SubstitutionRejected("Inactive players are not supported for this scheme")
    player = _require_player(state, player_id)
    location = state.formation.slot_of(player_id)
    if not location or not definition.is_substitute_position(location[0]):
        raise SubstitutionRejected(f"Only substitutes can change active state, {player_id} is not one")

    lookup = state.player_lookup()
    others = [pid for pid in _substitute_ids(definition, state.formation) if pid != player_id]
    becoming_inactive = not player.stats.is_inactive
    if becoming_inactive:
        inactive_count = sum(1 for pid in others if lookup[pid].stats.is_inactive)
        if inactive_count + 1 > definition.max_inactive_count:
            raise SubstitutionRejected(f"Player {player_id} is the last active substitute")

    queue = RotationQueue.for_state(state)
    if becoming_inactive:
        order = others + [player_id]
        queue.deactivate_player(player_id)
    else:
        order = [player_id] + others
        queue.reactivate_player(player_id, len(definition.field_positions))

    bench = _fill_slots(definition.substitute_positions, order)
    formation = state.formation.with_slots(bench)
    updates = _bench_key_updates(lookup, bench, skip=(player_id,))
    if becoming_inactive:
        new_slot = definition.bottom_substitute_position
    else:
        new_slot = definition.substitute_positions[0]
    updates[player_id] = player.with_stats(is_inactive=becoming_inactive, current_pair_key=new_slot)
    queue_list = queue.to_list()
    logger.debug("Player %s is now %s", player_id, "inactive" if becoming_inactive else "active")

    return replace(
        state,
        formation=formation,
        all_players=_replace_players(state.all_players, updates),
        rotation_queue=queue_list,
        players_to_highlight=[],
        **_queue_pointers(definition, formation, queue_list),
    )


def _resync_bench_queue(state: GameState, definition: FormationDefinition, formation: Formation) -> List[str]:
    """Field players keep their queue order; substitutes follow in slot order."""
    queue = RotationQueue.for_state(state)
    field_ids = set(formation.get(slot) for slot in definition.field_positions)
    on_field = [pid for pid in queue.to_list() if pid in field_ids]
    queue.reorder_by_positions(on_field + _substitute_ids(definition, formation))
    return queue.to_list()


def _bench_reorder(state: GameState, definition: FormationDefinition, order: List[str],
                   highlight: List[str]) -> GameState:
    bench = _fill_slots(definition.substitute_positions, order)
    formation = state.formation.with_slots(bench)
    updates = _bench_key_updates(state.player_lookup(), bench)
    return replace(
        state,
        formation=formation,
        all_players=_replace_players(state.all_players, updates),
        rotation_queue=_resync_bench_queue(state, definition, formation),
        players_to_highlight=highlight,
    )


def _active_bench_occupant(state: GameState, definition: FormationDefinition, slot: str) -> str:
    if not definition.is_substitute_position(slot):
        raise SubstitutionRejected(f"{slot!r} is not a substitute slot")
    player = _require_player(state, state.formation.get(slot))
    if player.stats.is_inactive:
        raise SubstitutionRejected(f"Inactive player {player.id} cannot be reordered")
    return player.id


@no_op_on_rejection
def calculate_general_substitute_swap(state: GameState, slot_a: str, slot_b: str) -> GameState:
    """Swap the occupants of two substitute slots."""
    definition = _definition(state)
    _require_bench_scheme(definition, minimum_substitutes=2)
    if slot_a == slot_b:
        raise SubstitutionRejected("Cannot swap a substitute slot with itself")
    id_a = _active_bench_occupant(state, definition, slot_a)
    id_b = _active_bench_occupant(state, definition, slot_b)

    order = [state.formation.get(slot) for slot in definition.substitute_positions]
    index_a = definition.substitute_positions.index(slot_a)
    index_b = definition.substitute_positions.index(slot_b)
    order[index_a], order[index_b] = order[index_b], order[index_a]
    return _bench_reorder(state, definition, order, [id_a, id_b])


@no_op_on_rejection
def calculate_substitute_reorder(state: GameState, target_slot: str) -> GameState:
    """Move a substitute to the front of the bench, shifting those ahead of it back one slot."""
    definition = _definition(state)
    _require_bench_scheme(definition, minimum_substitutes=2)
    target_id = _active_bench_occupant(state, definition, target_slot)
    index = definition.substitute_positions.index(target_slot)
    if index == 0:
        raise SubstitutionRejected(f"{target_slot} is already first")

    order = [state.formation.get(slot) for slot in definition.substitute_positions]
    shifted = order[:index]
    order = [target_id] + shifted + order[index + 1:]
    return _bench_reorder(state, definition, order, [target_id] + [pid for pid in shifted if pid])


@no_op_on_rejection
def calculate_next_substitution_target(state: GameState, target: str, kind: str) -> GameState:
    """
    Choose which pair or player comes off next.

    Args:
        state: Current game state
        target: Field pair key for kind 'pair', field slot for kind 'player'
        kind: 'pair' or 'player'; anything else leaves the state unchanged
    """
    if kind not in ("pair", "player"):
        return state
    definition = _definition(state)
    if not definition.is_field_position(target):
        raise SubstitutionRejected(f"{target!r} is not a field position")

    if kind == "pair":
        if not definition.is_pairs:
            raise SubstitutionRejected("Pair targets need the pairs scheme")
        if state.next_physical_pair_to_sub_out == target:
            return state
        return replace(state, next_physical_pair_to_sub_out=target)

    player_id = state.formation.get(target)
    if definition.is_pairs or not player_id:
        raise SubstitutionRejected(f"{target!r} has no single player to target")
    if state.next_player_to_sub_out == target and state.next_player_id_to_sub_out == player_id:
        return state
    return replace(state, next_player_to_sub_out=target, next_player_id_to_sub_out=player_id)


@no_op_on_rejection
def calculate_pair_position_swap(state: GameState, pair_key: str, now_epoch_ms: int) -> GameState:
    """
    Swap the defender and attacker of one pair.

    Field pair players switch role time buckets from now on; bench pair
    players remain substitutes whichever label they hold.
    """
    definition = _definition(state)
    if not definition.is_pairs:
        raise SubstitutionRejected("Pair position swap needs the pairs scheme")
    if pair_key not in definition.field_positions + definition.substitute_positions:
        raise SubstitutionRejected(f"Unknown pair {pair_key!r}")
    pair = state.formation.get(pair_key)
    if not isinstance(pair, PairSlot) or not pair.is_complete:
        raise SubstitutionRejected(f"Pair {pair_key} is incomplete")

    swapped = pair.swapped()
    formation = state.formation.with_slots({pair_key: swapped})
    lookup = state.player_lookup()
    updates: Dict[str, Player] = {}
    if definition.is_field_position(pair_key):
        for player_id in pair.ids():
            role = definition.role_for_slot(pair_key, swapped.label_of(player_id))
            updates[player_id] = handle_role_change(
                lookup[player_id], role, now_epoch_ms, state.is_sub_timer_paused
            )
    players = _replace_players(state.all_players, updates)

    return replace(
        state,
        formation=formation,
        all_players=players,
        rotation_queue=_pair_priority_queue(
            definition, formation, state.next_physical_pair_to_sub_out, {p.id: p for p in players}
        ),
        players_to_highlight=[pair.defender, pair.attacker],
    )


# Undo

@no_op_on_rejection
def calculate_undo(state: GameState, last_substitution: Optional[LastSubstitution],
                   now_epoch_ms: int) -> GameState:
    """
    Reverse the last substitution.

    Incoming players get their pre-substitution counters back, plus the
    time they were tracked since then counted as bench time. Their stint
    restarts at now and follows the current clock state.

    Outgoing players return to their positions, keep the time credited up
    to the substitution and are credited the wall-clock time since as
    field time. That interval includes any time the clock was paused in
    between, so pauses after a substitution still count when it is undone.
    """
    if last_substitution is None:
        raise SubstitutionRejected("No substitution to undo")
    definition = _definition(state)
    if last_substitution.substitution_type is not definition.substitution_type:
        raise SubstitutionRejected("Substitution was made under a different scheme")

    before = last_substitution.before_formation
    if before.goalie != state.formation.goalie:
        raise SubstitutionRejected("Goalie changed since the substitution")
    elapsed = calculate_duration_seconds(last_substitution.timestamp, now_epoch_ms)
    coming_on = set(last_substitution.players_coming_on_ids)
    going_off = set(last_substitution.players_going_off_ids)

    updates: Dict[str, Player] = {}
    for player in state.all_players:
        location = before.slot_of(player.id)
        slot, label = location if location else (None, None)
        if player.id in coming_on:
            original = last_substitution.players_coming_on_original_stats.get(player.id)
            if original is not None:
                updates[player.id] = _restore_incoming(
                    player, original, state.is_sub_timer_paused, slot, now_epoch_ms
                )
        elif player.id in going_off:
            updates[player.id] = _restore_outgoing(
                player, last_substitution, definition, slot, label, elapsed, now_epoch_ms
            )
        elif slot and player.stats.current_pair_key != slot:
            updates[player.id] = player.with_stats(current_pair_key=slot)

    return replace(
        state,
        formation=before,
        all_players=_replace_players(state.all_players, updates),
        rotation_queue=list(last_substitution.before_rotation_queue),
        next_physical_pair_to_sub_out=last_substitution.before_next_pair,
        next_player_to_sub_out=last_substitution.before_next_player,
        next_player_id_to_sub_out=last_substitution.before_next_player_id,
        next_next_player_id_to_sub_out=last_substitution.before_next_next_player_id,
        players_to_highlight=list(last_substitution.players_going_off_ids),
        last_substitution=None,
        sub_timer_seconds=calculate_undo_timer_target(
            last_substitution.sub_timer_seconds_at_substitution, last_substitution.timestamp, now_epoch_ms
        ),
    )


def _restore_incoming(player: Player, original: PlayerStats, is_paused: bool, slot: Optional[str],
                      now_epoch_ms: int) -> Player:
    flushed = update_player_time_stats(player, now_epoch_ms, is_paused)
    tracked = flushed.stats.total_tracked_seconds - original.total_tracked_seconds
    stats = replace(
        original,
        time_as_sub_seconds=original.time_as_sub_seconds + max(tracked, 0),
        last_stint_start_time_epoch=now_epoch_ms,
        stint_state=StintState.PAUSED_FLUSHED if is_paused else StintState.RUNNING,
        current_pair_key=slot or original.current_pair_key,
    )
    return replace(player, stats=stats)


def _restore_outgoing(player: Player, last_substitution: LastSubstitution, definition: FormationDefinition,
                      slot: Optional[str], label: Optional[str], elapsed: int, now_epoch_ms: int) -> Player:
    original = last_substitution.players_going_off_original_stats.get(player.id, player.stats)
    role = definition.role_for_slot(slot, label) or original.current_role
    stats = player.stats
    changes = {
        "time_on_field_seconds": stats.time_on_field_seconds + elapsed,
        "time_as_sub_seconds": original.time_as_sub_seconds,
        "current_status": PlayerStatus.ON_FIELD,
        "current_role": role,
        "current_pair_key": slot or original.current_pair_key,
        "last_stint_start_time_epoch": now_epoch_ms,
    }
    bucket = {
        PlayerRole.DEFENDER: "time_as_defender_seconds",
        PlayerRole.ATTACKER: "time_as_attacker_seconds",
        PlayerRole.MIDFIELDER: "time_as_midfielder_seconds",
    }.get(original.current_role)
    if bucket:
        changes[bucket] = getattr(stats, bucket) + elapsed
    return player.with_stats(**changes)


# Clock and kickoff

def calculate_pause_resume(state: GameState, now_epoch_ms: int, is_pausing: bool) -> GameState:
    """Pause or resume the substitution clock for every player."""
    if state.is_sub_timer_paused == is_pausing:
        return state
    players = [handle_pause_resume_time(p, now_epoch_ms, is_pausing) for p in state.all_players]
    return replace(state, all_players=players, is_sub_timer_paused=is_pausing)


def initialize_player_role_and_status(player_id: str, formation: Formation, definition: FormationDefinition):
    """
    Status, role and slot for a player at kickoff.

    Returns:
        (status, role, slot) with None values for players not in the formation
    """
    location = formation.slot_of(player_id)
    if location is None:
        return None, None, None
    slot, label = location
    return definition.status_for_slot(slot), definition.role_for_slot(slot, label), slot


def initialize_game_state(team_config: TeamConfig, formation: Formation, players: Sequence[Player],
                          now_epoch_ms: int, selected_formation: Optional[str] = None,
                          is_sub_timer_paused: bool = False) -> GameState:
    """
    Build the game state at kickoff.

    Args:
        team_config: Match configuration
        formation: Starting line-up
        players: Selected squad
        now_epoch_ms: Kickoff time
        selected_formation: Optional shape override
        is_sub_timer_paused: Whether the substitution clock starts paused

    Returns:
        Initial GameState with counters reset and stints started

    Raises:
        FormationDefinitionError: If the configuration is not supported
        ValueError: If the line-up does not fit the definition or squad
    """
    definition = get_formation_definition(team_config, selected_formation)
    lookup = {p.id: p for p in players}
    occupants = formation.occupant_ids()
    if not formation.goalie:
        raise ValueError("Formation has no goalie")
    if len(occupants) != len(set(occupants)):
        raise ValueError("A player appears in more than one position")
    unknown = [pid for pid in occupants if pid not in lookup]
    if unknown:
        raise ValueError(f"Formation references unknown players: {', '.join(unknown)}")
    extra = set(formation.slots) - set(definition.field_positions + definition.substitute_positions)
    if extra:
        raise ValueError(f"Formation has slots not in {definition.shape}: {', '.join(sorted(extra))}")
    for player_id in occupants:
        location = formation.slot_of(player_id)
        if lookup[player_id].stats.is_inactive and not definition.is_substitute_position(location[0]):
            raise ValueError(f"Inactive player {player_id} must start on the bench")
    inactive_count = sum(1 for pid in occupants if lookup[pid].stats.is_inactive)
    if inactive_count > definition.max_inactive_count:
        raise ValueError(f"At most {definition.max_inactive_count} substitutes may start inactive")

    stint_state = StintState.PAUSED_FLUSHED if is_sub_timer_paused else StintState.RUNNING
    initialized: List[Player] = []
    for player in players:
        status, role, slot = initialize_player_role_and_status(player.id, formation, definition)
        stats = player.stats.reset_for_new_match()
        if status is not None:
            stats = replace(
                stats,
                current_status=status,
                current_role=role,
                current_pair_key=slot,
                started_match_as=status,
                last_stint_start_time_epoch=now_epoch_ms,
                stint_state=stint_state,
            )
        initialized.append(replace(player, stats=stats))
    new_lookup = {p.id: p for p in initialized}

    state = GameState(
        formation=formation,
        all_players=initialized,
        team_config=team_config,
        selected_formation=selected_formation,
        is_sub_timer_paused=is_sub_timer_paused,
    )
    if definition.is_pairs:
        next_pair = definition.field_positions[0]
        return replace(
            state,
            rotation_queue=_pair_priority_queue(definition, formation, next_pair, new_lookup),
            next_physical_pair_to_sub_out=next_pair,
        )

    ordered = [formation.get(slot) for slot in definition.field_positions + definition.substitute_positions]
    queue = RotationQueue([pid for pid in ordered if pid], new_lookup.get)
    queue.initialize()
    queue_list = queue.to_list()
    return replace(state, rotation_queue=queue_list, **_queue_pointers(definition, formation, queue_list))
