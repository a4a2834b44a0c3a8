"""
Consistency checks for game states.

Each rule inspects one invariant of a GameState and reports violations
as error messages; GameStateValidator runs them all.
"""
from abc import ABC, abstractmethod
from collections import Counter
from typing import List, Optional

from ..models import GameState, PairSlot, PlayerStatus
from .formation_definitions import FormationDefinition, FormationDefinitionError, definition_for_state


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def combine(self, other: 'ValidationResult') -> 'ValidationResult':
        """Combine with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors
        )


class ValidationRule(ABC):
    """A single invariant over a game state."""

    @abstractmethod
    def validate(self, state: GameState, definition: FormationDefinition) -> ValidationResult:
        """Check the invariant and return the result."""


class SlotExclusivityRule(ValidationRule):
    """Every active player holds exactly one slot and no slot holds an unknown player."""

    def validate(self, state: GameState, definition: FormationDefinition) -> ValidationResult:
        result = ValidationResult()
        occupants = state.formation.occupant_ids()
        counts = Counter(occupants)
        for player_id, count in counts.items():
            if count > 1:
                result.add_error(f"Player {player_id} occupies {count} positions")

        known = set(definition.field_positions + definition.substitute_positions)
        for slot in state.formation.slots:
            if slot not in known:
                result.add_error(f"Unknown slot {slot} in formation")

        lookup = state.player_lookup()
        for player_id in occupants:
            if player_id not in lookup:
                result.add_error(f"Formation references unknown player {player_id}")

        placed = set(occupants)
        for player in state.all_players:
            if player.stats.current_status is not None and player.id not in placed:
                result.add_error(f"Player {player.id} has a status but no position")
        return result


class GoalieExclusivityRule(ValidationRule):
    """The goalie holds no other slot and is the only player with goalie status."""

    def validate(self, state: GameState, definition: FormationDefinition) -> ValidationResult:
        result = ValidationResult()
        goalie = state.formation.goalie
        if not goalie:
            result.add_error("Formation has no goalie")
            return result

        for slot, occupant in state.formation.slots.items():
            ids = occupant.ids() if isinstance(occupant, PairSlot) else [occupant]
            if goalie in ids:
                result.add_error(f"Goalie {goalie} also occupies {slot}")

        for player in state.all_players:
            is_goalie = player.stats.current_status is PlayerStatus.GOALIE
            if is_goalie and player.id != goalie:
                result.add_error(f"Player {player.id} has goalie status but is not in goal")
        return result


class RotationQueueConservationRule(ValidationRule):
    """The queue holds each active non-goalie player exactly once."""

    def validate(self, state: GameState, definition: FormationDefinition) -> ValidationResult:
        result = ValidationResult()
        queue = state.rotation_queue
        duplicates = [pid for pid, count in Counter(queue).items() if count > 1]
        if duplicates:
            result.add_error(f"Players queued more than once: {', '.join(duplicates)}")

        lookup = state.player_lookup()
        goalie = state.formation.goalie
        expected = {
            pid for pid in state.formation.occupant_ids()
            if pid != goalie and pid in lookup and not lookup[pid].stats.is_inactive
        }
        actual = set(queue)
        missing = expected - actual
        unexpected = actual - expected
        if missing:
            result.add_error(f"Active players missing from queue: {', '.join(sorted(missing))}")
        if unexpected:
            result.add_error(f"Queue holds goalie, inactive or unknown players: {', '.join(sorted(unexpected))}")
        return result


class PairKeyConsistencyRule(ValidationRule):
    """Each placed player's slot back-reference and status match the formation."""

    def validate(self, state: GameState, definition: FormationDefinition) -> ValidationResult:
        result = ValidationResult()
        for player in state.all_players:
            location = state.formation.slot_of(player.id)
            if location is None:
                continue
            slot = location[0]
            if player.stats.current_pair_key != slot:
                result.add_error(
                    f"Player {player.id} records slot {player.stats.current_pair_key}, formation has {slot}"
                )
            expected_status = definition.status_for_slot(slot)
            if player.stats.current_status is not expected_status:
                result.add_error(
                    f"Player {player.id} has status {player.stats.current_status}, slot {slot} implies {expected_status}"
                )
        return result


class GameStateValidator:
    """Runs every invariant rule over a game state."""

    def __init__(self, rules: Optional[List[ValidationRule]] = None):
        self.rules = rules if rules is not None else [
            SlotExclusivityRule(),
            GoalieExclusivityRule(),
            RotationQueueConservationRule(),
            PairKeyConsistencyRule(),
        ]

    def validate(self, state: GameState) -> ValidationResult:
        """
        Check all invariants.

        Args:
            state: Game state to check

        Returns:
            Combined ValidationResult
        """
        try:
            definition = definition_for_state(state)
        except FormationDefinitionError as e:
            return ValidationResult(False, [str(e)])

        result = ValidationResult()
        for rule in self.rules:
            result = result.combine(rule.validate(state, definition))
        return result
