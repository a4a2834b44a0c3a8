"""
Unit tests for game state consistency rules.
"""
import unittest
from dataclasses import replace

from sideline_rotation.models import PairSlot, PlayerStatus
from sideline_rotation.services import calculate_substitution
from sideline_rotation.services.formation_validator import (
    GameStateValidator,
    GoalieExclusivityRule,
    ValidationResult,
)

from tests.builders import individual_state, pairs_state, seconds_after_start


class TestValidationResult(unittest.TestCase):
    """Test ValidationResult bookkeeping."""

    def test_add_error_and_combine(self) -> None:
        first = ValidationResult()
        second = ValidationResult()
        second.add_error("broken")
        combined = first.combine(second)
        self.assertFalse(combined.is_valid)
        self.assertEqual(combined.errors, ["broken"])
        self.assertTrue(first.is_valid)


class TestGameStateValidator(unittest.TestCase):
    """Test the default rule set."""

    def setUp(self) -> None:
        self.validator = GameStateValidator()

    def test_valid_states(self) -> None:
        state = individual_state()
        self.assertTrue(self.validator.validate(state).is_valid)
        self.assertTrue(self.validator.validate(calculate_substitution(state, seconds_after_start(60))).is_valid)
        pairs = pairs_state()
        self.assertTrue(self.validator.validate(calculate_substitution(pairs, seconds_after_start(60))).is_valid)

    def test_player_in_two_slots(self) -> None:
        state = individual_state()
        broken = replace(state, formation=state.formation.with_slots({"substitute_2": "1"}))
        result = self.validator.validate(broken)
        self.assertFalse(result.is_valid)
        self.assertTrue(any("occupies 2 positions" in error for error in result.errors))

    def test_goalie_in_field_slot(self) -> None:
        state = pairs_state()
        broken = replace(state, formation=state.formation.with_slots({"subPair": PairSlot("5", "7")}))
        result = GoalieExclusivityRule().validate(broken, None)
        self.assertEqual(result.errors, ["Goalie 7 also occupies subPair"])

    def test_queue_missing_player(self) -> None:
        state = individual_state()
        result = self.validator.validate(replace(state, rotation_queue=["1", "2", "3", "4", "5"]))
        self.assertIn("Active players missing from queue: 6", result.errors)

    def test_queue_holding_goalie(self) -> None:
        state = individual_state()
        result = self.validator.validate(replace(state, rotation_queue=state.rotation_queue + ["7"]))
        self.assertFalse(result.is_valid)

    def test_stale_slot_reference(self) -> None:
        state = individual_state()
        players = [
            p.with_stats(current_pair_key="substitute_1", current_status=PlayerStatus.SUBSTITUTE)
            if p.id == "1" else p
            for p in state.all_players
        ]
        result = self.validator.validate(replace(state, all_players=players))
        self.assertEqual(len(result.errors), 2)

    def test_unsupported_configuration(self) -> None:
        state = individual_state()
        broken = replace(state, selected_formation="2-3-1")
        result = self.validator.validate(broken)
        self.assertFalse(result.is_valid)
        self.assertEqual(len(result.errors), 1)


if __name__ == "__main__":
    unittest.main()
