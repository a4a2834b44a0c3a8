"""
Unit tests for animation position diffs.
"""
import unittest

from sideline_rotation.models import SubstitutionType, TeamConfig
from sideline_rotation.services.animation_support import (
    calculate_all_player_animations,
    calculate_distance,
    capture_all_player_positions,
    get_box_height,
)
from sideline_rotation.services import calculate_substitution

from tests.builders import individual_state, pairs_state, seconds_after_start


def capture(state):
    return capture_all_player_positions(state.formation, state.all_players, state.team_config)


class TestMeasurements(unittest.TestCase):
    """Test box heights and distances."""

    def test_box_height(self) -> None:
        self.assertEqual(get_box_height(TeamConfig("5v5", 7, "2-2")), 104)
        self.assertEqual(get_box_height(TeamConfig("5v5", 7, "2-2", SubstitutionType.PAIRS)), 112)
        self.assertEqual(get_box_height(None), 104)

    def test_distance_is_signed(self) -> None:
        config = TeamConfig("5v5", 7, "2-2")
        self.assertAlmostEqual(calculate_distance(1, 3, config), 187.72)
        self.assertAlmostEqual(calculate_distance(3, 1, config), -187.72)
        self.assertEqual(calculate_distance(2, 2, config), 0)
        self.assertEqual(calculate_distance(-1, 2, config), 0)

    def test_pairs_distance(self) -> None:
        config = TeamConfig("5v5", 7, "2-2", SubstitutionType.PAIRS)
        self.assertAlmostEqual(calculate_distance(1, 3, config), 202.16)


class TestCapturePositions(unittest.TestCase):
    """Test position snapshots."""

    def test_individual_snapshot(self) -> None:
        positions = capture(individual_state())
        self.assertEqual(positions["7"], {"player_id": "7", "position": "goalie", "position_index": 0})
        self.assertEqual(positions["3"]["position"], "leftAttacker")
        self.assertEqual(positions["3"]["position_index"], 3)
        self.assertEqual(positions["6"]["position_index"], 6)
        self.assertNotIn("role", positions["1"])

    def test_pairs_snapshot_has_roles(self) -> None:
        positions = capture(pairs_state())
        self.assertEqual(positions["2"]["position"], "leftPair")
        self.assertEqual(positions["2"]["role"], "attacker")
        self.assertEqual(positions["5"]["position_index"], 3)

    def test_missing_or_unsupported_input(self) -> None:
        self.assertEqual(capture_all_player_positions(None, [], TeamConfig("5v5", 7, "2-2")), {})
        state = individual_state()
        with self.assertLogs("sideline_rotation.services.animation_support", level="WARNING"):
            positions = capture_all_player_positions(state.formation, state.all_players,
                                                     TeamConfig("5v5", 5, "2-2"))
        self.assertEqual(positions, {})


class TestAnimations(unittest.TestCase):
    """Test movement computed across a substitution."""

    def test_individual_substitution_movements(self) -> None:
        before_state = individual_state()
        after_state = calculate_substitution(before_state, seconds_after_start(60))
        animations = calculate_all_player_animations(
            capture(before_state), capture(after_state), before_state.team_config
        )

        self.assertEqual(set(animations), {"1", "5", "6"})
        self.assertAlmostEqual(animations["1"]["distance"], 469.3)
        self.assertEqual(animations["1"]["direction"], "down")
        self.assertEqual(animations["1"]["from_position"], "leftDefender")
        self.assertEqual(animations["1"]["to_position"], "substitute_2")
        self.assertAlmostEqual(animations["5"]["distance"], -375.44)
        self.assertEqual(animations["5"]["direction"], "up")
        self.assertAlmostEqual(animations["6"]["distance"], -93.86)

    def test_pairs_substitution_movements(self) -> None:
        before_state = pairs_state()
        after_state = calculate_substitution(before_state, seconds_after_start(60))
        animations = calculate_all_player_animations(
            capture(before_state), capture(after_state), before_state.team_config
        )
        self.assertEqual(set(animations), {"1", "2", "5", "6"})
        self.assertAlmostEqual(animations["2"]["distance"], 202.16)
        self.assertAlmostEqual(animations["6"]["distance"], -202.16)

    def test_empty_snapshots(self) -> None:
        self.assertEqual(calculate_all_player_animations({}, None, None), {})


if __name__ == "__main__":
    unittest.main()
