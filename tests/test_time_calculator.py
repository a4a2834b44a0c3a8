"""
Unit tests for stint duration arithmetic.
"""
import unittest

from sideline_rotation.services.time_calculator import (
    calculate_current_stint_duration,
    calculate_duration_seconds,
    calculate_undo_timer_target,
    is_valid_time_range,
    should_skip_time_calculation,
)
from sideline_rotation.utils import fmt_mmss, now_ms


class TestDuration(unittest.TestCase):
    def test_rounds_half_up(self) -> None:
        self.assertEqual(calculate_duration_seconds(1000, 2500), 2)
        self.assertEqual(calculate_duration_seconds(1000, 1500), 1)
        self.assertEqual(calculate_duration_seconds(1000, 1499), 0)
        self.assertEqual(calculate_duration_seconds(1000, 61_000), 60)

    def test_invalid_ranges_give_zero(self) -> None:
        self.assertEqual(calculate_duration_seconds(2000, 1000), 0)
        self.assertEqual(calculate_duration_seconds(0, 5000), 0)
        self.assertEqual(calculate_duration_seconds(None, 5000), 0)
        self.assertEqual(calculate_duration_seconds(1000, None), 0)
        self.assertEqual(calculate_duration_seconds(-5, 5000), 0)

    def test_valid_time_range(self) -> None:
        self.assertTrue(is_valid_time_range(1000, 1000))
        self.assertTrue(is_valid_time_range(1000, 2000))
        self.assertFalse(is_valid_time_range(0, 2000))
        self.assertFalse(is_valid_time_range(2000, 1000))
        self.assertFalse(is_valid_time_range(1000, None))


class TestSkipAndStint(unittest.TestCase):
    def test_should_skip(self) -> None:
        self.assertTrue(should_skip_time_calculation(True, 1000))
        self.assertTrue(should_skip_time_calculation(False, 0))
        self.assertTrue(should_skip_time_calculation(False, None))
        self.assertFalse(should_skip_time_calculation(False, 1000))

    def test_current_stint_duration(self) -> None:
        self.assertEqual(calculate_current_stint_duration(1000, 4000), 3)
        self.assertEqual(calculate_current_stint_duration(1000, 4000, is_paused=True), 0)
        self.assertEqual(calculate_current_stint_duration(None, 4000), 0)


class TestUndoTimerTarget(unittest.TestCase):
    def test_adds_elapsed_seconds(self) -> None:
        self.assertEqual(calculate_undo_timer_target(30, 10_000, 25_000), 45)

    def test_invalid_substitution_timestamp_keeps_value(self) -> None:
        self.assertEqual(calculate_undo_timer_target(30, 0, 25_000), 30)
        self.assertEqual(calculate_undo_timer_target(30, None, 25_000), 30)

    def test_now_before_substitution_adds_nothing(self) -> None:
        self.assertEqual(calculate_undo_timer_target(30, 25_000, 10_000), 30)


class TestTimeUtils(unittest.TestCase):
    """Test clock helpers."""

    def test_fmt_mmss(self) -> None:
        self.assertEqual(fmt_mmss(0), "00:00")
        self.assertEqual(fmt_mmss(90), "01:30")
        self.assertEqual(fmt_mmss(3600), "60:00")

    def test_now_ms_is_epoch_milliseconds(self) -> None:
        self.assertGreater(now_ms(), 1_600_000_000_000)


if __name__ == "__main__":
    unittest.main()
