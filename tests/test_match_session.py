"""
Unit tests for MatchSession and the command wrappers.

A fake clock hands out fixed timestamps so stint arithmetic is exact.
"""
import threading
import unittest

from sideline_rotation.models import TeamConfig
from sideline_rotation.services.formation_validator import (
    GameStateValidator, ValidationResult, ValidationRule,
)
from sideline_rotation.services.match_session import (
    MatchSession,
    NoMatchInProgressError,
    PauseResumeCommand,
    SubstitutionCommand,
)
from sideline_rotation.services.rotation_calculator import OperationStatus

from tests.builders import START, individual_formation, individual_state, make_players, seconds_after_start


class FakeClock:
    def __init__(self, now: int = START):
        self.now = now

    def advance(self, seconds: int) -> None:
        self.now += seconds * 1000

    def __call__(self) -> int:
        return self.now


class AlwaysFailsRule(ValidationRule):
    def validate(self, state, definition) -> ValidationResult:
        result = ValidationResult()
        result.add_error("always fails")
        return result


class TestMatchSession(unittest.TestCase):
    """Test applying commands through a session."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.session = MatchSession(clock=self.clock)
        config = TeamConfig("5v5", 7, "2-2")
        self.session.start_match(config, individual_formation(config), make_players(7))

    def test_start_match_sets_state(self) -> None:
        state = self.session.state
        self.assertEqual(state.rotation_queue, ["1", "2", "3", "4", "5", "6"])
        self.assertEqual(state.find_player("1").stats.last_stint_start_time_epoch, START)
        self.assertEqual(self.session.get_command_history(), [])

    def test_substitution_outcome(self) -> None:
        self.clock.advance(90)
        outcome = self.session.substitute()
        self.assertIs(outcome.result.status, OperationStatus.APPLIED)
        self.assertIs(outcome.state, self.session.state)
        self.assertEqual(outcome.state.find_player("1").stats.time_on_field_seconds, 90)
        self.assertEqual(set(outcome.animations), {"1", "5", "6"})
        self.assertEqual(self.session.get_command_history(), ["Substitution"])

        data = outcome.to_json()
        self.assertEqual(data["status"], "applied")
        self.assertEqual(data["players_to_highlight"], ["5"])
        self.assertEqual(data["state"]["rotation_queue"], ["2", "3", "4", "5", "6", "1"])

    def test_rejected_command_keeps_state(self) -> None:
        state = self.session.state
        outcome = self.session.switch_goalie("7")
        self.assertIs(outcome.result.status, OperationStatus.REJECTED)
        self.assertIs(self.session.state, state)
        self.assertEqual(outcome.animations, {})
        self.assertEqual(self.session.get_command_history(), [])

    def test_undo_uses_last_substitution(self) -> None:
        self.clock.advance(60)
        self.session.substitute()
        self.clock.advance(15)
        outcome = self.session.undo_substitution()
        self.assertTrue(outcome.result.applied)
        self.assertEqual(outcome.state.formation.get("leftDefender"), "1")
        self.assertEqual(outcome.state.find_player("1").stats.time_on_field_seconds, 75)
        self.assertEqual(self.session.get_command_history(), ["Substitution", "Undo substitution"])

        second = self.session.undo_substitution()
        self.assertIs(second.result.status, OperationStatus.REJECTED)

    def test_pause_and_resume(self) -> None:
        self.clock.advance(20)
        self.assertTrue(self.session.pause().state.is_sub_timer_paused)
        self.assertIs(self.session.pause().result.status, OperationStatus.UNCHANGED)
        self.clock.advance(40)
        self.assertFalse(self.session.resume().state.is_sub_timer_paused)
        self.assertEqual(self.session.get_command_history(), ["Pause", "Resume"])
        self.assertEqual(self.session.state.find_player("7").stats.time_as_goalie_seconds, 20)

    def test_bench_and_target_commands(self) -> None:
        self.session.set_next_target("rightAttacker", "player")
        self.assertEqual(self.session.state.next_player_id_to_sub_out, "4")
        self.session.swap_substitutes("substitute_1", "substitute_2")
        self.assertEqual(self.session.state.formation.get("substitute_1"), "6")
        self.session.reorder_substitute("substitute_2")
        self.assertEqual(self.session.state.formation.get("substitute_1"), "5")
        self.session.toggle_inactive("6")
        self.assertTrue(self.session.state.find_player("6").stats.is_inactive)
        self.session.switch_positions("1", "2")
        self.assertEqual(self.session.state.formation.get("leftDefender"), "2")
        self.assertEqual(len(self.session.get_command_history()), 5)

    def test_history_is_bounded_and_clearable(self) -> None:
        session = MatchSession(state=individual_state(), clock=self.clock, max_history=2)
        for _ in range(3):
            session.pause()
            session.resume()
        self.assertEqual(session.get_command_history(), ["Pause", "Resume"])
        session.clear_history()
        self.assertEqual(session.get_command_history(), [])

    def test_validator_violation_is_logged(self) -> None:
        session = MatchSession(state=individual_state(), clock=self.clock,
                               validator=GameStateValidator([AlwaysFailsRule()]))
        with self.assertLogs("sideline_rotation.services.match_session", level="WARNING"):
            outcome = session.substitute()
        self.assertTrue(outcome.result.applied)

    def test_command_descriptions(self) -> None:
        self.assertEqual(SubstitutionCommand().description, "Substitution")
        self.assertEqual(PauseResumeCommand(True).description, "Pause")
        self.assertEqual(PauseResumeCommand(False).description, "Resume")


class TestNoMatch(unittest.TestCase):
    """Test commands issued before kickoff."""

    def test_command_without_match(self) -> None:
        session = MatchSession()
        self.assertIsNone(session.state)
        with self.assertRaises(NoMatchInProgressError):
            session.substitute()


class TestSessionLocking(unittest.TestCase):
    """Test that readers wait for a command in progress."""

    def test_state_read_waits_for_lock(self) -> None:
        session = MatchSession(individual_state(), clock=FakeClock())
        seen = []
        reader = threading.Thread(target=lambda: seen.append(session.state))

        session._lock.acquire()
        try:
            reader.start()
            reader.join(0.05)
            self.assertTrue(reader.is_alive())
            self.assertEqual(seen, [])
        finally:
            session._lock.release()
        reader.join(1)
        self.assertFalse(reader.is_alive())
        self.assertEqual(len(seen), 1)
        self.assertIs(seen[0], session.state)

    def test_history_read_waits_for_lock(self) -> None:
        session = MatchSession(individual_state(), clock=FakeClock())
        seen = []
        reader = threading.Thread(target=lambda: seen.append(session.get_command_history()))

        with session._lock:
            reader.start()
            reader.join(0.05)
            self.assertTrue(reader.is_alive())
        reader.join(1)
        self.assertEqual(seen, [[]])


if __name__ == "__main__":
    unittest.main()
