"""
Unit tests for stint tracking.

Covers crediting stints to the right counters, role changes and the
pause flush that prevents double counting.
"""
import unittest

from sideline_rotation.models import Player, PlayerRole, PlayerStats, PlayerStatus, StintState
from sideline_rotation.services.stint_manager import (
    complete_current_stint,
    handle_pause_resume_time,
    handle_role_change,
    reset_player_stint_timer,
    start_new_stint,
    transition_stint,
    update_player_time_stats,
)


def make_player(status=PlayerStatus.ON_FIELD, role=PlayerRole.DEFENDER, start=1000) -> Player:
    return Player("1", "Alex", PlayerStats(
        current_status=status, current_role=role, last_stint_start_time_epoch=start,
    ))


class TestUpdatePlayerTimeStats(unittest.TestCase):
    def test_field_time_goes_to_field_and_role_bucket(self) -> None:
        player = update_player_time_stats(make_player(), 61_000, False)
        self.assertEqual(player.stats.time_on_field_seconds, 60)
        self.assertEqual(player.stats.time_as_defender_seconds, 60)
        self.assertEqual(player.stats.time_as_attacker_seconds, 0)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 61_000)

    def test_attacker_and_midfielder_buckets(self) -> None:
        attacker = update_player_time_stats(make_player(role=PlayerRole.ATTACKER), 11_000, False)
        self.assertEqual(attacker.stats.time_as_attacker_seconds, 10)
        midfielder = update_player_time_stats(make_player(role=PlayerRole.MIDFIELDER), 11_000, False)
        self.assertEqual(midfielder.stats.time_as_midfielder_seconds, 10)
        self.assertEqual(midfielder.stats.time_on_field_seconds, 10)

    def test_substitute_and_goalie_time(self) -> None:
        sub = update_player_time_stats(
            make_player(PlayerStatus.SUBSTITUTE, PlayerRole.SUBSTITUTE), 21_000, False
        )
        self.assertEqual(sub.stats.time_as_sub_seconds, 20)
        self.assertEqual(sub.stats.time_on_field_seconds, 0)
        goalie = update_player_time_stats(make_player(PlayerStatus.GOALIE, PlayerRole.GOALIE), 21_000, False)
        self.assertEqual(goalie.stats.time_as_goalie_seconds, 20)

    def test_paused_or_unstarted_returns_same_player(self) -> None:
        player = make_player()
        self.assertIs(update_player_time_stats(player, 61_000, True), player)
        unstarted = make_player(start=0)
        self.assertIs(update_player_time_stats(unstarted, 61_000, False), unstarted)
        never = make_player(start=None)
        self.assertIs(update_player_time_stats(never, 61_000, False), never)

    def test_unknown_status_logs_and_adds_nothing(self) -> None:
        player = make_player(status=None)
        with self.assertLogs("sideline_rotation.services.stint_manager", level="WARNING"):
            updated = update_player_time_stats(player, 61_000, False)
        self.assertEqual(updated.stats.total_tracked_seconds, 0)
        self.assertEqual(updated.stats.last_stint_start_time_epoch, 61_000)

    def test_complete_current_stint_matches_update(self) -> None:
        player = make_player()
        self.assertEqual(complete_current_stint(player, 31_000, False),
                         update_player_time_stats(player, 31_000, False))


class TestStintTransitions(unittest.TestCase):
    def test_start_new_stint_sets_start_and_running(self) -> None:
        player = make_player().with_stats(stint_state=StintState.PAUSED_FLUSHED)
        started = start_new_stint(player, 5000)
        self.assertEqual(started.stats.last_stint_start_time_epoch, 5000)
        self.assertIs(started.stats.stint_state, StintState.RUNNING)

    def test_reset_moves_start_without_credit(self) -> None:
        player = reset_player_stint_timer(make_player(), 90_000)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 90_000)
        self.assertEqual(player.stats.total_tracked_seconds, 0)

    def test_role_change_credits_old_role(self) -> None:
        player = handle_role_change(make_player(), PlayerRole.ATTACKER, 11_000, False)
        self.assertEqual(player.stats.time_as_defender_seconds, 10)
        self.assertEqual(player.stats.time_as_attacker_seconds, 0)
        self.assertIs(player.stats.current_role, PlayerRole.ATTACKER)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 11_000)

    def test_role_change_while_paused_only_moves_start(self) -> None:
        player = handle_role_change(make_player(), PlayerRole.ATTACKER, 11_000, True,
                                    new_status=PlayerStatus.SUBSTITUTE)
        self.assertEqual(player.stats.total_tracked_seconds, 0)
        self.assertIs(player.stats.current_status, PlayerStatus.SUBSTITUTE)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 11_000)

    def test_transition_stint_credits_when_running(self) -> None:
        player = transition_stint(make_player(), 31_000, False)
        self.assertEqual(player.stats.time_on_field_seconds, 30)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 31_000)


class TestPauseResume(unittest.TestCase):
    def test_pause_flushes_without_moving_start(self) -> None:
        paused = handle_pause_resume_time(make_player(), 31_000, True)
        self.assertEqual(paused.stats.time_on_field_seconds, 30)
        self.assertEqual(paused.stats.last_stint_start_time_epoch, 1000)
        self.assertIs(paused.stats.stint_state, StintState.PAUSED_FLUSHED)

    def test_flushed_stint_does_not_accumulate_again(self) -> None:
        paused = handle_pause_resume_time(make_player(), 31_000, True)
        self.assertIs(update_player_time_stats(paused, 50_000, False), paused)
        self.assertIs(handle_pause_resume_time(paused, 40_000, True), paused)

    def test_substitution_during_pause_is_not_double_counted(self) -> None:
        player = handle_pause_resume_time(make_player(), 31_000, True)
        player = transition_stint(player, 40_000, True).with_stats(
            current_status=PlayerStatus.SUBSTITUTE, current_role=PlayerRole.SUBSTITUTE,
        )
        player = handle_pause_resume_time(player, 60_000, False)
        self.assertIs(player.stats.stint_state, StintState.RUNNING)
        self.assertEqual(player.stats.last_stint_start_time_epoch, 60_000)

        player = update_player_time_stats(player, 90_000, False)
        self.assertEqual(player.stats.time_on_field_seconds, 30)
        self.assertEqual(player.stats.time_as_sub_seconds, 30)
        self.assertEqual(player.stats.total_tracked_seconds, 60)

    def test_resume_ignores_players_without_status(self) -> None:
        player = Player("9", "Sam", PlayerStats(stint_state=StintState.PAUSED_FLUSHED))
        resumed = handle_pause_resume_time(player, 60_000, False)
        self.assertIsNone(resumed.stats.last_stint_start_time_epoch)
        self.assertIs(resumed.stats.stint_state, StintState.RUNNING)


if __name__ == "__main__":
    unittest.main()
