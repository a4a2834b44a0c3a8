"""
Stint tracking for player time counters.

A stint is the interval a player spends in one status and role. These
functions close stints into the player's counters and open new ones as
the rotation engine moves players around.
"""
import logging
from typing import Optional

from ..models import Player, PlayerRole, PlayerStatus, StintState
from .time_calculator import calculate_current_stint_duration, should_skip_time_calculation

logger = logging.getLogger(__name__)

_ROLE_BUCKETS = {
    PlayerRole.DEFENDER: "time_as_defender_seconds",
    PlayerRole.ATTACKER: "time_as_attacker_seconds",
    PlayerRole.MIDFIELDER: "time_as_midfielder_seconds",
}

_ACTIVE_STATUSES = (PlayerStatus.ON_FIELD, PlayerStatus.SUBSTITUTE, PlayerStatus.GOALIE)


def _apply_stint_time(player: Player, seconds: int) -> dict:
    """Counter updates for a stint of the given length, by status and role."""
    stats = player.stats
    status = stats.current_status
    if status is PlayerStatus.ON_FIELD:
        changes = {"time_on_field_seconds": stats.time_on_field_seconds + seconds}
        bucket = _ROLE_BUCKETS.get(stats.current_role)
        if bucket:
            changes[bucket] = getattr(stats, bucket) + seconds
        return changes
    if status is PlayerStatus.SUBSTITUTE:
        return {"time_as_sub_seconds": stats.time_as_sub_seconds + seconds}
    if status is PlayerStatus.GOALIE:
        return {"time_as_goalie_seconds": stats.time_as_goalie_seconds + seconds}

    logger.warning("Unknown status %r for player %s, no time recorded", status, player.id)
    return {}


def update_player_time_stats(player: Player, now: int, is_paused: bool) -> Player:
    """
    Credit the current stint to the player's counters and restart it at now.

    Args:
        player: Player to update
        now: Current epoch milliseconds
        is_paused: Whether the substitution clock is paused

    Returns:
        Updated player, or the same player when paused, when the stint has
        not started, or when its time was already flushed by a pause
    """
    stats = player.stats
    if stats.stint_state is StintState.PAUSED_FLUSHED:
        return player
    if should_skip_time_calculation(is_paused, stats.last_stint_start_time_epoch):
        return player

    seconds = calculate_current_stint_duration(stats.last_stint_start_time_epoch, now)
    changes = _apply_stint_time(player, seconds)
    return player.with_stats(last_stint_start_time_epoch=now, **changes)


def start_new_stint(player: Player, now: int) -> Player:
    return player.with_stats(last_stint_start_time_epoch=now, stint_state=StintState.RUNNING)


def complete_current_stint(player: Player, now: int, is_paused: bool) -> Player:
    return update_player_time_stats(player, now, is_paused)


def reset_player_stint_timer(player: Player, now: int) -> Player:
    """Move the stint start to now without crediting any time."""
    return player.with_stats(last_stint_start_time_epoch=now)


def transition_stint(player: Player, now: int, is_paused: bool) -> Player:
    """
    Close the current stint at a status or role boundary.

    While paused the pause already credited time up to the pause instant,
    so the stint start only moves; otherwise the stint is credited and a
    new one starts.
    """
    if is_paused:
        return reset_player_stint_timer(player, now)
    return start_new_stint(complete_current_stint(player, now, False), now)


def handle_role_change(player: Player, new_role: PlayerRole, now: int, is_paused: bool,
                       new_status: Optional[PlayerStatus] = None) -> Player:
    """
    Close the stint in the old role and start one in the new role.

    Args:
        player: Player changing role
        new_role: Role from now on
        now: Current epoch milliseconds
        is_paused: Whether the substitution clock is paused
        new_status: Optional status change made at the same instant

    Returns:
        Updated player
    """
    updated = transition_stint(player, now, is_paused)
    changes = {"current_role": new_role}
    if new_status is not None:
        changes["current_status"] = new_status
    return updated.with_stats(**changes)


def handle_pause_resume_time(player: Player, now: int, is_pausing: bool) -> Player:
    """
    Apply a pause or resume of the substitution clock to one player.

    Pausing credits the running stint and marks it flushed, leaving the
    start untouched. Resuming restarts the stint for any player with a
    status.
    """
    if is_pausing:
        stats = player.stats
        if stats.stint_state is StintState.PAUSED_FLUSHED:
            return player
        if should_skip_time_calculation(False, stats.last_stint_start_time_epoch):
            return player.with_stats(stint_state=StintState.PAUSED_FLUSHED)
        seconds = calculate_current_stint_duration(stats.last_stint_start_time_epoch, now)
        changes = _apply_stint_time(player, seconds)
        return player.with_stats(stint_state=StintState.PAUSED_FLUSHED, **changes)

    if player.stats.current_status in _ACTIVE_STATUSES:
        return start_new_stint(player, now)
    return player.with_stats(stint_state=StintState.RUNNING)
