"""
Player model for the Sideline Rotation engine.

This module contains the Player dataclass and the stats record that the
rotation engine updates on every transition: current status, role and
slot, the start of the current stint, and the cumulative time counters.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class PlayerStatus(Enum):
    """Where a player currently is."""
    ON_FIELD = "on_field"
    SUBSTITUTE = "substitute"
    GOALIE = "goalie"


class PlayerRole(Enum):
    """Role used to pick the time bucket for a stint."""
    DEFENDER = "defender"
    ATTACKER = "attacker"
    MIDFIELDER = "midfielder"
    SUBSTITUTE = "substitute"
    GOALIE = "goalie"


class StintState(Enum):
    """
    Whether the current stint may still accumulate time.

    PAUSED_FLUSHED marks a stint whose time was already credited when the
    substitution clock paused; nothing accumulates again until resume.
    """
    RUNNING = "running"
    PAUSED_FLUSHED = "paused_flushed"


def _enum_or_none(enum_cls, value):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class PlayerStats:
    """Per-match state and time counters for one player."""
    is_inactive: bool = False
    current_status: Optional[PlayerStatus] = None
    current_role: Optional[PlayerRole] = None
    current_pair_key: Optional[str] = None
    last_stint_start_time_epoch: Optional[int] = None
    stint_state: StintState = StintState.RUNNING
    time_on_field_seconds: int = 0
    time_as_defender_seconds: int = 0
    time_as_attacker_seconds: int = 0
    time_as_midfielder_seconds: int = 0
    time_as_sub_seconds: int = 0
    time_as_goalie_seconds: int = 0
    started_match_as: Optional[PlayerStatus] = None

    @property
    def total_tracked_seconds(self) -> int:
        """Field, bench and goal time combined."""
        return self.time_on_field_seconds + self.time_as_sub_seconds + self.time_as_goalie_seconds

    def reset_for_new_match(self) -> 'PlayerStats':
        """Return a copy with all counters cleared and the inactive flag kept."""
        return PlayerStats(is_inactive=self.is_inactive)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_inactive": self.is_inactive,
            "current_status": self.current_status.value if self.current_status else None,
            "current_role": self.current_role.value if self.current_role else None,
            "current_pair_key": self.current_pair_key,
            "last_stint_start_time_epoch": self.last_stint_start_time_epoch,
            "stint_state": self.stint_state.value,
            "time_on_field_seconds": self.time_on_field_seconds,
            "time_as_defender_seconds": self.time_as_defender_seconds,
            "time_as_attacker_seconds": self.time_as_attacker_seconds,
            "time_as_midfielder_seconds": self.time_as_midfielder_seconds,
            "time_as_sub_seconds": self.time_as_sub_seconds,
            "time_as_goalie_seconds": self.time_as_goalie_seconds,
            "started_match_as": self.started_match_as.value if self.started_match_as else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'PlayerStats':
        """Create from dictionary for JSON deserialization."""
        if not data:
            return cls()
        return cls(
            is_inactive=bool(data.get("is_inactive", False)),
            current_status=_enum_or_none(PlayerStatus, data.get("current_status")),
            current_role=_enum_or_none(PlayerRole, data.get("current_role")),
            current_pair_key=data.get("current_pair_key"),
            last_stint_start_time_epoch=data.get("last_stint_start_time_epoch"),
            stint_state=_enum_or_none(StintState, data.get("stint_state")) or StintState.RUNNING,
            time_on_field_seconds=data.get("time_on_field_seconds", 0) or 0,
            time_as_defender_seconds=data.get("time_as_defender_seconds", 0) or 0,
            time_as_attacker_seconds=data.get("time_as_attacker_seconds", 0) or 0,
            time_as_midfielder_seconds=data.get("time_as_midfielder_seconds", 0) or 0,
            time_as_sub_seconds=data.get("time_as_sub_seconds", 0) or 0,
            time_as_goalie_seconds=data.get("time_as_goalie_seconds", 0) or 0,
            started_match_as=_enum_or_none(PlayerStatus, data.get("started_match_as")),
        )


@dataclass(frozen=True)
class Player:
    """A squad member and their match stats."""
    id: str
    name: str = ""
    stats: PlayerStats = field(default_factory=PlayerStats)

    @property
    def is_inactive(self) -> bool:
        return self.stats.is_inactive

    def with_stats(self, **changes: Any) -> 'Player':
        """Return a copy with the given stats fields replaced."""
        return replace(self, stats=replace(self.stats, **changes))

    def to_dict(self) -> Dict[str, Any]:
        """Convert player to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """Create player from dictionary for JSON deserialization."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            stats=PlayerStats.from_dict(data.get("stats")),
        )
