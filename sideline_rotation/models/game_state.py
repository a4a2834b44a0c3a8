"""
GameState model for the Sideline Rotation engine.

This module contains the aggregate threaded through every rotation
calculator call, and the undo snapshot written by each substitution.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .formation import Formation
from .player import Player, PlayerStats
from .team_config import SubstitutionType, TeamConfig


@dataclass(frozen=True)
class LastSubstitution:
    """
    Pre-substitution snapshot consumed by undo.

    Attributes:
        timestamp: Epoch milliseconds of the substitution
        before_formation: Formation before the swap
        before_next_pair: Next pair pointer before the swap
        before_next_player: Next field slot pointer before the swap
        before_next_player_id: Next player id pointer before the swap
        before_next_next_player_id: Next-next player id pointer before the swap
        before_rotation_queue: Rotation queue before the swap
        players_going_off_ids: Players that left the field
        players_coming_on_ids: Players that entered the field
        players_coming_on_original_stats: Stats of incoming players before the swap
        players_going_off_original_stats: Stats of outgoing players before the swap
        substitution_type: Scheme the substitution was made under
        sub_timer_seconds_at_substitution: Substitution clock value at the swap
    """
    timestamp: int
    before_formation: Formation
    before_next_pair: Optional[str] = None
    before_next_player: Optional[str] = None
    before_next_player_id: Optional[str] = None
    before_next_next_player_id: Optional[str] = None
    before_rotation_queue: List[str] = field(default_factory=list)
    players_going_off_ids: List[str] = field(default_factory=list)
    players_coming_on_ids: List[str] = field(default_factory=list)
    players_coming_on_original_stats: Dict[str, PlayerStats] = field(default_factory=dict)
    players_going_off_original_stats: Dict[str, PlayerStats] = field(default_factory=dict)
    substitution_type: SubstitutionType = SubstitutionType.INDIVIDUAL
    sub_timer_seconds_at_substitution: int = 0

    def to_json(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "timestamp": self.timestamp,
            "before_formation": self.before_formation.to_dict(),
            "before_next_pair": self.before_next_pair,
            "before_next_player": self.before_next_player,
            "before_next_player_id": self.before_next_player_id,
            "before_next_next_player_id": self.before_next_next_player_id,
            "before_rotation_queue": list(self.before_rotation_queue),
            "players_going_off_ids": list(self.players_going_off_ids),
            "players_coming_on_ids": list(self.players_coming_on_ids),
            "players_coming_on_original_stats": {
                pid: stats.to_dict() for pid, stats in self.players_coming_on_original_stats.items()
            },
            "players_going_off_original_stats": {
                pid: stats.to_dict() for pid, stats in self.players_going_off_original_stats.items()
            },
            "substitution_type": self.substitution_type.value,
            "sub_timer_seconds_at_substitution": self.sub_timer_seconds_at_substitution,
        }

    @staticmethod
    def from_json(data: dict) -> "LastSubstitution":
        """Create LastSubstitution from JSON dictionary."""
        return LastSubstitution(
            timestamp=int(data.get("timestamp", 0)),
            before_formation=Formation.from_dict(data.get("before_formation")),
            before_next_pair=data.get("before_next_pair"),
            before_next_player=data.get("before_next_player"),
            before_next_player_id=data.get("before_next_player_id"),
            before_next_next_player_id=data.get("before_next_next_player_id"),
            before_rotation_queue=list(data.get("before_rotation_queue", [])),
            players_going_off_ids=list(data.get("players_going_off_ids", [])),
            players_coming_on_ids=list(data.get("players_coming_on_ids", [])),
            players_coming_on_original_stats={
                pid: PlayerStats.from_dict(stats)
                for pid, stats in (data.get("players_coming_on_original_stats") or {}).items()
            },
            players_going_off_original_stats={
                pid: PlayerStats.from_dict(stats)
                for pid, stats in (data.get("players_going_off_original_stats") or {}).items()
            },
            substitution_type=SubstitutionType(data.get("substitution_type", "individual")),
            sub_timer_seconds_at_substitution=int(data.get("sub_timer_seconds_at_substitution", 0)),
        )


@dataclass(frozen=True)
class GameState:
    """
    Complete rotation state of a match in progress.

    Calculators never mutate a GameState; they return a new one, or the
    same instance when an operation has no effect.

    Attributes:
        formation: Current slot assignment
        all_players: Every squad member with their stats
        team_config: Match configuration
        selected_formation: Shape override for the current period
        rotation_queue: Active non-goalie player ids in substitution-out order
        next_player_id_to_sub_out: Player due off next (individual scheme)
        next_next_player_id_to_sub_out: Player due off after that
        next_physical_pair_to_sub_out: Field pair due off next (pairs scheme)
        next_player_to_sub_out: Field slot of the player due off next
        players_to_highlight: Ids the UI should highlight after the last operation
        is_sub_timer_paused: Whether the substitution clock is paused
        last_substitution: Undo snapshot of the last substitution
        sub_timer_seconds: Substitution clock value
    """
    formation: Formation
    all_players: List[Player]
    team_config: TeamConfig
    selected_formation: Optional[str] = None
    rotation_queue: List[str] = field(default_factory=list)
    next_player_id_to_sub_out: Optional[str] = None
    next_next_player_id_to_sub_out: Optional[str] = None
    next_physical_pair_to_sub_out: Optional[str] = None
    next_player_to_sub_out: Optional[str] = None
    players_to_highlight: List[str] = field(default_factory=list)
    is_sub_timer_paused: bool = False
    last_substitution: Optional[LastSubstitution] = None
    sub_timer_seconds: int = 0

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Return the player with the given id, or None."""
        if not player_id:
            return None
        for player in self.all_players:
            if player.id == player_id:
                return player
        return None

    def player_lookup(self) -> Dict[str, Player]:
        return {player.id: player for player in self.all_players}

    def to_json(self) -> dict:
        """
        Convert GameState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "formation": self.formation.to_dict(),
            "players": [player.to_dict() for player in self.all_players],
            "team_config": self.team_config.to_dict(),
            "selected_formation": self.selected_formation,
            "rotation_queue": list(self.rotation_queue),
            "next_player_id_to_sub_out": self.next_player_id_to_sub_out,
            "next_next_player_id_to_sub_out": self.next_next_player_id_to_sub_out,
            "next_physical_pair_to_sub_out": self.next_physical_pair_to_sub_out,
            "next_player_to_sub_out": self.next_player_to_sub_out,
            "players_to_highlight": list(self.players_to_highlight),
            "is_sub_timer_paused": self.is_sub_timer_paused,
            "last_substitution": self.last_substitution.to_json() if self.last_substitution else None,
            "sub_timer_seconds": self.sub_timer_seconds,
        }

    @staticmethod
    def from_json(data: dict) -> "GameState":
        """
        Create GameState from JSON dictionary.

        Args:
            data: Dictionary with game state data

        Returns:
            New GameState instance
        """
        last_substitution = data.get("last_substitution")
        return GameState(
            formation=Formation.from_dict(data.get("formation")),
            all_players=[Player.from_dict(p) for p in data.get("players", [])],
            team_config=TeamConfig.from_dict(data["team_config"]),
            selected_formation=data.get("selected_formation"),
            rotation_queue=list(data.get("rotation_queue", [])),
            next_player_id_to_sub_out=data.get("next_player_id_to_sub_out"),
            next_next_player_id_to_sub_out=data.get("next_next_player_id_to_sub_out"),
            next_physical_pair_to_sub_out=data.get("next_physical_pair_to_sub_out"),
            next_player_to_sub_out=data.get("next_player_to_sub_out"),
            players_to_highlight=list(data.get("players_to_highlight", [])),
            is_sub_timer_paused=bool(data.get("is_sub_timer_paused", False)),
            last_substitution=LastSubstitution.from_json(last_substitution) if last_substitution else None,
            sub_timer_seconds=int(data.get("sub_timer_seconds", 0)),
        )
