"""
Rotation queue for individual substitution schemes.

The queue orders active non-goalie players by when they are due off the
field; inactive players are held apart and never occupy a queue index.
"""
from typing import Callable, Iterable, List, Optional, Union

from ..models import Player

PlayerLookup = Callable[[str], Optional[Player]]


class RotationQueue:
    """Substitution-out order of active players."""

    def __init__(self, players: Iterable[str] = (), get_player_by_id: Optional[PlayerLookup] = None):
        self.queue: List[str] = list(players)
        self.inactive_players: List[str] = []
        self._get_player_by_id = get_player_by_id or (lambda _pid: None)

    @classmethod
    def for_state(cls, state) -> 'RotationQueue':
        """Queue built from a game state, with inactive players split out."""
        lookup = state.player_lookup()
        queue = cls(state.rotation_queue, lookup.get)
        queue.initialize()
        return queue

    def initialize(self) -> None:
        """Move any inactive players out of the active queue."""
        active: List[str] = []
        inactive: List[str] = []
        for player_id in self.queue:
            player = self._get_player_by_id(player_id)
            if player is not None and player.stats.is_inactive:
                inactive.append(player_id)
            else:
                active.append(player_id)
        self.queue = active
        self.inactive_players = inactive

    def to_list(self) -> List[str]:
        return list(self.queue)

    def contains(self, player_id: str) -> bool:
        return player_id in self.queue

    def get_position(self, player_id: str) -> int:
        """Index of a player in the queue, or -1."""
        try:
            return self.queue.index(player_id)
        except ValueError:
            return -1

    def rotate_player(self, player_id: str) -> None:
        """Move a player to the back of the queue."""
        if player_id not in self.queue:
            return
        self.queue.remove(player_id)
        self.queue.append(player_id)

    def add_player(self, player_id: str, position: Union[str, int] = "end") -> None:
        """
        Add a player, removing any existing entry first.

        Args:
            player_id: Player to add
            position: 'start', 'end' or an index
        """
        self.remove_player(player_id)
        if position == "start":
            self.queue.insert(0, player_id)
        elif position == "end":
            self.queue.append(player_id)
        elif isinstance(position, int):
            self.queue.insert(max(0, min(position, len(self.queue))), player_id)
        else:
            raise ValueError(f"Unknown queue position: {position!r}")

    def remove_player(self, player_id: str) -> None:
        if player_id in self.queue:
            self.queue.remove(player_id)

    def replace_player(self, old_id: str, new_id: str) -> bool:
        """Put new_id at old_id's index. Returns False when old_id is absent."""
        index = self.get_position(old_id)
        if index == -1:
            return False
        self.remove_player(new_id)
        index = self.get_position(old_id)
        self.queue[index] = new_id
        return True

    def deactivate_player(self, player_id: str) -> None:
        self.remove_player(player_id)
        if player_id not in self.inactive_players:
            self.inactive_players.append(player_id)

    def reactivate_player(self, player_id: str, first_substitute_index: int) -> None:
        """Return a player to the queue at the first substitute position."""
        if player_id in self.inactive_players:
            self.inactive_players.remove(player_id)
        self.add_player(player_id, min(first_substitute_index, len(self.queue)))

    def reorder_by_positions(self, position_order: Iterable[Optional[str]]) -> None:
        """
        Reorder the queue to follow a sequence of player ids.

        Ids not in the queue are ignored; queued players missing from the
        sequence keep their relative order at the back.
        """
        ordered: List[str] = []
        for player_id in position_order:
            if player_id and player_id in self.queue and player_id not in ordered:
                ordered.append(player_id)
        ordered.extend(pid for pid in self.queue if pid not in ordered)
        self.queue = ordered
