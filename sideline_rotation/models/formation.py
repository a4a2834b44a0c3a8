"""
Formation model for the Sideline Rotation engine.

A Formation maps each slot key to its occupant, plus the goalie. In the
individual scheme an occupant is a player id; in the pairs scheme it is a
PairSlot holding a defender and an attacker.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class PairSlot:
    """Two players sharing one pair slot, labelled defender and attacker."""
    defender: Optional[str] = None
    attacker: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.defender) and bool(self.attacker)

    def ids(self) -> List[str]:
        """Occupant ids, defender first."""
        return [pid for pid in (self.defender, self.attacker) if pid]

    def label_of(self, player_id: str) -> Optional[str]:
        if player_id and player_id == self.defender:
            return "defender"
        if player_id and player_id == self.attacker:
            return "attacker"
        return None

    def with_label(self, label: str, player_id: Optional[str]) -> 'PairSlot':
        if label == "defender":
            return PairSlot(player_id, self.attacker)
        return PairSlot(self.defender, player_id)

    def swapped(self) -> 'PairSlot':
        return PairSlot(self.attacker, self.defender)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"defender": self.defender, "attacker": self.attacker}


Occupant = Union[str, PairSlot, None]


@dataclass(frozen=True)
class Formation:
    """Assignment of players to the goalie, field and substitute slots."""
    goalie: Optional[str] = None
    slots: Mapping[str, Occupant] = field(default_factory=dict)

    def get(self, slot: str) -> Occupant:
        if slot == "goalie":
            return self.goalie
        return self.slots.get(slot)

    def occupant_ids(self) -> List[str]:
        """All player ids in the formation, goalie first, in slot order."""
        ids: List[str] = [self.goalie] if self.goalie else []
        for occupant in self.slots.values():
            if isinstance(occupant, PairSlot):
                ids.extend(occupant.ids())
            elif occupant:
                ids.append(occupant)
        return ids

    def slot_of(self, player_id: str) -> Optional[Tuple[str, Optional[str]]]:
        """
        Locate a player.

        Returns:
            (slot key, pair label) where the label is None outside pair
            slots, or None when the player is not in the formation
        """
        if not player_id:
            return None
        if player_id == self.goalie:
            return "goalie", None
        for slot, occupant in self.slots.items():
            if isinstance(occupant, PairSlot):
                label = occupant.label_of(player_id)
                if label:
                    return slot, label
            elif occupant == player_id:
                return slot, None
        return None

    def with_slots(self, updates: Mapping[str, Occupant]) -> 'Formation':
        """Return a copy with some slot occupants replaced."""
        slots = dict(self.slots)
        slots.update(updates)
        return Formation(goalie=self.goalie, slots=slots)

    def with_goalie(self, goalie: Optional[str]) -> 'Formation':
        return Formation(goalie=goalie, slots=dict(self.slots))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {"goalie": self.goalie}
        for slot, occupant in self.slots.items():
            data[slot] = occupant.to_dict() if isinstance(occupant, PairSlot) else occupant
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'Formation':
        """Create from dictionary for JSON deserialization."""
        if not data:
            return cls()
        slots: Dict[str, Occupant] = {}
        for slot, value in data.items():
            if slot == "goalie":
                continue
            if isinstance(value, Mapping):
                slots[slot] = PairSlot(value.get("defender"), value.get("attacker"))
            else:
                slots[slot] = value
        return cls(goalie=data.get("goalie"), slots=slots)
