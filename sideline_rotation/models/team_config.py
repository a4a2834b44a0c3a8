"""
Team configuration model for the Sideline Rotation engine.

A TeamConfig is the immutable descriptor that selects which formation
definition applies to a match: format, squad size, on-field shape and
substitution scheme.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..utils.constants import (
    FORMAT_5V5,
    MAX_SQUAD_SIZE_BY_FORMAT,
    MIN_SQUAD_SIZE,
    PAIRS_FORMAT,
    PAIRS_SHAPE,
    PAIRS_SQUAD_SIZE,
    SHAPES_BY_FORMAT,
)


class TeamConfigError(ValueError):
    """Raised when a team configuration is not supported."""


class SubstitutionType(Enum):
    """How players leave and join the field."""
    PAIRS = "pairs"
    INDIVIDUAL = "individual"


@dataclass(frozen=True)
class TeamConfig:
    """Immutable match configuration."""
    format: str
    squad_size: int
    formation: str
    substitution_type: SubstitutionType = SubstitutionType.INDIVIDUAL

    @property
    def is_pairs(self) -> bool:
        return self.substitution_type is SubstitutionType.PAIRS

    def with_shape(self, shape: Optional[str]) -> 'TeamConfig':
        """Return a copy using a different on-field shape."""
        if not shape or shape == self.formation:
            return self
        return TeamConfig(self.format, self.squad_size, shape, self.substitution_type)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "format": self.format,
            "squad_size": self.squad_size,
            "formation": self.formation,
            "substitution_type": self.substitution_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamConfig':
        """Create from dictionary for JSON deserialization."""
        try:
            return cls(
                format=data["format"],
                squad_size=int(data["squad_size"]),
                formation=data["formation"],
                substitution_type=SubstitutionType(data.get("substitution_type", "individual")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TeamConfigError(f"Invalid team configuration: {e}") from e


def validate_team_config(config: TeamConfig) -> None:
    """
    Check that a team configuration is one the engine supports.

    Args:
        config: Configuration to check

    Raises:
        TeamConfigError: If the format, squad size, shape or substitution
            scheme is not supported
    """
    if config.format not in SHAPES_BY_FORMAT:
        raise TeamConfigError(f"Unknown match format: {config.format!r}")

    max_size = MAX_SQUAD_SIZE_BY_FORMAT[config.format]
    if not (MIN_SQUAD_SIZE <= config.squad_size <= max_size):
        raise TeamConfigError(
            f"Squad size for {config.format} must be {MIN_SQUAD_SIZE}-{max_size}, got {config.squad_size}"
        )

    if config.formation not in SHAPES_BY_FORMAT[config.format]:
        raise TeamConfigError(f"Shape {config.formation!r} is not available for {config.format}")

    if not isinstance(config.substitution_type, SubstitutionType):
        raise TeamConfigError(f"Unknown substitution type: {config.substitution_type!r}")

    if config.is_pairs and (
        config.format != PAIRS_FORMAT
        or config.formation != PAIRS_SHAPE
        or config.squad_size != PAIRS_SQUAD_SIZE
    ):
        raise TeamConfigError(
            f"Pairs substitution requires {PAIRS_FORMAT}, shape {PAIRS_SHAPE} and {PAIRS_SQUAD_SIZE} players"
        )


def create_default_team_config(squad_size: int, format: str = FORMAT_5V5) -> TeamConfig:
    """Build an individual-scheme configuration using the format's default shape."""
    shapes = SHAPES_BY_FORMAT.get(format)
    if not shapes:
        raise TeamConfigError(f"Unknown match format: {format!r}")
    config = TeamConfig(format, squad_size, shapes[0], SubstitutionType.INDIVIDUAL)
    validate_team_config(config)
    return config
