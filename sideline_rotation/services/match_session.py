"""
Command pattern wrapper around the rotation calculator.

A MatchSession owns the current GameState for one match and applies one
command at a time, supplying the current time, computing animation hints
and keeping a history of applied commands.
"""
import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..models import Formation, GameState, Player, TeamConfig
from ..utils import now_ms
from ..utils.constants import MAX_HISTORY_SIZE
from .animation_support import calculate_all_player_animations, capture_all_player_positions
from .formation_validator import GameStateValidator
from .rotation_calculator import (
    OperationResult,
    calculate_general_substitute_swap,
    calculate_goalie_switch,
    calculate_next_substitution_target,
    calculate_pair_position_swap,
    calculate_pause_resume,
    calculate_player_toggle_inactive,
    calculate_position_switch,
    calculate_substitute_reorder,
    calculate_substitution,
    calculate_undo,
    evaluate_operation,
    initialize_game_state,
)

logger = logging.getLogger(__name__)


class NoMatchInProgressError(RuntimeError):
    """Raised when a command is issued before a match has started."""


class Command(ABC):
    """Abstract base class for all rotation commands - Command pattern."""

    @abstractmethod
    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        """
        Execute the command against a state.

        Returns:
            OperationResult describing the outcome
        """

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""


class SubstitutionCommand(Command):
    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_substitution, state, now_epoch_ms)

    @property
    def description(self) -> str:
        return "Substitution"


class PositionSwitchCommand(Command):
    def __init__(self, player_a_id: str, player_b_id: str):
        self.player_a_id = player_a_id
        self.player_b_id = player_b_id

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_position_switch, state, self.player_a_id, self.player_b_id, now_epoch_ms)

    @property
    def description(self) -> str:
        return f"Switch {self.player_a_id} and {self.player_b_id}"


class GoalieSwitchCommand(Command):
    def __init__(self, new_goalie_id: str):
        self.new_goalie_id = new_goalie_id

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_goalie_switch, state, self.new_goalie_id, now_epoch_ms)

    @property
    def description(self) -> str:
        return f"Goalie {self.new_goalie_id}"


class ToggleInactiveCommand(Command):
    def __init__(self, player_id: str):
        self.player_id = player_id

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_player_toggle_inactive, state, self.player_id)

    @property
    def description(self) -> str:
        return f"Toggle inactive {self.player_id}"


class SubstituteSwapCommand(Command):
    def __init__(self, slot_a: str, slot_b: str):
        self.slot_a = slot_a
        self.slot_b = slot_b

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_general_substitute_swap, state, self.slot_a, self.slot_b)

    @property
    def description(self) -> str:
        return f"Swap {self.slot_a} and {self.slot_b}"


class SubstituteReorderCommand(Command):
    def __init__(self, target_slot: str):
        self.target_slot = target_slot

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_substitute_reorder, state, self.target_slot)

    @property
    def description(self) -> str:
        return f"Promote {self.target_slot}"


class NextTargetCommand(Command):
    def __init__(self, target: str, kind: str):
        self.target = target
        self.kind = kind

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_next_substitution_target, state, self.target, self.kind)

    @property
    def description(self) -> str:
        return f"Next {self.kind} {self.target}"


class PairPositionSwapCommand(Command):
    def __init__(self, pair_key: str):
        self.pair_key = pair_key

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_pair_position_swap, state, self.pair_key, now_epoch_ms)

    @property
    def description(self) -> str:
        return f"Swap roles in {self.pair_key}"


class UndoSubstitutionCommand(Command):
    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_undo, state, state.last_substitution, now_epoch_ms)

    @property
    def description(self) -> str:
        return "Undo substitution"


class PauseResumeCommand(Command):
    def __init__(self, is_pausing: bool):
        self.is_pausing = is_pausing

    def execute(self, state: GameState, now_epoch_ms: int) -> OperationResult:
        return evaluate_operation(calculate_pause_resume, state, now_epoch_ms, self.is_pausing)

    @property
    def description(self) -> str:
        return "Pause" if self.is_pausing else "Resume"


@dataclass(frozen=True)
class OperationOutcome:
    """Result of a command plus the movement each player should animate."""
    result: OperationResult
    animations: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def state(self) -> GameState:
        return self.result.state

    def to_json(self) -> dict:
        return {
            "status": self.result.status.value,
            "reason": self.result.reason,
            "players_to_highlight": list(self.result.players_to_highlight),
            "animations": self.animations,
            "state": self.result.state.to_json(),
        }


class MatchSession:
    """
    Holds the game state of one match and applies commands one at a time.

    The clock is injected so callers (and tests) control the timestamps
    handed to the calculator.
    """

    def __init__(self, state: Optional[GameState] = None, clock: Callable[[], int] = now_ms,
                 validator: Optional[GameStateValidator] = None, max_history: int = MAX_HISTORY_SIZE):
        """
        Initialize a match session.

        Args:
            state: Existing game state to resume, if any
            clock: Returns the current time in epoch milliseconds
            validator: Invariant checker run after each applied command
            max_history: Maximum number of command descriptions to keep
        """
        self._state = state
        self._clock = clock
        self._validator = validator or GameStateValidator()
        self._history = deque(maxlen=max_history)
        self._lock = threading.Lock()

    @property
    def state(self) -> Optional[GameState]:
        """Current game state, read under the session lock."""
        with self._lock:
            return self._state

    def start_match(self, team_config: TeamConfig, formation: Formation, players: Sequence[Player],
                    selected_formation: Optional[str] = None) -> GameState:
        """Build the kickoff state and make it current."""
        with self._lock:
            state = initialize_game_state(team_config, formation, players, self._clock(),
                                          selected_formation=selected_formation)
            self._state = state
            self._history.clear()
            logger.info("Match started with %d players (%s %s)",
                        len(players), team_config.format, state.selected_formation or team_config.formation)
            return state

    def execute_command(self, command: Command) -> OperationOutcome:
        """
        Apply a command to the current state.

        Args:
            command: Command to execute

        Returns:
            OperationOutcome with the result and animation hints

        Raises:
            NoMatchInProgressError: If no match has been started
        """
        with self._lock:
            state = self._state
            if state is None:
                raise NoMatchInProgressError("No match in progress")

            before = capture_all_player_positions(
                state.formation, state.all_players, state.team_config, state.selected_formation
            )
            result = command.execute(state, self._clock())
            if not result.applied:
                return OperationOutcome(result)

            new_state = result.state
            after = capture_all_player_positions(
                new_state.formation, new_state.all_players, new_state.team_config,
                new_state.selected_formation or state.selected_formation,
            )
            animations = calculate_all_player_animations(before, after, state.team_config)

            validation = self._validator.validate(new_state)
            if not validation.is_valid:
                logger.warning("%s left inconsistent state: %s", command.description, "; ".join(validation.errors))

            self._state = new_state
            self._history.append(command.description)
            return OperationOutcome(result, animations)

    def substitute(self) -> OperationOutcome:
        return self.execute_command(SubstitutionCommand())

    def switch_positions(self, player_a_id: str, player_b_id: str) -> OperationOutcome:
        return self.execute_command(PositionSwitchCommand(player_a_id, player_b_id))

    def switch_goalie(self, new_goalie_id: str) -> OperationOutcome:
        return self.execute_command(GoalieSwitchCommand(new_goalie_id))

    def toggle_inactive(self, player_id: str) -> OperationOutcome:
        return self.execute_command(ToggleInactiveCommand(player_id))

    def swap_substitutes(self, slot_a: str, slot_b: str) -> OperationOutcome:
        return self.execute_command(SubstituteSwapCommand(slot_a, slot_b))

    def reorder_substitute(self, target_slot: str) -> OperationOutcome:
        return self.execute_command(SubstituteReorderCommand(target_slot))

    def set_next_target(self, target: str, kind: str) -> OperationOutcome:
        return self.execute_command(NextTargetCommand(target, kind))

    def swap_pair_positions(self, pair_key: str) -> OperationOutcome:
        return self.execute_command(PairPositionSwapCommand(pair_key))

    def undo_substitution(self) -> OperationOutcome:
        return self.execute_command(UndoSubstitutionCommand())

    def pause(self) -> OperationOutcome:
        return self.execute_command(PauseResumeCommand(True))

    def resume(self) -> OperationOutcome:
        return self.execute_command(PauseResumeCommand(False))

    def get_command_history(self) -> List[str]:
        """Get history of applied command descriptions."""
        with self._lock:
            return list(self._history)

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
