"""Console command parsing and the deferred command queue interpreter."""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Union

from .burns import BurnMode, BurnResult


class CommandError(ValueError):
    """Raised for console input that cannot be turned into a command."""


@dataclass(frozen=True)
class WaitCommand:
    seconds: float
    raw: str


@dataclass(frozen=True)
class BurnCommand:
    mode: BurnMode
    dv: float
    raw: str


@dataclass(frozen=True)
class ClearDirective:
    raw: str = "clear"


@dataclass(frozen=True)
class ExecuteDirective:
    raw: str = "execute"


Command = Union[WaitCommand, BurnCommand]
ConsoleInput = Union[WaitCommand, BurnCommand, ClearDirective, ExecuteDirective]

BURN_KEYWORDS: dict[str, BurnMode] = {mode.value: mode for mode in BurnMode}


def _parse_number(token: str | None) -> float:
    if token is None:
        return math.nan
    try:
        return float(token)
    except ValueError:
        return math.nan


def parse_command(text: str) -> ConsoleInput | None:
    """Parse one line of console input.

    Returns ``None`` for blank input and raises :class:`CommandError` for
    anything malformed. Keywords are case-insensitive; ``raw`` keeps the
    operator's trimmed text for display.
    """

    trimmed = text.strip()
    if not trimmed:
        return None
    parts = trimmed.lower().split()
    keyword = parts[0]
    arg = _parse_number(parts[1] if len(parts) > 1 else None)

    if keyword == "clear":
        return ClearDirective(raw=trimmed)
    if keyword == "execute":
        return ExecuteDirective(raw=trimmed)
    if keyword == "wait":
        if not math.isfinite(arg) or arg < 0.0:
            raise CommandError("Invalid wait value.")
        return WaitCommand(seconds=arg, raw=trimmed)
    mode = BURN_KEYWORDS.get(keyword)
    if mode is not None:
        if not math.isfinite(arg) or arg <= 0.0:
            raise CommandError("Invalid dv value.")
        return BurnCommand(mode=mode, dv=arg, raw=trimmed)
    raise CommandError(f"Unknown command: {trimmed}")


class QueueStep(Enum):
    IDLE = "idle"
    COUNTING_DOWN = "counting_down"
    WAIT_STARTED = "wait_started"
    BURN_EXECUTED = "burn_executed"
    COMPLETE = "complete"


BurnExecutor = Callable[[BurnCommand], BurnResult]
MessageSink = Callable[[str], None]


class CommandQueue:
    """FIFO of queued waits and burns, advanced cooperatively per tick."""

    def __init__(self, on_message: MessageSink | None = None) -> None:
        self._pending: deque[Command] = deque()
        self._on_message = on_message
        self.active: Command | None = None
        self.wait_timer = 0.0
        self.executing = False
        self.last_burn: BurnResult | None = None

    def __len__(self) -> int:
        return len(self._pending)

    def _log(self, text: str) -> None:
        if self._on_message is not None:
            self._on_message(text)

    # ------------------------------------------------------------------
    def enqueue(self, command: Command) -> None:
        self._pending.append(command)

    def extend(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.enqueue(command)

    def submit(self, text: str) -> ConsoleInput | None:
        """Parse and dispatch console input; errors become log lines."""

        try:
            parsed = parse_command(text)
        except CommandError as exc:
            self._log(str(exc))
            return None
        if parsed is None:
            return None
        if isinstance(parsed, ClearDirective):
            self.clear()
        elif isinstance(parsed, ExecuteDirective):
            self.execute()
        else:
            self.enqueue(parsed)
        return parsed

    def clear(self) -> None:
        """Drop everything, including the in-flight command and its timer."""

        self._pending.clear()
        self.executing = False
        self.wait_timer = 0.0
        self.active = None
        self._log("Cleared queue.")

    def execute(self) -> bool:
        if not self._pending:
            self._log("Queue empty.")
            return False
        self.executing = True
        self.active = None
        self.wait_timer = 0.0
        self._log("Executing queue.")
        return True

    def reset(self) -> None:
        self._pending.clear()
        self.executing = False
        self.wait_timer = 0.0
        self.active = None
        self.last_burn = None

    # ------------------------------------------------------------------
    def advance(self, dt: float, execute_burn: BurnExecutor) -> QueueStep:
        """Run the interpreter for one tick of length ``dt``."""

        if not self.executing:
            return QueueStep.IDLE
        if self.wait_timer > 0.0:
            self.wait_timer = max(0.0, self.wait_timer - dt)
            return QueueStep.COUNTING_DOWN
        if self.active is None:
            self.active = self._pending.popleft() if self._pending else None
            if self.active is None:
                self.executing = False
                self._log("Queue complete.")
                return QueueStep.COMPLETE

        command = self.active
        self.active = None
        if isinstance(command, WaitCommand):
            self.wait_timer = command.seconds
            self._log(f"Waiting {command.seconds:.2f} s")
            return QueueStep.WAIT_STARTED
        self.last_burn = execute_burn(command)
        self._log(f"Executed {command.raw}")
        return QueueStep.BURN_EXECUTED

    # ------------------------------------------------------------------
    def view(self) -> list[str]:
        return [command.raw for command in self._pending]

    def describe(self) -> str:
        if not self._pending:
            return "Queue: (empty)"
        return "Queue: " + " | ".join(f"{i}. {raw}" for i, raw in enumerate(self.view(), start=1))


__all__ = [
    "BurnCommand",
    "ClearDirective",
    "Command",
    "CommandError",
    "CommandQueue",
    "ConsoleInput",
    "ExecuteDirective",
    "QueueStep",
    "WaitCommand",
    "parse_command",
]
