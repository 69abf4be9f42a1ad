"""Timestamped status and console messages emitted by the simulation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

STATUS = "status"
CONSOLE = "console"


@dataclass(frozen=True)
class StatusMessage:
    t: float
    channel: str
    text: str


class MessageLog:
    """Append-only message log.

    Collaborators usually consume it newest first through :meth:`latest`;
    ``since`` lets a UI poll only what is new since its last read.
    """

    def __init__(self) -> None:
        self._entries: list[StatusMessage] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StatusMessage]:
        return iter(self._entries)

    def append(self, t: float, channel: str, text: str) -> StatusMessage:
        entry = StatusMessage(t=t, channel=channel, text=text)
        self._entries.append(entry)
        return entry

    def latest(self, channel: str | None = None, limit: int | None = None) -> list[StatusMessage]:
        picked = [m for m in reversed(self._entries) if channel is None or m.channel == channel]
        if limit is not None:
            picked = picked[:limit]
        return picked

    def last_text(self, channel: str = STATUS) -> str | None:
        for entry in reversed(self._entries):
            if entry.channel == channel:
                return entry.text
        return None

    def since(self, index: int) -> list[StatusMessage]:
        return self._entries[max(0, index):]


__all__ = ["CONSOLE", "MessageLog", "STATUS", "StatusMessage"]
