"""Linear undo/redo history over edited content snapshots."""
from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class HistoryManager(Generic[T]):
    """Stack of immutable snapshots with a cursor.

    Appending after an undo discards the redo tail; there is no branching.
    Snapshots are compared with ``==`` so an unchanged commit does not add an
    entry.
    """

    def __init__(self, initial: T | None = None) -> None:
        self._entries: list[T] = []
        self._cursor = -1
        if initial is not None:
            self.reset(initial)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def entries(self) -> tuple[T, ...]:
        return tuple(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._entries) - 1

    def reset(self, snapshot: T) -> None:
        """Drop every entry and start over from a single snapshot."""

        self._entries = [snapshot]
        self._cursor = 0

    def current(self) -> T | None:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    def append(self, snapshot: T) -> bool:
        """Record ``snapshot`` after the cursor; return ``False`` when it is a no-op."""

        if self._cursor >= 0 and self._entries[self._cursor] == snapshot:
            return False
        del self._entries[self._cursor + 1 :]
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1
        return True

    def undo(self) -> T | None:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> T | None:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]
