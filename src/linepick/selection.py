"""Cursor and selection state for the picker."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from linepick.models import Entry


@dataclass(frozen=True)
class SelectionState:
    """Immutable cursor/selection snapshot.

    Every transition takes the entry count and returns a new state, so the
    model can be driven in tests without a terminal. ``cursor`` is ``None``
    only for an empty list.
    """

    cursor: int | None = 0
    selected: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def initial(cls, total: int) -> SelectionState:
        return cls(cursor=0 if total > 0 else None)

    def move_cursor(self, delta: int, total: int) -> SelectionState:
        if total == 0 or self.cursor is None:
            return self
        cursor = max(0, min(self.cursor + delta, total - 1))
        if cursor == self.cursor:
            return self
        return replace(self, cursor=cursor)

    def toggle(self) -> SelectionState:
        if self.cursor is None:
            return self
        return replace(self, selected=self.selected ^ {self.cursor})

    def select_all(self, total: int) -> SelectionState:
        return replace(self, selected=frozenset(range(total)))

    def clear_all(self) -> SelectionState:
        return replace(self, selected=frozenset())


class SelectionModel:
    """Owns the entry list and the current selection state."""

    def __init__(self, entries: Sequence[Entry]):
        self._entries: tuple[Entry, ...] = tuple(entries)
        self.state = SelectionState.initial(len(self._entries))
        self.aborted = False

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def cursor(self) -> int | None:
        return self.state.cursor

    @property
    def selected(self) -> frozenset[int]:
        return self.state.selected

    def __len__(self) -> int:
        return len(self._entries)

    def move_cursor(self, delta: int) -> None:
        """Move the cursor, clamped to the list bounds (no wraparound)."""
        self.state = self.state.move_cursor(delta, len(self._entries))

    def move_to_top(self) -> None:
        self.move_cursor(-len(self._entries))

    def move_to_bottom(self) -> None:
        self.move_cursor(len(self._entries))

    def toggle_selection(self) -> None:
        self.state = self.state.toggle()

    def select_all(self) -> None:
        self.state = self.state.select_all(len(self._entries))

    def clear_all(self) -> None:
        self.state = self.state.clear_all()

    def confirm(self) -> tuple[Entry, ...]:
        """Return the selected entries in input order.

        With nothing toggled the entry under the cursor is returned, so a
        single Enter press picks one line.
        """
        if self.aborted or self.state.cursor is None:
            return ()
        if not self.state.selected:
            return (self._entries[self.state.cursor],)
        return tuple(self._entries[i] for i in sorted(self.state.selected))

    def abort(self) -> None:
        """Mark the session as cancelled; ``confirm`` yields nothing afterwards."""
        self.aborted = True
