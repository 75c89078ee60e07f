"""Data models for linepick."""

from dataclasses import dataclass
from enum import Enum, IntEnum


@dataclass(frozen=True)
class Entry:
    """One selectable line.

    ``output_id`` is what gets printed on confirm. Outside ID mode it equals
    ``display``.
    """

    display: str
    output_id: str

    @classmethod
    def plain(cls, line: str) -> "Entry":
        return cls(display=line, output_id=line)


@dataclass(frozen=True)
class ViewWindow:
    """Visible slice ``[start, end)`` of the entry list."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.end

    def indices(self) -> range:
        return range(self.start, self.end)


@dataclass(frozen=True)
class PickOptions:
    """Resolved options consumed by the selection core."""

    numbering: bool = False
    id_mode: bool = False
    id_delimiter: str = "::"
    skip_blank: bool = False
    show_header: bool = True
    cursor_indicator: str = ">"
    selected_indicator: str = "*"
    advance_on_toggle: bool = False


class LoopState(Enum):
    """Input loop states."""

    RUNNING = "running"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    EMPTY_INPUT = 1
    MALFORMED_INPUT = 4
    TERMINAL_UNAVAILABLE = 3
    ABORTED = 130
