"""Frame rendering for the picker (Rich Text)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from rich.console import RenderableType
from rich.text import Text

from linepick.models import Entry, PickOptions, ViewWindow
from linepick.selection import SelectionState

HEADER_STYLE = "black on white"
CURSOR_STYLE = "bold"
SELECTED_STYLE = "reverse"
NUMBER_STYLE = "dim"
KEY_HINTS = "[space:toggle  enter:confirm  esc/q:quit  a:all  n:none]"


class Surface(Protocol):
    """Anything the renderer can draw a frame onto."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def draw(self, renderable: RenderableType) -> None: ...


class Renderer:
    """Builds one frame per state change.

    Rows are truncated to the surface width so each entry stays on one line.
    Line numbers refer to the original input position.
    """

    def __init__(self, entries: Sequence[Entry], options: PickOptions):
        self.entries = entries
        self.options = options
        self._number_width = len(str(len(entries)))

    def shows_header(self, height: int | None = None) -> bool:
        # A one-row terminal only has room for the cursor row
        return self.options.show_header and (height is None or height >= 2)

    def chrome_rows(self, height: int | None = None) -> int:
        """Rows used by anything other than entries."""
        return 1 if self.shows_header(height) else 0

    def header(self, state: SelectionState) -> Text:
        position = f"{state.cursor + 1}/{len(self.entries)}" if state.cursor is not None else "0/0"
        return Text(
            f" ({len(state.selected)} selected / {len(self.entries)} total)  {position}  {KEY_HINTS} ",
            style=HEADER_STYLE,
        )

    def row(self, index: int, state: SelectionState) -> Text:
        opts = self.options
        is_cursor = index == state.cursor
        is_selected = index in state.selected

        text = Text(style=SELECTED_STYLE if is_selected else "")
        text.append(
            opts.cursor_indicator if is_cursor else " " * len(opts.cursor_indicator),
            style=CURSOR_STYLE if is_cursor else "",
        )
        text.append(opts.selected_indicator if is_selected else " " * len(opts.selected_indicator))
        text.append(" ")
        if opts.numbering:
            text.append(f"{index + 1:0{self._number_width}d}", style=NUMBER_STYLE)
            text.append(" ")
        text.append(self.entries[index].display, style=CURSOR_STYLE if is_cursor else "")
        return text

    def frame(
        self, state: SelectionState, window: ViewWindow, width: int, height: int | None = None
    ) -> Text:
        lines: list[Text] = []
        if self.shows_header(height):
            lines.append(self.header(state))
        lines.extend(self.row(i, state) for i in window.indices())

        for line in lines:
            line.truncate(max(1, width), overflow="ellipsis")

        frame = Text("\n").join(lines)
        frame.no_wrap = True
        return frame

    def draw(self, surface: Surface, state: SelectionState, window: ViewWindow) -> None:
        surface.draw(self.frame(state, window, surface.width, surface.height))
