"""Interactive selection loop."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from typing import Protocol

from linepick.models import LoopState, PickOptions, ViewWindow
from linepick.selection import SelectionModel
from linepick.ui.keys import Action, build_keymap
from linepick.ui.renderer import Renderer, Surface
from linepick.ui.terminal import TerminalHandle
from linepick.ui.viewport import Viewport

logger = logging.getLogger("linepick.picker")


class Terminal(Surface, Protocol):
    """Surface that also delivers key presses."""

    def read_key(self) -> str: ...


TerminalFactory = Callable[[], AbstractContextManager[Terminal]]


class Picker:
    """Drives the model from key presses until the user confirms or aborts.

    The terminal is entered before the first frame and released when the
    loop leaves ``RUNNING``, whatever the reason. Ctrl-C and termination
    signals end the loop as ``ABORTED``.
    """

    def __init__(
        self,
        model: SelectionModel,
        options: PickOptions | None = None,
        keybindings: Mapping[str, str] | None = None,
        terminal_factory: TerminalFactory = TerminalHandle,
    ):
        self.model = model
        self.options = options or PickOptions()
        self.keymap = build_keymap(keybindings)
        self.renderer = Renderer(model.entries, self.options)
        self.viewport = Viewport()
        self.window = ViewWindow(0, 0)
        self.state = LoopState.RUNNING
        self._terminal_factory = terminal_factory

    def run(self) -> LoopState:
        if self.state is not LoopState.RUNNING:
            raise RuntimeError(f"Picker already finished ({self.state.value})")

        logger.debug("Starting picker with %d entries", len(self.model))
        with self._terminal_factory() as terminal:
            try:
                self.redraw(terminal)
                while self.state is LoopState.RUNNING:
                    key = terminal.read_key()
                    if self.handle_key(key) and self.state is LoopState.RUNNING:
                        self.redraw(terminal)
            except KeyboardInterrupt:
                logger.debug("Interrupted")
                self._abort()

        logger.debug("Picker finished: %s", self.state.value)
        return self.state

    def redraw(self, surface: Surface) -> None:
        height = surface.height - self.renderer.chrome_rows(surface.height)
        self.window = self.viewport.compute(self.model.cursor, len(self.model), height)
        self.renderer.draw(surface, self.model.state, self.window)

    @property
    def page_size(self) -> int:
        return max(1, len(self.window))

    def handle_key(self, key: str) -> bool:
        """Apply one key press. Returns True when the screen needs a redraw."""
        action = self.keymap.get(key)
        if action is None:
            logger.debug("Ignoring key %r", key)
            return False

        model = self.model
        if action is Action.UP:
            model.move_cursor(-1)
        elif action is Action.DOWN:
            model.move_cursor(1)
        elif action is Action.PAGE_UP:
            model.move_cursor(-self.page_size)
        elif action is Action.PAGE_DOWN:
            model.move_cursor(self.page_size)
        elif action is Action.TOP:
            model.move_to_top()
        elif action is Action.BOTTOM:
            model.move_to_bottom()
        elif action is Action.TOGGLE:
            model.toggle_selection()
            if self.options.advance_on_toggle:
                model.move_cursor(1)
        elif action is Action.SELECT_ALL:
            model.select_all()
        elif action is Action.CLEAR_ALL:
            model.clear_all()
        elif action is Action.CONFIRM:
            self.state = LoopState.CONFIRMED
            return False
        elif action is Action.ABORT:
            self._abort()
            return False
        # Action.REDRAW falls through: no model change
        return True

    def _abort(self) -> None:
        self.model.abort()
        self.state = LoopState.ABORTED
