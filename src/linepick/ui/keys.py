"""Key bindings for the picker."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

import readchar

logger = logging.getLogger("linepick.keys")

# Pseudo-key emitted by the terminal when the window size changes
RESIZE_EVENT = "<resize>"


class Action(Enum):
    """What a key press does to the picker."""

    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOP = "top"
    BOTTOM = "bottom"
    TOGGLE = "toggle"
    SELECT_ALL = "select_all"
    CLEAR_ALL = "clear_all"
    CONFIRM = "confirm"
    ABORT = "abort"
    REDRAW = "redraw"


DEFAULT_KEYMAP: dict[str, Action] = {
    readchar.key.UP: Action.UP,
    "k": Action.UP,
    readchar.key.DOWN: Action.DOWN,
    "j": Action.DOWN,
    readchar.key.PAGE_UP: Action.PAGE_UP,
    readchar.key.PAGE_DOWN: Action.PAGE_DOWN,
    readchar.key.HOME: Action.TOP,
    "g": Action.TOP,
    readchar.key.END: Action.BOTTOM,
    "G": Action.BOTTOM,
    readchar.key.SPACE: Action.TOGGLE,
    readchar.key.TAB: Action.TOGGLE,
    readchar.key.RIGHT: Action.TOGGLE,
    "l": Action.TOGGLE,
    "a": Action.SELECT_ALL,
    "n": Action.CLEAR_ALL,
    readchar.key.ENTER: Action.CONFIRM,
    "\r": Action.CONFIRM,
    readchar.key.ESC: Action.ABORT,
    readchar.key.CTRL_C: Action.ABORT,
    readchar.key.LEFT: Action.ABORT,
    "h": Action.ABORT,
    "q": Action.ABORT,
    RESIZE_EVENT: Action.REDRAW,
}


def resolve_key(name: str) -> str:
    """Turn a key name like ``"x"``, ``"ctrl-x"`` or ``"page-up"`` into its sequence.

    Raises:
        ValueError: If the name is neither a single character nor a readchar key
    """
    if len(name) == 1:
        return name
    attr = name.strip().upper().replace("-", "_")
    value = getattr(readchar.key, attr, None)
    if not isinstance(value, str):
        raise ValueError(f"Unknown key name: '{name}'")
    return value


def build_keymap(overrides: Mapping[str, str] | None = None) -> dict[str, Action]:
    """Merge user bindings (key name -> action name) over the defaults.

    Invalid entries are logged and skipped.
    """
    keymap = dict(DEFAULT_KEYMAP)
    for key_name, action_name in (overrides or {}).items():
        try:
            key = resolve_key(key_name)
            action = Action(action_name)
        except ValueError as e:
            logger.warning("Ignoring key binding %r -> %r: %s", key_name, action_name, e)
            continue
        keymap[key] = action
    return keymap
