"""UI module."""

from .keys import Action, build_keymap
from .picker import Picker
from .renderer import Renderer
from .terminal import TerminalHandle, TerminalUnavailableError
from .viewport import Viewport, compute_window

__all__ = [
    "Action",
    "Picker",
    "Renderer",
    "TerminalHandle",
    "TerminalUnavailableError",
    "Viewport",
    "build_keymap",
    "compute_window",
]
