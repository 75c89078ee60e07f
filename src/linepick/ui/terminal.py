"""Controlling-terminal session for the picker.

Standard input is the data pipe, so keys are read from ``/dev/tty`` and the
UI is drawn there too, on the alternate screen. Everything acquired while
entering the session (tty descriptor, cbreak mode, signal handlers, resize
pipe, Rich ``Live`` screen) is registered on an ``ExitStack`` and released in
reverse order on every exit path.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import signal
import termios
import tty
from collections import deque
from contextlib import ExitStack
from typing import Any

from rich.console import Console, RenderableType
from rich.live import Live

from linepick.ui.keys import RESIZE_EVENT

logger = logging.getLogger("linepick.terminal")

TTY_PATH = "/dev/tty"
ESC = "\x1b"
CSI = ESC + "["
# Seconds to wait for the rest of an escape sequence before treating ESC as a key
ESCAPE_TIMEOUT = 0.025
READ_SIZE = 1024
DEFAULT_SIZE = (80, 24)


class TerminalUnavailableError(RuntimeError):
    """Raised when no interactive terminal can be acquired."""

    pass


def split_keys(data: str) -> tuple[list[str], str]:
    """Split decoded input into key presses.

    Returns:
        Tuple of (complete keys, incomplete escape-sequence tail)
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch != ESC:
            keys.append(ch)
            i += 1
            continue

        if i + 1 >= len(data):
            return keys, data[i:]

        nxt = data[i + 1]
        if nxt == "[":
            # CSI: parameters/intermediates until a final byte in @..~
            j = i + 2
            while j < len(data) and not ("@" <= data[j] <= "~"):
                j += 1
            if j >= len(data):
                return keys, data[i:]
            keys.append(data[i : j + 1])
            i = j + 1
        elif nxt == "O":
            # SS3 (application cursor mode), normalised to the CSI form
            if i + 2 >= len(data):
                return keys, data[i:]
            keys.append(CSI + data[i + 2])
            i += 3
        elif nxt == ESC:
            keys.append(ESC)
            i += 1
        else:
            keys.append(data[i : i + 2])
            i += 2
    return keys, ""


def _raise_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt(f"signal {signum}")


class TerminalHandle:
    """Exclusive cbreak-mode session on the controlling terminal.

    Example:
        with TerminalHandle() as term:
            term.draw(Text("hello"))
            key = term.read_key()
    """

    def __init__(self, path: str = TTY_PATH, escape_timeout: float = ESCAPE_TIMEOUT):
        self.path = path
        self.escape_timeout = escape_timeout
        self._stack: ExitStack | None = None
        self._fd: int | None = None
        self._wake_r: int | None = None
        self._wake_w: int | None = None
        self._console: Console | None = None
        self._live: Live | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pending: deque[str] = deque()

    # -- lifecycle ----------------------------------------------------------

    def __enter__(self) -> TerminalHandle:
        if self._stack is not None:
            raise RuntimeError("Terminal session already active")
        stack = ExitStack()
        try:
            self._acquire(stack)
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        logger.debug("Terminal acquired: %s", self.path)
        return self

    def __exit__(self, *exc_info: object) -> None:
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.close()
            logger.debug("Terminal released")

    def _acquire(self, stack: ExitStack) -> None:
        try:
            fd = os.open(self.path, os.O_RDWR | os.O_NOCTTY)
        except OSError as e:
            raise TerminalUnavailableError(f"Cannot open {self.path}: {e.strerror}") from e
        stack.callback(os.close, fd)
        stack.callback(self._reset_fields)
        self._fd = fd

        try:
            saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except termios.error as e:
            raise TerminalUnavailableError(f"{self.path} is not an interactive terminal") from e
        stack.callback(termios.tcsetattr, fd, termios.TCSADRAIN, saved)

        # Ctrl-C, Ctrl-\ and Ctrl-Z arrive as key bytes instead of signals
        mode = termios.tcgetattr(fd)
        mode[tty.LFLAG] &= ~termios.ISIG
        termios.tcsetattr(fd, termios.TCSADRAIN, mode)

        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_r, False)
        os.set_blocking(self._wake_w, False)
        stack.callback(os.close, self._wake_r)
        stack.callback(os.close, self._wake_w)

        self._install_signal(stack, signal.SIGWINCH, self._on_resize)
        self._install_signal(stack, signal.SIGTERM, _raise_interrupt)
        self._install_signal(stack, signal.SIGHUP, _raise_interrupt)
        self._install_signal(stack, signal.SIGQUIT, _raise_interrupt)

        out = open(fd, "w", encoding="utf-8", closefd=False)
        stack.callback(out.close)
        self._console = Console(file=out, force_terminal=True, highlight=False)
        self._console.size = self.size
        self._live = Live(
            console=self._console,
            screen=True,
            auto_refresh=False,
            transient=True,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        stack.enter_context(self._live)

    def _install_signal(self, stack: ExitStack, signum: signal.Signals, handler: Any) -> None:
        try:
            previous = signal.signal(signum, handler)
        except ValueError:
            # Not the main thread; the handler cannot be installed
            logger.debug("Skipping handler for %s outside main thread", signum.name)
            return
        stack.callback(signal.signal, signum, previous)

    def _reset_fields(self) -> None:
        self._fd = self._wake_r = self._wake_w = None
        self._console = self._live = None
        self._buffer = ""
        self._pending.clear()

    def _on_resize(self, signum: int, frame: Any) -> None:
        if self._wake_w is None:
            return
        try:
            os.write(self._wake_w, b"\0")
        except BlockingIOError:
            pass  # a wakeup is already queued

    # -- output -------------------------------------------------------------

    @property
    def size(self) -> tuple[int, int]:
        if self._fd is None:
            return DEFAULT_SIZE
        try:
            columns, lines = os.get_terminal_size(self._fd)
        except OSError:
            return DEFAULT_SIZE
        return (columns or DEFAULT_SIZE[0], lines or DEFAULT_SIZE[1])

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]

    def draw(self, renderable: RenderableType) -> None:
        if self._live is None or self._console is None:
            raise RuntimeError("Terminal session is not active")
        self._console.size = self.size
        self._live.update(renderable, refresh=True)

    # -- input --------------------------------------------------------------

    def read_key(self) -> str:
        """Block until the next key press (or ``RESIZE_EVENT``)."""
        if self._fd is None:
            raise RuntimeError("Terminal session is not active")
        while not self._pending:
            self._fill()
        return self._pending.popleft()

    def _fill(self) -> None:
        readable = self._wait([self._fd, self._wake_r], None)
        if self._wake_r in readable:
            self._drain_wake()
            logger.debug("Resize: %dx%d", *self.size)
            self._pending.append(RESIZE_EVENT)
            return
        if self._fd not in readable:
            return

        self._feed(self._read_text())
        while self._buffer:
            if not self._wait([self._fd], self.escape_timeout):
                # Nothing followed: a bare ESC or a truncated sequence
                self._pending.append(self._buffer)
                self._buffer = ""
                break
            self._feed(self._read_text())

    def _feed(self, text: str) -> None:
        keys, self._buffer = split_keys(self._buffer + text)
        self._pending.extend(keys)

    def _wait(self, fds: list[int | None], timeout: float | None) -> list[int]:
        readable, _, _ = select.select([fd for fd in fds if fd is not None], [], [], timeout)
        return readable

    def _read_text(self) -> str:
        data = os.read(self._fd, READ_SIZE)
        if not data:
            raise TerminalUnavailableError(f"{self.path} was closed")
        return self._decoder.decode(data)

    def _drain_wake(self) -> None:
        try:
            while os.read(self._wake_r, 64):
                pass
        except BlockingIOError:
            pass
