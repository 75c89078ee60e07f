"""Pytest fixtures for linepick tests."""

import io
import os

import pytest
from rich.console import Console


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at an empty directory and clear the cache around each test."""
    from linepick.config import clear_config_cache

    monkeypatch.setenv("LINEPICK_CONFIG_DIR", str(tmp_path / "config"))
    for key in list(os.environ):
        if key.startswith("LINEPICK_") and key != "LINEPICK_CONFIG_DIR":
            monkeypatch.delenv(key)
    clear_config_cache()

    yield tmp_path / "config"

    clear_config_cache()


class FakeTerminal:
    """In-memory terminal: scripted keys in, plain-text frames out.

    A key that is an exception (class or instance) is raised from read_key.
    """

    def __init__(self, keys, width: int = 40, height: int = 10):
        self.keys = list(keys)
        self.width = width
        self.height = height
        self.frames: list[str] = []
        self.entered = 0
        self.exited = 0
        self.exit_exc_type = None

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited += 1
        self.exit_exc_type = exc_type

    def draw(self, renderable) -> None:
        console = Console(
            file=io.StringIO(), width=self.width, height=self.height, color_system=None
        )
        console.print(renderable)
        self.frames.append(console.file.getvalue())

    def read_key(self) -> str:
        if not self.keys:
            raise AssertionError("read_key called after the scripted keys ran out")
        key = self.keys.pop(0)
        if isinstance(key, BaseException) or (
            isinstance(key, type) and issubclass(key, BaseException)
        ):
            raise key
        return key


@pytest.fixture
def fake_terminal():
    """Factory for FakeTerminal instances."""
    return FakeTerminal
