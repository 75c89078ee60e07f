"""Tests for the interactive selection loop."""

import pytest
import readchar

from linepick.emitter import ResultEmitter
from linepick.lines import parse_lines
from linepick.models import ExitCode, LoopState, PickOptions, ViewWindow
from linepick.selection import SelectionModel
from linepick.ui.keys import RESIZE_EVENT
from linepick.ui.picker import Picker

UP = readchar.key.UP
DOWN = readchar.key.DOWN
ENTER = "\n"
ESC = "\x1b"


def run_picker(raw, keys, terminal_cls, options=None, keybindings=None, **term_kwargs):
    options = options or PickOptions()
    model = SelectionModel(parse_lines(raw, id_mode=options.id_mode))
    terminal = terminal_cls(keys, **term_kwargs)
    picker = Picker(model, options, keybindings, terminal_factory=lambda: terminal)
    state = picker.run()
    return picker, terminal, ResultEmitter(model, state)


class TestScenarios:
    def test_down_down_space_enter(self, fake_terminal):
        _, _, emitter = run_picker("x\ny\nz\n", [DOWN, DOWN, " ", ENTER], fake_terminal)

        assert emitter.collect() == ["z"]
        assert emitter.exit_code() == ExitCode.SUCCESS

    def test_id_mode_round_trip(self, fake_terminal):
        options = PickOptions(id_mode=True)
        keys = [" ", DOWN, DOWN, " ", ENTER]

        _, _, emitter = run_picker("a::1\nb::2\nc::3\n", keys, fake_terminal, options)

        assert emitter.collect() == ["a", "c"]

    def test_confirm_without_toggle_picks_cursor(self, fake_terminal):
        _, _, emitter = run_picker("x\ny\n", ["j", ENTER], fake_terminal)

        assert emitter.collect() == ["y"]

    def test_empty_input_enter(self, fake_terminal):
        picker, terminal, emitter = run_picker("", [ENTER], fake_terminal)

        assert picker.state is LoopState.CONFIRMED
        assert emitter.collect() == []
        assert emitter.exit_code() == ExitCode.EMPTY_INPUT
        assert terminal.exited == 1

    def test_empty_input_ignores_movement(self, fake_terminal):
        picker, _, emitter = run_picker("", [DOWN, " ", "a", ENTER], fake_terminal)

        assert picker.model.cursor is None
        assert emitter.collect() == []

    def test_escape_aborts(self, fake_terminal):
        picker, _, emitter = run_picker("x\ny\n", [" ", ESC], fake_terminal)

        assert picker.state is LoopState.ABORTED
        assert emitter.collect() == []
        assert emitter.exit_code() == ExitCode.ABORTED

    def test_select_all_then_clear(self, fake_terminal):
        _, _, emitter = run_picker("a\nb\nc\n", ["a", "n", "G", ENTER], fake_terminal)

        assert emitter.collect() == ["c"]

    def test_select_all(self, fake_terminal):
        _, _, emitter = run_picker("a\nb\nc\n", ["a", ENTER], fake_terminal)

        assert emitter.collect() == ["a", "b", "c"]


class TestTerminalLifecycle:
    def test_initial_frame_before_first_key(self, fake_terminal):
        _, terminal, _ = run_picker("x\ny\n", [ENTER], fake_terminal)

        assert terminal.entered == 1
        assert len(terminal.frames) == 1
        assert ">  x" in terminal.frames[0]

    def test_keyboard_interrupt_aborts_and_releases(self, fake_terminal):
        picker, terminal, emitter = run_picker("x\n", [DOWN, KeyboardInterrupt], fake_terminal)

        assert picker.state is LoopState.ABORTED
        assert terminal.exited == 1
        assert emitter.collect() == []

    def test_unexpected_error_still_releases(self, fake_terminal):
        terminal = fake_terminal([RuntimeError("boom")])
        picker = Picker(SelectionModel(parse_lines("x\n")), terminal_factory=lambda: terminal)

        with pytest.raises(RuntimeError, match="boom"):
            picker.run()

        assert terminal.exited == 1
        assert terminal.exit_exc_type is RuntimeError

    def test_cannot_run_twice(self, fake_terminal):
        picker, _, _ = run_picker("x\n", [ENTER], fake_terminal)

        with pytest.raises(RuntimeError):
            picker.run()


class TestRedraw:
    def test_unknown_key_does_not_redraw(self, fake_terminal):
        _, terminal, _ = run_picker("x\ny\n", ["z", "?", ENTER], fake_terminal)

        assert len(terminal.frames) == 1

    def test_each_bound_key_redraws(self, fake_terminal):
        _, terminal, _ = run_picker("x\ny\n", [DOWN, " ", UP, ENTER], fake_terminal)

        assert len(terminal.frames) == 4
        assert " * y" in terminal.frames[-1]
        assert ">  x" in terminal.frames[-1]

    def test_resize_redraws_without_model_change(self, fake_terminal):
        raw = "".join(f"{i}\n" for i in range(50))
        options = PickOptions(show_header=False)
        model = SelectionModel(parse_lines(raw))
        terminal = fake_terminal([RESIZE_EVENT, ENTER], height=10)
        picker = Picker(model, options, terminal_factory=lambda: terminal)
        model.move_cursor(30)

        def shrink_then_read():
            terminal.height = 5
            return type(terminal).read_key(terminal)

        terminal.read_key = shrink_then_read
        picker.run()

        assert len(terminal.frames) == 2
        assert picker.window == ViewWindow(26, 31)
        assert model.cursor == 30


class TestNavigation:
    def test_hundred_lines_window(self, fake_terminal):
        raw = "".join(f"line{i}\n" for i in range(100))
        options = PickOptions(show_header=False)

        picker, terminal, _ = run_picker(raw, ["G", ENTER], fake_terminal, options, height=10)

        assert picker.model.cursor == 99
        assert picker.window == ViewWindow(90, 100)
        assert "line99" in terminal.frames[-1]
        assert "line89" not in terminal.frames[-1]

    def test_header_takes_one_row(self, fake_terminal):
        raw = "".join(f"line{i}\n" for i in range(100))

        picker, _, _ = run_picker(raw, ["G", ENTER], fake_terminal, height=10)

        assert picker.window == ViewWindow(91, 100)

    def test_one_row_terminal_shows_only_cursor_row(self, fake_terminal):
        picker, terminal, _ = run_picker("a\nb\n", [DOWN, ENTER], fake_terminal, height=1)

        rows = terminal.frames[-1].splitlines()
        assert rows == [">  b"]
        assert picker.window == ViewWindow(1, 2)

    def test_page_down_moves_by_window(self, fake_terminal):
        raw = "".join(f"{i}\n" for i in range(100))
        options = PickOptions(show_header=False)
        keys = [readchar.key.PAGE_DOWN, readchar.key.PAGE_DOWN, ENTER]

        picker, _, _ = run_picker(raw, keys, fake_terminal, options, height=10)

        assert picker.model.cursor == 20

    def test_down_clamps_at_end(self, fake_terminal):
        picker, _, _ = run_picker("x\ny\n", [DOWN] * 5 + [ENTER], fake_terminal)

        assert picker.model.cursor == 1

    def test_advance_on_toggle(self, fake_terminal):
        options = PickOptions(advance_on_toggle=True)

        _, _, emitter = run_picker("a\nb\nc\n", [" ", " ", ENTER], fake_terminal, options)

        assert emitter.collect() == ["a", "b"]


class TestKeybindings:
    def test_custom_binding(self, fake_terminal):
        _, _, emitter = run_picker("x\ny\n", ["J", "x"], fake_terminal, keybindings={
            "J": "down",
            "x": "confirm",
        })

        assert emitter.collect() == ["y"]

    def test_handle_key_reports_redraw(self):
        picker = Picker(SelectionModel(parse_lines("x\ny\n")))

        assert picker.handle_key(DOWN) is True
        assert picker.handle_key("%") is False
        assert picker.handle_key(ENTER) is False
        assert picker.state is LoopState.CONFIRMED
