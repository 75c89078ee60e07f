"""CLI entry point."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape

from linepick import __version__
from linepick.models import ExitCode, LoopState, PickOptions

if TYPE_CHECKING:
    from linepick.config import Config
    from linepick.selection import SelectionModel

app = typer.Typer(
    name="linepick",
    help="Pick lines from stdin interactively and print them to stdout.",
    add_completion=False,
)
# stdout carries the result; messages go to stderr
err_console = Console(stderr=True)

logger = logging.getLogger("linepick.cli")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _get_config() -> Config:
    """Lazy import and load config."""
    from linepick.config import Config

    return Config.load()


def _configure_logging(log_file: str | None) -> None:
    if not log_file:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("linepick")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def _run_picker(
    model: SelectionModel, options: PickOptions, keybindings: Mapping[str, str]
) -> LoopState:
    """Lazy import and run the interactive loop."""
    from linepick.ui.picker import Picker

    return Picker(model, options, keybindings).run()


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush stays quiet."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
    except OSError:
        return
    try:
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        pass  # not backed by a file descriptor
    finally:
        os.close(devnull)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"linepick {__version__}")
        raise typer.Exit(0)


@app.command()
def pick(
    number: Annotated[
        bool, typer.Option("-n", "--number", help="Show line numbers")
    ] = False,
    id_mode: Annotated[
        bool, typer.Option("-i", "--id", help="Lines are '<id>::<text>'; print the id")
    ] = False,
    delimiter: Annotated[
        str | None, typer.Option("-d", "--delimiter", help="ID mode delimiter (default '::')")
    ] = None,
    skip_blank: Annotated[
        bool, typer.Option("--skip-blank", help="Drop blank input lines")
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Write debug log to this file")
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "-V", "--version", callback=_version_callback, is_eager=True, help="Show version"
        ),
    ] = None,
):
    """Select lines from stdin; the chosen lines are printed to stdout.

    Keys: up/k down/j move, space/tab toggle, a all, n none, enter confirm,
    esc/q quit.
    """
    from linepick.emitter import ResultEmitter
    from linepick.lines import parse_lines, read_input
    from linepick.selection import SelectionModel
    from linepick.ui.terminal import TerminalUnavailableError

    if delimiter is not None and not delimiter:
        raise typer.BadParameter("Delimiter must not be empty", param_hint="--delimiter")

    cfg = _get_config()
    _configure_logging(log_file or cfg.log_file)

    options = cfg.pick_options(
        numbering=number or None,
        id_mode=id_mode or None,
        id_delimiter=delimiter,
        skip_blank=skip_blank or None,
    )

    raw = read_input(sys.stdin)
    try:
        entries = parse_lines(
            raw,
            id_mode=options.id_mode,
            delimiter=options.id_delimiter,
            skip_blank=options.skip_blank,
        )
    except ValueError as e:
        # MalformedEntry, or an empty delimiter coming from config
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(int(ExitCode.MALFORMED_INPUT))

    logger.debug("Parsed %d entries (id_mode=%s)", len(entries), options.id_mode)
    model = SelectionModel(entries)

    try:
        keybindings = cfg.keybindings if isinstance(cfg.keybindings, dict) else {}
        state = _run_picker(model, options, keybindings)
    except TerminalUnavailableError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(int(ExitCode.TERMINAL_UNAVAILABLE))

    emitter = ResultEmitter(model, state)
    try:
        emitter.write(sys.stdout)
    except BrokenPipeError:
        # Reader went away (e.g. `| head -0`)
        logger.debug("stdout closed before output was written")
        _silence_stdout()
    raise typer.Exit(int(emitter.exit_code()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
