"""Turn raw input text into selectable entries."""

from __future__ import annotations

from typing import TextIO

from linepick.models import Entry

DEFAULT_DELIMITER = "::"


class MalformedEntry(ValueError):
    """Raised when an ID-mode line has no delimiter."""

    def __init__(self, line_number: int, line: str, delimiter: str = DEFAULT_DELIMITER):
        self.line_number = line_number
        self.line = line
        self.delimiter = delimiter
        super().__init__(f"line {line_number}: missing '{delimiter}' delimiter in {line!r}")


def split_lines(raw_text: str) -> list[str]:
    """Split on newlines, dropping the empty tail left by a final terminator.

    A trailing carriage return is stripped from every line so CRLF input
    behaves like LF input.
    """
    if not raw_text:
        return []
    lines = raw_text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_lines(
    raw_text: str,
    id_mode: bool = False,
    delimiter: str = DEFAULT_DELIMITER,
    skip_blank: bool = False,
) -> tuple[Entry, ...]:
    """Parse raw input into an immutable entry list.

    Args:
        raw_text: Whole input as text
        id_mode: Split each line into ``<id><delimiter><display>``
        delimiter: ID-mode separator, split on its first occurrence
        skip_blank: Drop blank lines instead of keeping them as empty entries

    Returns:
        Entries in input order

    Raises:
        MalformedEntry: In ID mode, when a non-blank line lacks the delimiter
        ValueError: In ID mode, when the delimiter is empty
    """
    if id_mode and not delimiter:
        raise ValueError("ID mode delimiter must not be empty")

    entries: list[Entry] = []
    for number, line in enumerate(split_lines(raw_text), start=1):
        if not line and (skip_blank or id_mode):
            # Blank lines carry no id, so ID mode always drops them
            continue
        if not id_mode:
            entries.append(Entry.plain(line))
            continue
        output_id, sep, display = line.partition(delimiter)
        if not sep:
            raise MalformedEntry(number, line, delimiter)
        entries.append(Entry(display=display, output_id=output_id))
    return tuple(entries)


def read_input(stream: TextIO) -> str:
    """Read the whole input stream before any interaction starts."""
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer.read().decode("utf-8", errors="replace")
    return stream.read()
