"""Scrolling window over the entry list."""

from linepick.models import ViewWindow


def compute_window(
    cursor: int | None,
    total_items: int,
    height: int,
    previous_start: int = 0,
) -> ViewWindow:
    """Calculate the visible range for a scrolling list.

    The window scrolls by the minimum amount needed to keep the cursor
    visible, starting from ``previous_start``.

    Args:
        cursor: Current cursor position, None for an empty list
        total_items: Total number of entries
        height: Rows available for entries
        previous_start: Window start from the last render

    Returns:
        ViewWindow with ``end - start == min(height, total_items)``
    """
    if total_items == 0 or cursor is None:
        return ViewWindow(0, 0)

    size = min(max(1, height), total_items)
    cursor = max(0, min(cursor, total_items - 1))

    # Clamp stale offset (terminal grew, or list is shorter than before)
    start = max(0, min(previous_start, total_items - size))

    if cursor < start:
        start = cursor
    elif cursor >= start + size:
        start = cursor - size + 1

    return ViewWindow(start, start + size)


class Viewport:
    """Remembers the last window start between renders."""

    def __init__(self) -> None:
        self.start = 0

    def compute(self, cursor: int | None, total_items: int, height: int) -> ViewWindow:
        window = compute_window(cursor, total_items, height, self.start)
        self.start = window.start
        return window
