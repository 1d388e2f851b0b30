"""Small text helpers shared by the command-line views."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

_FILLED = "\u2588"
_EMPTY = "\u2591"
_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def progress_bar(percent: float, width: int) -> str:
    """Render a bar of ``width`` cells, filled in proportion to ``percent``."""
    percent = min(percent, 100)
    filled = min(int(percent / 100 * width), width)
    filled = max(filled, 0)
    return _FILLED * filled + _EMPTY * (width - filled)


def truncate(text: str, limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, marking the cut with '...'."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _visible_len(text: str) -> int:
    return len(_ANSI_ESCAPE.sub("", text))


def _pad(text: str, width: int) -> str:
    return text + " " * (width - _visible_len(text))


def render_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Lay out ``rows`` under ``headers`` as aligned columns."""
    header_cells = [str(h) for h in headers]
    columns = len(header_cells)
    body = []
    for row in rows:
        cells = [str(cell) for cell in row][:columns]
        cells.extend([""] * (columns - len(cells)))
        body.append(cells)

    widths = [_visible_len(h) for h in header_cells]
    for cells in body:
        widths = [max(w, _visible_len(c)) for w, c in zip(widths, cells)]

    def line(cells: Sequence[str]) -> str:
        return ("  " + "  ".join(_pad(c, w) for c, w in zip(cells, widths))).rstrip()

    lines = [line(header_cells), "  " + "  ".join("\u2500" * w for w in widths)]
    lines.extend(line(cells) for cells in body)
    return "\n".join(lines)