"""Lookups in a page's link index.

The index maps 0-based rendered lines to spans ordered by column. Callers pass
1-based surface rows; ``offset`` is the number of header lines shown above
the rendered content.
"""

from .model import Span

LinkIndex = dict[int, list[Span]]


def find_link_at(links: LinkIndex, offset: int, row: int, col: int) -> Span | None:
    """The span under (row, col), or None. Header rows never have links."""
    line = row - offset - 1
    if line < 0:
        return None
    for span in links.get(line, ()):
        if span.contains(col):
            return span
    return None


def find_adjacent_link(
    links: LinkIndex,
    line_count: int,
    offset: int,
    direction: int,
    row: int,
    col: int,
) -> tuple[Span, int] | None:
    """
    Next (direction > 0) or previous (direction < 0) span relative to the
    cursor, together with the row delta from ``row`` to the span's row.

    Spans on the cursor line count only when strictly past (or before) the
    cursor column. From inside the header, forward search starts at the first
    content line and includes its column 0; backward search finds nothing.
    """
    line = row - offset - 1
    shift = 0
    if line < 0:
        if direction < 0:
            return None
        shift = -line
        line, col = 0, -1

    spans = links.get(line, [])
    if direction > 0:
        after = [s for s in spans if s.start > col]
        if after:
            return after[0], shift
    else:
        before = [s for s in spans if s.end < col]
        if before:
            return before[-1], 0

    step = 1 if direction > 0 else -1
    n = line + step
    while 0 <= n < line_count:
        spans = links.get(n)
        if spans:
            span = spans[0] if step > 0 else spans[-1]
            return span, n - line + shift
        n += step
    return None
