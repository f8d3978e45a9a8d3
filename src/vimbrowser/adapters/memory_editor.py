"""In-memory implementation of the editor ports.

Used by the command line front end (which prints surfaces to stdout) and by
the tests. Follows the host editor's conventions: 1-based line numbers and
0-based columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..core.ports import DisplaySurface, Editor, Viewport


@dataclass
class MemorySurface(DisplaySurface):
    number: int
    name: str
    lines: list[str] = field(default_factory=list)
    filetype: str | None = None
    options: dict[str, object] = field(default_factory=dict)

    def append(self, after: int, lines: Sequence[str]) -> None:
        after = max(0, min(after, len(self.lines)))
        self.lines[after:after] = list(lines)

    def delete(self, first: int, last: int) -> None:
        if last < first:
            return
        del self.lines[max(first, 1) - 1 : last]

    def get_line(self, n: int) -> str:
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def set_line(self, n: int, value: str) -> None:
        if 1 <= n <= len(self.lines):
            self.lines[n - 1] = value

    def line_count(self) -> int:
        return len(self.lines)

    def set_filetype(self, filetype: str) -> None:
        self.filetype = filetype

    def set_options(self, **flags: object) -> None:
        self.options.update(flags)

    def text(self) -> str:
        return "\n".join(self.lines)


class MemoryViewport(Viewport):
    def __init__(self, editor: MemoryEditor, split: str = ""):
        self.editor = editor
        self.split = split
        self.tag: int | None = None
        self.surface: MemorySurface | None = None
        self._row = 1
        self._col = 0
        self._open = True

    def show(self, surface: DisplaySurface) -> None:
        self.surface = surface  # type: ignore[assignment]
        self._row, self._col = 1, 0

    def cursor(self) -> tuple[int, int]:
        return self._row, self._col

    def set_cursor(self, row: int, col: int) -> None:
        count = self.surface.line_count() if self.surface else 1
        self._row = max(1, min(row, max(count, 1)))
        self._col = max(0, col)

    def focus(self) -> None:
        self.editor.current = self

    def close(self) -> None:
        self._open = False
        if self.editor.current is self:
            self.editor.current = None

    def is_open(self) -> bool:
        return self._open


class MemoryEditor(Editor):
    def __init__(self) -> None:
        self.surfaces: dict[int, MemorySurface] = {}
        self._viewports: list[MemoryViewport] = []
        self.current: MemoryViewport | None = None
        self.inserting = False
        self._next_number = 1

    def create_surface(self, name: str) -> MemorySurface:
        surface = MemorySurface(number=self._next_number, name=name)
        self.surfaces[surface.number] = surface
        self._next_number += 1
        return surface

    def open_viewport(self, split: str = "") -> MemoryViewport:
        viewport = MemoryViewport(self, split)
        self._viewports.append(viewport)
        self.current = viewport
        return viewport

    def viewports(self) -> Iterable[MemoryViewport]:
        return [vp for vp in self._viewports if vp.is_open()]

    def start_insert(self) -> None:
        self.inserting = True

    def wipe_surface(self, number: int) -> MemorySurface | None:
        return self.surfaces.pop(number, None)
