from typing import Iterable, Protocol, Sequence

import httpx

from .model import Location, Rendering


class DisplaySurface(Protocol):
    """
    A line-addressable text buffer owned by the host editor.
    Line numbers are 1-based; append(0, ...) inserts at the top.
    """

    number: int
    name: str

    def append(self, after: int, lines: Sequence[str]) -> None:
        pass

    def delete(self, first: int, last: int) -> None:
        pass

    def get_line(self, n: int) -> str:
        pass

    def set_line(self, n: int, value: str) -> None:
        pass

    def line_count(self) -> int:
        pass

    def set_filetype(self, filetype: str) -> None:
        pass

    def set_options(self, **flags: object) -> None:
        pass


class Viewport(Protocol):
    """
    An editor window showing one surface. The browser window id is stored in
    ``tag`` so a viewport can be mapped back to its Window.
    """

    tag: int | None

    def show(self, surface: DisplaySurface) -> None:
        pass

    def cursor(self) -> tuple[int, int]:
        pass

    def set_cursor(self, row: int, col: int) -> None:
        pass

    def focus(self) -> None:
        pass

    def close(self) -> None:
        pass

    def is_open(self) -> bool:
        pass


class Editor(Protocol):
    def create_surface(self, name: str) -> DisplaySurface:
        pass

    def open_viewport(self, split: str = "") -> Viewport:
        pass

    def viewports(self) -> Iterable[Viewport]:
        pass

    def start_insert(self) -> None:
        pass


class Messenger(Protocol):
    """
    User-facing reporting. Errors are reported here, never raised.
    """

    def message(self, text: str) -> None:
        pass

    def warning(self, text: str) -> None:
        pass

    def error(self, text: str) -> None:
        pass

    def debug(self, text: str) -> None:
        pass

    def ask(self, prompt: str, secret: bool = False) -> str | None:
        pass

    def choose(self, prompt: str, choices: Sequence[str]) -> int | None:
        pass


class Renderer(Protocol):
    """
    HTML-to-text layout engine. Line numbers in the returned link and fragment
    indices are 0-based.
    """

    def render(
        self,
        source: str,
        width: int,
        base: str,
        forms: list,
        markup: dict[str, tuple[str, str]] | None = None,
    ) -> Rendering:
        pass


class Fetcher(Protocol):
    def fetch(self, target: str | Location | httpx.Request) -> httpx.Response:
        pass
