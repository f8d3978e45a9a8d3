"""One fetched document: metadata, source, rendering and the action to take.

``FORMATS`` maps a content type to either a rendering function (the page is
shown) or the name of an action. Unknown content types are saved.
"""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass, field
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Callable, Sequence, Union
from urllib.parse import unquote

import httpx

from ..adapters.html_forms import parse_forms
from ..config import RenderConfig
from . import links as link_index
from .model import Action, Location, Span, Target
from .ports import DisplaySurface, Editor, Fetcher, Messenger, Renderer

logger = logging.getLogger(__name__)

SURFACE_PREFIX = "VimBrowser:-"
SURFACE_SUFFIX = "-"
DEFAULT_ACTION: Action = "save"

# Renderer lines are 0-based, surface lines 1-based
FRAGMENT_LINE_OFFSET = 1

HEADER_LABEL = "Document header"

# Content-Encoding values that describe compression, not a character set
TRANSFER_CODINGS = frozenset({"gzip", "x-gzip", "deflate", "br", "compress", "zstd", "identity"})
CHARSET_RE = re.compile(r"charset=([^\s;]+)", re.IGNORECASE)


@dataclass
class Services:
    """Everything a Page needs from the outside world."""
    fetcher: Fetcher
    renderer: Renderer
    editor: Editor
    messenger: Messenger
    render: RenderConfig = field(default_factory=RenderConfig)


Formatter = Callable[["Page"], Sequence[str]]


def surface_name(location: Location | str) -> str:
    return f"{SURFACE_PREFIX}{location}{SURFACE_SUFFIX}"


def location_of_surface(name: str) -> Location | None:
    """Inverse of surface_name(); None for surfaces that are not pages."""
    if not (name.startswith(SURFACE_PREFIX) and name.endswith(SURFACE_SUFFIX)):
        return None
    inner = name[len(SURFACE_PREFIX) : -len(SURFACE_SUFFIX)]
    return Location.parse(inner) if inner else None


def response_location(response: httpx.Response) -> Location:
    """Effective location of a response, after any redirects."""
    url = response.url
    if url.scheme == "file":
        # keep the empty authority: file:///path
        return Location.parse(Path(unquote(url.path)).as_uri())
    return Location.parse(str(url))


def _is_codec(name: str) -> bool:
    try:
        codecs.lookup(name)
    except LookupError:
        return False
    return True


def detect_encoding(response: httpx.Response, assumed: str, messenger: Messenger) -> str:
    declared = response.headers.get("content-encoding", "").strip().lower()
    if declared and declared not in TRANSFER_CODINGS and _is_codec(declared):
        return declared
    for value in response.headers.get_list("content-type"):
        m = CHARSET_RE.search(value)
        if m:
            return m.group(1).strip("\"'")
    messenger.warning(f"Unable to get page encoding, assuming {assumed}")
    return assumed


def _localtime(value: str | None) -> str | None:
    if not value:
        return None
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return value
    return when.astimezone().strftime("%a %b %d %H:%M:%S %Y")


def decode(source: bytes, encoding: str | None) -> str:
    if encoding and _is_codec(encoding):
        return source.decode(encoding, errors="replace")
    return source.decode("utf-8", errors="replace")


def format_html(page: Page) -> list[str]:
    page.type = "html"
    html = decode(page.source, page.header.get("encoding"))
    settings = page.services.render
    forms = parse_forms(html, page.base)
    rendering = page.services.renderer.render(
        html, settings.text_width, page.base, forms, settings.markup or None
    )
    page.forms = forms
    page.links = rendering.links
    page.fragments = rendering.fragments
    page.title = rendering.title
    for key in ("keywords", "description"):
        if rendering.meta.get(key):
            page.header[key] = str(rendering.meta[key])
    return rendering.lines


def format_plain(page: Page) -> list[str]:
    return decode(page.source, page.header.get("encoding")).splitlines()


FORMATS: dict[str, Union[Formatter, str]] = {
    "text/html": format_html,
    "text/plain": format_plain,
}


def register_format(content_type: str, handler: Union[Formatter, str]) -> None:
    """Register a rendering function or an action name for a content type."""
    FORMATS[content_type.lower()] = handler


class Page:
    """
    A fetched document. Rendered ``lines`` and the ``links``/``fragments``
    indices are fixed at construction; showing the header block only moves
    ``offset``.
    """

    def __init__(self, services: Services):
        self.services = services
        self.location: Location | None = None
        self.title: str | None = None
        self.header: dict[str, str] = {}
        self.base = ""
        self.source = b""
        self.lines: tuple[str, ...] = ()
        self.links: dict[int, list[Span]] = {}
        self.fragments: dict[str, int] = {}
        self.forms: list = []
        self.surface: DisplaySurface | None = None
        self.offset = 0
        self.action: Action = DEFAULT_ACTION
        self.action_args: tuple = ()
        self.type: str | None = None

    def __str__(self) -> str:
        return str(self.location)

    def __repr__(self) -> str:
        return f"<Page {self.location} action={self.action}>"

    @property
    def messenger(self) -> Messenger:
        return self.services.messenger

    @property
    def surface_name(self) -> str:
        return surface_name(self.location)

    @classmethod
    def create(
        cls,
        target: Target,
        services: Services,
        action: Action | None = None,
        *action_args: object,
    ) -> Page | None:
        """
        Fetch and prepare a page. Pages whose action is ``show`` are shown
        right away; None when there is nothing to show.
        """
        logger.debug("Creating a new page for %s", target)
        page = cls(services)
        response = services.fetcher.fetch(target)
        lines = page._prepare(response, action)
        page.action_args = tuple(action_args)
        if page.action == "show":
            page.lines = tuple(lines)
            if not page.show():
                return None
        return page

    def _prepare(self, response: httpx.Response, action: Action | None) -> list[str]:
        self.location = response_location(response)
        self.base = self.location.url
        self.source = response.content

        headers = response.headers
        content_type = headers.get("content-type", "").split(";")[0].strip().lower()
        encoding = detect_encoding(response, self.services.render.assumed_encoding, self.messenger)
        fields = {
            "expires": _localtime(headers.get("expires")),
            "last modified": _localtime(headers.get("last-modified")),
            "content type": content_type,
            "encoding": encoding,
            "language": headers.get("content-language"),
            "server": headers.get("server"),
        }
        self.header = {k: v for k, v in fields.items() if v}

        handler = FORMATS.get(content_type, DEFAULT_ACTION)
        if action == "show" and not callable(handler):
            handler = format_plain
        elif action is not None and action != "show":
            handler = action
        if callable(handler):
            self.action = "show"
            return list(handler(self))
        self.action = handler
        return []

    # actions

    def show(self, lines: Sequence[str] | None = None) -> bool:
        lines = list(self.lines if lines is None else lines)
        if not lines:
            self.messenger.warning("Document contains no data")
            return False
        if self.surface is None:
            logger.debug("Creating a new surface for %s", self.location)
            self.surface = self.services.editor.create_surface(self.surface_name)
            self.surface.set_filetype("browser")
            self.surface.set_options(buftype="nofile", swapfile=False, bufhidden="hide")
        else:
            logger.debug("Using existing surface %s for %s", self.surface.name, self.location)
            self.surface.delete(1, self.surface.line_count())
        self.surface.append(0, lines)
        self.offset = 0
        return True

    def save(self, path: str | Path | None = None) -> bool:
        if not path:
            path = self.messenger.ask("Save to file: ")
        if not path:
            return False
        try:
            Path(path).expanduser().write_bytes(self.source)
        except OSError:
            self.messenger.error(f"Unable to open {path} for writing")
            return False
        return True

    def delete(self, *args: object) -> bool:
        return True

    def do_action(self, action: Action | None = None, *args: object) -> bool:
        """Run an action (default: the page's own) with its arguments."""
        action = action or self.action
        args = args or self.action_args
        handlers = {"show": self.show, "save": self.save, "delete": self.delete}
        handler = handlers.get(action)
        if handler is None:
            self.messenger.error(f"Unknown action '{action}' for {self}")
            return False
        return handler(*args)

    def view_source(self, surface: DisplaySurface) -> None:
        if self.type:
            surface.set_filetype(self.type)
        surface.set_options(buftype="nofile", buflisted=False, swapfile=False)
        surface.append(0, decode(self.source, self.header.get("encoding")).splitlines())

    # header block

    def show_header(self) -> bool:
        if self.offset or self.surface is None:
            return False
        title = self.title or HEADER_LABEL
        if self.header:
            lines = [f"{title} {{{{{{"]
            lines.extend(f"  {key}: {value}" for key, value in self.header.items())
            lines.extend(["}}}", ""])
        else:
            lines = [title]
        self.surface.append(0, lines)
        self.offset = len(lines)
        return True

    def hide_header(self) -> bool:
        if not self.offset:
            return False
        if self.surface is not None:
            self.surface.delete(1, self.offset)
        self.offset = 0
        return True

    # content access, 1-based and excluding the header

    def get_line(self, n: int) -> str:
        return self.surface.get_line(n + self.offset)

    def set_line(self, n: int, value: str) -> None:
        self.surface.set_line(n + self.offset, value)

    # links

    def find_link_at(self, row: int, col: int) -> Span | None:
        return link_index.find_link_at(self.links, self.offset, row, col)

    def find_adjacent_link(self, direction: int, row: int, col: int) -> tuple[Span, int] | None:
        return link_index.find_adjacent_link(
            self.links, len(self.lines), self.offset, direction, row, col
        )

    def line_of_fragment(self, name: str | None) -> int | None:
        """Surface line of an anchor, or None if the page has no such anchor."""
        if name is None or name not in self.fragments:
            return None
        return self.fragments[name] + self.offset + FRAGMENT_LINE_OFFSET

    def link_target(self, span: Span) -> Target | None:
        target = span.target
        return target(self) if callable(target) else target
