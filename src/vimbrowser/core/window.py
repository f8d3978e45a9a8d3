"""A browser window: the page it shows, where in it, and how it got there."""

from __future__ import annotations

import logging

import httpx

from .model import Action, Location, Target
from .page import Page, Services
from .ports import Viewport
from .store import PageStore

logger = logging.getLogger(__name__)


class Window:
    """
    Wraps one editor viewport. History entries are locations carrying the
    fragment the window was at; ``back`` and ``forward`` are stacks.
    """

    def __init__(self, id: int, viewport: Viewport, store: PageStore, services: Services):
        self.id = id
        self.viewport = viewport
        self.viewport.tag = id
        self.store = store
        self.services = services
        self.page: Page | None = None
        self.fragment: str | None = None
        self.back: list[Location] = []
        self.forward: list[Location] = []
        self.last_action: bool | None = None  # result of the last non-show action

    def token(self) -> Location:
        return self.page.location.with_fragment(self.fragment)

    def __str__(self) -> str:
        return str(self.token())

    def fragment_line(self) -> int | None:
        return self.page.line_of_fragment(self.fragment)

    def _display(self, page: Page, fragment: str | None) -> None:
        self.viewport.show(page.surface)
        self.page = page
        self.fragment = fragment
        self.viewport.set_cursor(self.fragment_line() or 1, 0)

    def open(self, target: Target, action: Action | None = None, *args: object) -> bool:
        """
        Open a location (or submit a request) here. True when the page is now
        displayed; other actions run with ``args`` and yield False.
        """
        if isinstance(target, str):
            target = Location.parse(target)
        logger.debug("window %d opening %s", self.id, target)
        page = self.store.resolve(target, self.services, action, *args)
        if page is None:
            return False
        if page.action == "show":
            fragment = target.fragment if isinstance(target, Location) else None
            self._display(page, fragment)
            return True
        self.last_action = page.do_action(None, *args)
        if not args:
            self.store.evict(page)
        return False

    def open_with_history(self, target: Target, action: Action | None = None, *args: object) -> bool:
        """Like open(), but remember the current position first."""
        if self.page is None:
            return self.open(target, action, *args)
        self.back.append(self.token())
        if self.open(target, action, *args):
            return True
        self.back.pop()
        return False

    def go_history(self, offset: int) -> bool:
        """Move ``offset`` entries back (negative) or forward (positive)."""
        if self.page is None or offset == 0:
            return False
        if offset < 0:
            source, other, direction = self.back, self.forward, "back"
        else:
            source, other, direction = self.forward, self.back, "forward"
        count = abs(offset)
        if len(source) < count:
            self.services.messenger.error(f"Can't go {count} {direction} in this window")
            return False
        saved = list(self.back), list(self.forward)
        skipped = source[len(source) - count + 1 :]
        del source[len(source) - count + 1 :]
        other.append(self.token())
        other.extend(reversed(skipped))
        if self.open(source.pop()):
            return True
        self.back, self.forward = saved
        return False

    def history_lines(self) -> list[str]:
        lines = [f"   {entry}" for entry in reversed(self.forward)]
        lines.append(f"-> {self}")
        lines.extend(f"   {entry}" for entry in reversed(self.back))
        return lines

    def get_link(self, span=None) -> str | None:
        """Where the given span (default: the one at the cursor) leads."""
        if span is None:
            span = self.page.find_link_at(*self.viewport.cursor())
        if span is None:
            return None
        target = self.page.link_target(span)
        if isinstance(target, httpx.Request):
            return str(target.url)
        return None if target is None else str(target)

    def reload(self) -> bool:
        fresh = self.store.refresh(self.page, self.services)
        if fresh is None:
            return False
        self._display(fresh, self.fragment)
        return True
