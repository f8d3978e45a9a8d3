"""Process-wide page cache keyed by location (without fragment).

A page is registered under every name it was reached by, so a redirected
request and its final location map to the same object.
"""

from __future__ import annotations

import logging

import httpx

from .model import Action, Location, Target
from .page import Page, Services, location_of_surface

logger = logging.getLogger(__name__)


class PageStore:
    def __init__(self) -> None:
        self._pages: dict[str, Page] = {}

    def get(self, key: str) -> Page | None:
        return self._pages.get(key)

    def put(self, key: str, page: Page) -> None:
        self._pages[key] = page

    def delete(self, key: str) -> Page | None:
        return self._pages.pop(key, None)

    def list(self) -> list[str]:
        return sorted(self._pages)

    def aliases(self, page: Page) -> list[str]:
        return [key for key, p in self._pages.items() if p is page]

    def evict(self, page: Page) -> list[str]:
        """Drop every alias of a page; returns the keys that were removed."""
        keys = self.aliases(page)
        for key in keys:
            del self._pages[key]
        return keys

    def _register(self, page: Page, *keys: str) -> None:
        """
        Store a shown page or a standing request under its names. One-shot
        actions are never stored, and a standing request does not displace a
        shown page.
        """
        if page.action != "show" and not page.action_args:
            return
        for key in dict.fromkeys((*keys, page.location.key)):
            held = self._pages.get(key)
            if page.action != "show" and held is not None and held.action == "show":
                continue
            self._pages[key] = page

    def resolve(
        self,
        target: Target,
        services: Services,
        action: Action | None = None,
        *action_args: object,
    ) -> Page | None:
        """
        Cached page for a location, or a freshly created one. An explicit
        action or a prepared request always creates a new page.
        """
        if isinstance(target, httpx.Request):
            page = Page.create(target, services, action, *action_args)
            if page is not None:
                self._register(page)
            return page

        location = target if isinstance(target, Location) else Location.parse(str(target))
        if action is None:
            cached = self.get(location.key)
            if cached is not None:
                logger.debug("cache hit for %s", location.key)
                return cached

        page = Page.create(location, services, action, *action_args)
        if page is not None:
            self._register(page, location.key)
        return page

    def refresh(self, page: Page, services: Services) -> Page | None:
        """Fetch a page again and put the new object under the old aliases."""
        keys = self.evict(page)
        fresh = Page.create(page.location, services)
        if fresh is None:
            for key in keys:
                self._pages[key] = page
            return None
        self._register(fresh, *keys)
        return fresh

    def discard_surface(self, name: str) -> bool:
        """Forget the page whose surface was wiped by the editor."""
        location = location_of_surface(name)
        if location is None:
            return False
        page = self.get(location.key)
        if page is None:
            return False
        self.evict(page)
        return True
