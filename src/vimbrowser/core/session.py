"""The browser session: open windows, the page cache and bookmarks.

These are the operations an editor front end binds to commands and keys.
Failures are reported through the messenger; the return value is then a
false value (None or False).
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING, Callable

import httpx

from .forms import rotate_choice, select_radio, toggle_checkbox
from .model import Bookmark, Location, Span
from .page import Page, Services
from .resolver import canonicalize, check_scheme, complete_location
from .store import PageStore
from .window import Window

if TYPE_CHECKING:
    from ..adapters.addrbook import AddressBookDir
    from .ports import DisplaySurface, Viewport

logger = logging.getLogger(__name__)

BOOKMARKS_DISABLED = (
    "Bookmarks are disabled. To enable bookmarks,\n"
    "set addrbook_dir in browser.toml to an absolute path"
)
NO_WINDOW = "Unable to find an open browser window"
# link targets longer than the text width minus this are not echoed
TARGET_MARGIN = 20


class Session:
    def __init__(
        self,
        services: Services,
        books: AddressBookDir | None = None,
        current_book: str = "default",
        handlers: dict[str, str] | None = None,
        store: PageStore | None = None,
        runner: Callable[..., object] = subprocess.run,
    ):
        self.services = services
        self.books = books
        self.current_book = current_book
        self.handlers = handlers or {}
        self.store = store or PageStore()
        self.runner = runner
        self.windows: dict[int, Window] = {}
        self.current: Window | None = None
        self._last_id = 0

    @property
    def messenger(self):
        return self.services.messenger

    @property
    def editor(self):
        return self.services.editor

    # windows

    def _new_window(self, split: str) -> Window:
        self._last_id += 1
        viewport = self.editor.open_viewport("v" if split == "!" else "")
        window = Window(self._last_id, viewport, self.store, self.services)
        self.windows[window.id] = window
        self.current = window
        return window

    def go_browser(self) -> Window | None:
        """
        Focus the current browser window, or failing that any browser window
        (which then becomes current). None when no browser window is open.
        """
        tagged = [vp for vp in self.editor.viewports() if vp.tag in self.windows]
        if not tagged:
            return None
        if self.current is not None:
            for viewport in tagged:
                if viewport.tag == self.current.id:
                    viewport.focus()
                    return self.current
            # its viewport is gone
            self.windows.pop(self.current.id, None)
        viewport = tagged[0]
        self.current = self.windows[viewport.tag]
        viewport.focus()
        return self.current

    def win_changed(self, viewport: Viewport) -> Window | None:
        """The editor entered a viewport; make its window current."""
        window = self.windows.get(viewport.tag)
        if window is not None:
            self.current = window
        return self.current

    def window_closed(self, id: int) -> None:
        window = self.windows.pop(id, None)
        if window is not None and window is self.current:
            self.current = None

    def surface_wiped(self, name: str) -> bool:
        return self.store.discard_surface(name)

    def get_page(self, page: Page | None = None) -> Page | None:
        if page is not None:
            return page
        if self.go_browser() is None:
            self.messenger.error(NO_WINDOW)
            return None
        return self.current.page

    def _span_at_cursor(self, page: Page) -> Span | None:
        return page.find_link_at(*self.current.viewport.cursor())

    # navigation

    def resolve(self, text: str) -> Location | None:
        """Canonical location for what the user typed, if handled internally."""
        location = canonicalize(
            *text.split(),
            books=self.books,
            current_book=self.current_book,
            messenger=self.messenger,
        )
        if location is None:
            return None
        return check_scheme(location, self.handlers, self.messenger, self.runner)

    def browse(self, text: str, split: str | None = None) -> bool:
        """
        Open a location or bookmark. ``split`` forces a new window: "" splits
        horizontally, "!" vertically. Without it a new window is only made
        when no browser window is open.
        """
        location = self.resolve(text)
        if location is None:
            return False
        logger.debug("browse %r -> %s", text, location)
        window = self.go_browser()
        if window is None or split is not None:
            window = self._new_window(split or "")
        opened = window.open_with_history(location)
        if window.page is None:
            # nothing was shown, the window never came to life
            self.windows.pop(window.id, None)
            self.current = None
            window.viewport.close()
        return opened

    def show_link_target(self, span: Span | None = None) -> str | None:
        if self.get_page() is None:
            return None
        text = self.current.get_link(span)
        if text is None:
            return None
        if span is not None and len(text) > self.services.render.text_width - TARGET_MARGIN:
            return None
        self.messenger.message(text)
        return text

    def reload(self) -> bool:
        if self.get_page() is None:
            return False
        return self.current.reload()

    def follow(self, span: Span | None = None) -> bool:
        page = self.get_page()
        if page is None:
            return False
        window = self.current
        span = span or self._span_at_cursor(page)
        if span is None:
            self.messenger.error(f"{page}: No link at this point!")
            return False
        target = page.link_target(span)
        if target is not None and target != "":
            if not isinstance(target, httpx.Request):
                if not isinstance(target, Location):
                    target = Location.parse(str(target))
                target = check_scheme(target, self.handlers, self.messenger, self.runner)
                if target is None:
                    return False
            return window.open_with_history(target)
        if span.is_input:
            return self.click_input(span)
        return False

    def save_link(self, *args: object) -> bool:
        """Save what the link at the cursor points to (path prompted if not given)."""
        page = self.get_page()
        if page is None:
            return False
        span = self._span_at_cursor(page)
        target = page.link_target(span) if span is not None else None
        if not isinstance(target, (str, Location)):
            self.messenger.error(f"{page}: No link at this point!")
            return False
        location = check_scheme(
            target if isinstance(target, Location) else Location.parse(target),
            self.handlers,
            self.messenger,
            self.runner,
        )
        if location is None:
            return False
        window = self.current
        window.last_action = None
        window.open(location, "save", *args)
        return bool(window.last_action)

    def next_link(self, count: int) -> Span | None:
        """Move the cursor ``count`` links forward (negative: backward)."""
        page = self.get_page()
        if page is None:
            return None
        viewport = self.current.viewport
        row, col = viewport.cursor()
        direction = -1 if count < 0 else 1
        found = None
        while direction * count > 0:
            found = page.find_adjacent_link(direction, row, col)
            if found is None:
                break
            span, delta = found
            row, col = row + delta, span.start
            viewport.set_cursor(row, col)
            count -= direction
        if found is None:
            self.messenger.message("No further links")
            return None
        self.show_link_target(found[0])
        return found[0]

    def show_history(self) -> list[str] | None:
        if self.get_page() is None:
            return None
        lines = self.current.history_lines()
        for line in lines:
            self.messenger.message(line)
        return lines

    def go_history(self, offset: int) -> bool:
        if self.get_page() is None:
            return False
        return self.current.go_history(offset)

    def add_header(self) -> bool:
        page = self.get_page()
        return page.show_header() if page is not None else False

    def remove_header(self) -> bool:
        page = self.get_page()
        return page.hide_header() if page is not None else False

    def view_source(self, split: str = "") -> DisplaySurface | None:
        page = self.get_page()
        if page is None:
            return None
        surface = self.editor.create_surface("")
        viewport = self.editor.open_viewport("v" if split == "!" else "")
        viewport.show(surface)
        page.view_source(surface)
        return surface

    # form inputs

    def click_input(self, span: Span | None = None) -> bool:
        """Act on a form control: edit, toggle, choose or submit."""
        page = self.get_page()
        if page is None:
            return False
        span = span or self._span_at_cursor(page)
        if span is None or not span.is_input:
            return False
        inp = span.input
        if inp.is_text:
            self.editor.start_insert()
            return True
        if inp.type in ("submit", "image"):
            return self.follow(span)
        if inp.type == "checkbox":
            toggle_checkbox(page, span)
            return True
        if inp.type == "radio":
            select_radio(page, span)
            return True
        if inp.type == "select":
            index = self.messenger.choose("", inp.options)
            if index is None:
                return False
            span.set_value(page, inp.options[index])
            return True
        if inp.type == "password":
            value = self.messenger.ask("?", secret=True)
            if value is None:
                return False
            span.set_value(page, value)
            return True
        return False

    def next_input_choice(self, offset: int = 1, span: Span | None = None) -> bool:
        """Step a select through its options, or a radio mark through its group."""
        page = self.get_page()
        if page is None:
            return False
        span = span or self._span_at_cursor(page)
        if span is None or not span.is_input:
            return False
        return rotate_choice(page, span, offset or 1)

    # bookmarks

    def _bookmarks_enabled(self) -> bool:
        if self.books is None:
            self.messenger.error(BOOKMARKS_DISABLED)
            return False
        return True

    def bookmark(self, name: str, delete: bool = False) -> bool:
        """Bookmark the current page in the current book, or delete a bookmark."""
        if not self._bookmarks_enabled():
            return False
        book = self.books.open(self.current_book)
        if delete:
            return book.delete(name)
        page = self.get_page()
        if page is None:
            return False
        return book.put(name, Bookmark(str(page.location), page.title or ""))

    def change_book(self, name: str, create: bool = False) -> bool:
        if not self._bookmarks_enabled():
            return False
        if not create and not self.books.exists(name):
            self.messenger.error(f"Bookmark file '{name}' doesn't exist (use ! to create)")
            return False
        self.current_book = name
        self.messenger.message(f"Bookmark file is now '{name}'")
        return True

    def list_bookmarks(self, book: str | None = None) -> list[str] | None:
        if not self._bookmarks_enabled():
            return None
        book = book or self.current_book
        addrbook = self.books.get(book)
        if addrbook is None:
            self.messenger.error(f"Bookmark file {book} does not exist (in {self.books.root})")
            return None
        lines = addrbook.listing()
        for line in lines:
            self.messenger.message(line)
        return lines

    def list_books(self) -> list[str]:
        return self.books.books() if self.books is not None else []

    def complete_location(self, arg: str) -> list[str]:
        return complete_location(arg, self.books, self.current_book)
