"""Turning what the user typed into absolute locations.

``:name`` and ``:book:name`` refer to bookmarks; anything else is guessed
into an absolute location. Bookmarks may point at other bookmarks.
"""

from __future__ import annotations

import glob
import os
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence
from urllib.parse import urlsplit, urlunsplit

from .model import Location
from .ports import Messenger

if TYPE_CHECKING:
    from ..adapters.addrbook import AddressBookDir

# A bookmark chain longer than this is treated as a cycle
MAX_BOOKMARK_DEPTH = 16

SUPPORTED_SCHEMES = frozenset({"http", "https", "file"})

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):(?!\d)")
_HOST_RE = re.compile(r"^([^/:?#]*)(.*)$", re.DOTALL)
_PATHLIKE = ("/", "~", "./", "../")


def guess_location(text: str) -> Location | None:
    """
    Best-effort absolute form of a free-form location.

    Examples:
        >>> str(guess_location("example.org"))
        'http://example.org/'
        >>> str(guess_location("perl"))
        'http://www.perl.com/'
    """
    text = text.strip()
    if not text:
        return None

    m = _SCHEME_RE.match(text)
    # a single letter is a windows drive, not a scheme
    if m and not (os.name == "nt" and len(m.group(1)) == 1):
        return Location.parse(_normalize(text))

    if text.startswith(_PATHLIKE) or Path(text).exists():
        path = Path(text).expanduser().resolve()
        return Location.parse(path.as_uri())

    host, rest = _HOST_RE.match(text).groups()
    lowered = host.lower()
    if lowered.startswith("ftp."):
        guessed = f"ftp://{text}"
    elif lowered.startswith("www.") or "." in host or lowered == "localhost":
        guessed = f"http://{text}"
    else:
        guessed = f"http://www.{host}.com{rest}"
    return Location.parse(_normalize(guessed))


def _normalize(uri: str) -> str:
    parts = urlsplit(uri)
    if parts.scheme in ("http", "https"):
        return urlunsplit(
            (parts.scheme, parts.netloc.lower(), parts.path or "/", parts.query, parts.fragment)
        )
    return uri


def canonicalize(
    *tokens: str,
    books: AddressBookDir | None,
    current_book: str,
    messenger: Messenger,
) -> Location | None:
    """
    Resolve a location (or bookmark reference) plus argument tokens.

    The first extra token is appended verbatim; later ones are joined with
    ``&`` when they look like ``key=value`` and with ``+`` otherwise.
    """
    if not tokens:
        return None
    primary, *extra = tokens
    location = _resolve(primary, books, current_book, messenger, [])
    if location is None or not extra:
        return location
    text = str(location) + extra[0]
    for token in extra[1:]:
        text += ("&" if "=" in token else "+") + token
    return Location.parse(text)


def _resolve(
    text: str,
    books: AddressBookDir | None,
    current_book: str,
    messenger: Messenger,
    seen: list[tuple[str, str]],
) -> Location | None:
    if not text.startswith(":"):
        return guess_location(text)
    if books is None:
        messenger.error("Bookmarks are disabled, cannot resolve " + text)
        return None

    book, sep, name = text[1:].partition(":")
    if not sep:
        book, name = current_book, book
    book = book or current_book

    if (book, name) in seen or len(seen) >= MAX_BOOKMARK_DEPTH:
        chain = " -> ".join(f":{b}:{n}" for b, n in seen + [(book, name)])
        messenger.error(f"Bookmark cycle detected: {chain}")
        return None
    seen.append((book, name))

    addrbook = books.get(book)
    if addrbook is None:
        messenger.error(f"Bookmark file {book} does not exist (in {books.root})")
        return None
    mark = addrbook.get(name)
    if mark is None:
        messenger.error(f"Entry '{name}' does not exist in bookmark file '{book}'")
        return None
    return _resolve(mark.uri, books, current_book, messenger, seen)


def check_scheme(
    location: Location,
    handlers: dict[str, str],
    messenger: Messenger,
    runner: Callable[..., object] = subprocess.run,
) -> Location | None:
    """
    Decide who handles a location. Schemes with a configured external
    handler are launched and consumed (None); supported schemes come back.
    """
    scheme = location.scheme
    if not scheme:
        messenger.error(
            f"Unable to determine the scheme of '{location}'.\nPlease try a more detailed uri."
        )
        return None
    handler = handlers.get(scheme)
    if handler:
        command = handler.replace("%s", str(location), 1)
        messenger.message(f"Launching: '{command}'")
        runner(command, shell=True)
        return None
    if scheme in SUPPORTED_SCHEMES:
        return location
    messenger.error(
        f"The '{scheme}' scheme is not supported.\n"
        f"Add '{scheme}' to the [handlers] table to use an external program"
    )
    return None


def complete_location(
    arg: str, books: AddressBookDir | None, current_book: str
) -> list[str]:
    """Completion candidates for a partially typed location or bookmark."""
    if not arg.startswith(":"):
        as_uri = arg.lower().startswith("file:")
        if as_uri:
            arg = urlsplit(arg).path
        elif re.match(r"^(\w+):/", arg) and not (os.name == "nt" and len(arg.split(":")[0]) == 1):
            # only files can be completed
            return []
        if not arg:
            return []
        matches = glob.glob(os.path.expanduser(arg) + "*")
        matches = [m + os.sep if os.path.isdir(m) else m for m in sorted(matches)]
        if as_uri:
            return [Path(m).resolve().as_uri() + ("/" if m.endswith(os.sep) else "") for m in matches]
        return matches

    if books is None:
        return []
    m = re.match(r"^:([^:]*):", arg)
    if m:
        book = books.get(m.group(1) or current_book)
        if book is None:
            return []
        return [f":{m.group(1)}:{name}" for name in book.list()]
    return [f":{name}:" for name in books.books()]
