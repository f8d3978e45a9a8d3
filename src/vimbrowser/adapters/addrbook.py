"""Flat-file bookmark storage.

A book is one file with an entry per line::

    nickname location description words

Lines starting with ``#`` are comments. Adding a new nickname appends a
single line so hand-written comments survive; changing or removing an entry
rewrites the file from memory (and drops the comments).
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from ..core.model import Bookmark
from ..core.ports import Messenger
from ..errors import ConfigError

ENTRY_RE = re.compile(r"^(\w+)\s+(\S+)\s*(.*)$")


class AddressBook:
    def __init__(self, path: Path, messenger: Messenger):
        self.path = path
        self.messenger = messenger
        self._marks: dict[str, Bookmark] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError:
            self.messenger.error(f"Failed to open {self.path} for reading")
            return
        for line in text.splitlines():
            if line.startswith("#"):
                continue
            m = ENTRY_RE.match(line)
            if m:
                self._marks[m.group(1)] = Bookmark(m.group(2), m.group(3).strip())

    def _rewrite(self) -> bool:
        contents = "".join(
            f"{name} {mark.uri} {mark.description}\n" for name, mark in self._marks.items()
        )
        try:
            self.path.write_text(contents, encoding="utf-8")
        except OSError:
            self.messenger.error(f"failed to write to {self.path}")
            return False
        return True

    def _ends_with_newline(self) -> bool:
        """True for a missing or empty file, too."""
        if not self.path.exists() or self.path.stat().st_size == 0:
            return True
        with open(self.path, "rb") as fh:
            fh.seek(-1, os.SEEK_END)
            return fh.read(1) == b"\n"

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self, name: str) -> bool:
        return name in self._marks

    def get(self, name: str) -> Bookmark | None:
        return self._marks.get(name)

    def put(self, name: str, mark: Bookmark) -> bool:
        if name in self._marks:
            self._marks[name] = mark
            return self._rewrite()
        try:
            lead = "" if self._ends_with_newline() else "\n"
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(f"{lead}{name} {mark.uri} {mark.description}\n")
        except OSError:
            self.messenger.error(f"failed to write to {self.path}")
            return False
        self._marks[name] = mark
        return True

    def delete(self, name: str) -> bool:
        if self._marks.pop(name, None) is None:
            return False
        return self._rewrite()

    def clear(self) -> bool:
        self._marks = {}
        return self._rewrite()

    def list(self) -> list[str]:
        return list(self._marks)

    def listing(self) -> list[str]:
        lines = [f"Bookmarks in {self.path}"]
        lines.extend(
            f"{name}: {mark.uri} # {mark.description}" for name, mark in self._marks.items()
        )
        return lines


class AddressBookDir:
    """
    All books under one directory, keyed by file name. Books are loaded
    lazily and only for files that can be read.
    """

    def __init__(self, root: Path, messenger: Messenger):
        if not root.is_absolute():
            raise ConfigError(f"Bookmarks directory must be absolute, not {root}")
        if root.is_dir():
            if not os.access(root, os.R_OK):
                raise ConfigError(f"{root} is not readable")
        elif root.exists():
            raise ConfigError(f"{root} exists, but is not a directory")
        else:
            messenger.message(f"Bookmarks directory {root} doesn't exist, creating...")
            root.mkdir(parents=True, mode=0o755)
        self.root = root
        self.messenger = messenger
        self._books: dict[str, AddressBook] = {}

    def _path(self, book: str) -> Path:
        return self.root / book

    def exists(self, book: str) -> bool:
        if book in self._books:
            return True
        p = self._path(book)
        return p.is_file() and os.access(p, os.R_OK)

    def get(self, book: str) -> AddressBook | None:
        if book not in self._books:
            if not self.exists(book):
                return None
            self._books[book] = AddressBook(self._path(book), self.messenger)
        return self._books[book]

    def open(self, book: str) -> AddressBook:
        """Like get(), but also for a book whose file does not exist yet."""
        if book not in self._books:
            self._books[book] = AddressBook(self._path(book), self.messenger)
        return self._books[book]

    def books(self) -> list[str]:
        return sorted(p.name for p in self.root.iterdir() if p.is_file())
