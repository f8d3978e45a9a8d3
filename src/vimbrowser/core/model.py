from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Literal, Union
from urllib.parse import urldefrag, urlsplit

import httpx

if TYPE_CHECKING:
    from .page import Page

Action = Literal["show", "save", "delete"]


@dataclass(frozen=True)
class Location:
    url: str  # absolute, never carries a fragment
    fragment: str | None = None

    @classmethod
    def parse(cls, text: str) -> Location:
        url, fragment = urldefrag(text.strip())
        return cls(url=url, fragment=fragment or None)

    @property
    def key(self) -> str:
        """Page Store key: the location without its fragment."""
        return self.url

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme.lower()

    def with_fragment(self, fragment: str | None) -> Location:
        return Location(url=self.url, fragment=fragment or None)

    def __str__(self) -> str:
        if self.fragment:
            return f"{self.url}#{self.fragment}"
        return self.url


# What a window can be asked to open: a typed location, a parsed Location or
# a prepared request (form submissions).
Target = Union[str, Location, httpx.Request]

# Deferred link targets are computed from the page when the link is followed.
TargetResolver = Callable[["Page"], Target]


@dataclass
class Span:
    line: int  # 0-based rendered line
    start: int  # first column, inclusive
    end: int  # last column, inclusive
    target: str | TargetResolver | None = None

    def contains(self, col: int) -> bool:
        return self.start <= col <= self.end

    @property
    def is_input(self) -> bool:
        return False


@dataclass
class Bookmark:
    uri: str
    description: str = ""


@dataclass
class Rendering:
    lines: list[str]
    links: dict[int, list[Span]] = field(default_factory=dict)
    fragments: dict[str, int] = field(default_factory=dict)
    title: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)  # e.g. keywords, description
