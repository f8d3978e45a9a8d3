"""HTML forms as they live inside rendered text.

Every physical control on the page gets its own ``InputSpan`` (each radio
button separately). The span reads and writes the control's textual form on
the page's surface, and ``update`` copies what is on the surface back into the
structured ``Input`` before the form is submitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from .model import Span

if TYPE_CHECKING:
    from .page import Page

TEXT_TYPES = frozenset({"text", "textarea", "email", "search", "url", "tel", "number"})
BUTTON_TYPES = frozenset({"submit", "reset", "button", "image"})
DEFAULT_FIELD_SIZE = 20

CHECK_MARK = "X"
RADIO_MARK = "*"


@dataclass(eq=False)
class Input:
    type: str
    name: str | None = None
    value: str = ""
    options: list[str] = field(default_factory=list)  # values of a select
    checked: bool = False
    size: int = DEFAULT_FIELD_SIZE
    disabled: bool = False

    @property
    def is_text(self) -> bool:
        return self.type in TEXT_TYPES


@dataclass(eq=False)
class Form:
    action: str
    method: str = "GET"
    enctype: str = "application/x-www-form-urlencoded"
    inputs: list[Input] = field(default_factory=list)
    spans: list[InputSpan] = field(default_factory=list)  # filled in by the renderer

    def radio_group(self, name: str | None) -> list[InputSpan]:
        return [s for s in self.spans if s.input.type == "radio" and s.input.name == name]

    def update(self, page: Page) -> None:
        for span in self.spans:
            span.update(page)

    def pairs(self, submitter: Input | None = None) -> list[tuple[str, str]]:
        out: list[tuple[str, str]] = []
        for inp in self.inputs:
            if not inp.name or inp.disabled:
                continue
            if inp.type in BUTTON_TYPES:
                if inp is submitter:
                    out.append((inp.name, inp.value))
            elif inp.type in ("checkbox", "radio"):
                if inp.checked:
                    out.append((inp.name, inp.value or "on"))
            elif inp.type == "select":
                if inp.value or inp.options:
                    out.append((inp.name, inp.value or inp.options[0]))
            else:
                out.append((inp.name, inp.value))
        return out

    def make_request(self, submitter: Input | None = None) -> httpx.Request:
        query = urlencode(self.pairs(submitter))
        if self.method.upper() == "POST":
            return httpx.Request(
                "POST",
                self.action,
                content=query.encode("utf-8"),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        parts = urlsplit(self.action)
        return httpx.Request("GET", urlunsplit((parts.scheme, parts.netloc, parts.path, query, "")))

    def click(self, page: Page, submitter: Input | None = None) -> httpx.Request:
        """Sync every control from the page, then build the submission."""
        self.update(page)
        return self.make_request(submitter)


def render_input(inp: Input) -> str | None:
    """Textual representation of a control, or None for hidden ones."""
    if inp.type == "hidden":
        return None
    if inp.type == "checkbox":
        return f"[{CHECK_MARK if inp.checked else ' '}]"
    if inp.type == "radio":
        return f"({RADIO_MARK if inp.checked else ' '})"
    if inp.type in BUTTON_TYPES:
        return f"[ {inp.value or inp.type.capitalize()} ]"
    if inp.type == "select":
        width = max((len(o) for o in inp.options), default=len(inp.value))
        return f"[{inp.value.ljust(width)}]"
    if inp.type == "password":
        return f"[{('*' * len(inp.value)).ljust(inp.size)}]"
    # a control occupies a single line
    shown = " ".join(inp.value.splitlines())
    return f"[{shown.ljust(max(inp.size, len(shown)))}]"


def submit_target(form: Form, inp: Input):
    """Deferred link target for a submit button."""
    return lambda page: form.click(page, inp)


@dataclass
class InputSpan(Span):
    form: Form | None = None
    input: Input | None = None

    @property
    def is_input(self) -> bool:
        return True

    def _line(self, page: Page) -> str:
        return page.get_line(self.line + 1)

    def _field_end(self, text: str) -> int:
        # bracketed fields may have grown while being edited
        close = text.find("]", self.start + 1)
        return close if close >= 0 else self.end

    def get_value(self, page: Page) -> str:
        text = self._line(page)
        kind = self.input.type
        if kind in ("checkbox", "radio"):
            return text[self.start + 1 : self.start + 2]
        if kind == "password":
            return self.input.value
        if kind in BUTTON_TYPES:
            return self.input.value
        return text[self.start + 1 : self._field_end(text)].rstrip()

    def set_value(self, page: Page, value: str) -> None:
        text = self._line(page)
        kind = self.input.type
        if kind in ("checkbox", "radio"):
            mark = (value or " ")[:1]
            text = text[: self.start + 1] + mark + text[self.start + 2 :]
        elif kind in BUTTON_TYPES:
            return
        else:
            close = self._field_end(text)
            width = max(self.end - self.start - 1, 0)
            if kind == "password":
                self.input.value = value
                shown = "*" * len(value)
            else:
                shown = " ".join(value.splitlines())
            box = f"[{shown.ljust(width)}]"
            text = text[: self.start] + box + text[close + 1 :]
            self._shift_following(page, self.start + len(box) - 1 - close)
            self.end = self.start + len(box) - 1
        page.set_line(self.line + 1, text)

    def _shift_following(self, page: Page, delta: int) -> None:
        """Move the spans right of this one after the field changed width."""
        if not delta:
            return
        for span in page.links.get(self.line, ()):
            if span is not self and span.start > self.start:
                span.start += delta
                span.end += delta

    def update(self, page: Page) -> None:
        kind = self.input.type
        if kind == "checkbox":
            self.input.checked = self.get_value(page) == CHECK_MARK
        elif kind == "radio":
            self.input.checked = self.get_value(page) == RADIO_MARK
        elif kind == "select" or self.input.is_text:
            self.input.value = self.get_value(page)


def toggle_checkbox(page: Page, span: InputSpan) -> None:
    value = span.get_value(page)
    span.set_value(page, " " if value == CHECK_MARK else CHECK_MARK)


def select_radio(page: Page, span: InputSpan) -> None:
    for other in span.form.radio_group(span.input.name):
        if other.get_value(page) == RADIO_MARK:
            other.set_value(page, " ")
            break
    span.set_value(page, RADIO_MARK)


def rotate_choice(page: Page, span: InputSpan, offset: int = 1) -> bool:
    """
    Move a select to a neighbouring value (no wrap-around), or move the mark
    of a radio group cyclically. Returns False when nothing changed.
    """
    kind = span.input.type
    if kind == "select":
        values = span.input.options
        current = span.get_value(page)
        index = (values.index(current) if current in values else 0) + offset
        if index < 0 or index >= len(values):
            return False
        span.set_value(page, values[index])
        return True
    if kind == "radio":
        group = span.form.radio_group(span.input.name)
        marked = [i for i, s in enumerate(group) if s.get_value(page) == RADIO_MARK]
        current = marked[0] if marked else 0
        if marked:
            group[current].set_value(page, " ")
        group[(current + offset) % len(group)].set_value(page, RADIO_MARK)
        return True
    return False
