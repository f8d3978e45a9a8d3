"""HTML to plain text layout, built on BeautifulSoup.

Produces wrapped lines together with the link index (0-based line ->
spans, left to right) and the fragment index (anchor name -> 0-based line).
Form controls are drawn with ``render_input`` and bound to the structured
forms passed in, matched by document order.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from ..core.forms import BUTTON_TYPES, Form, InputSpan, render_input, submit_target
from ..core.model import Rendering, Span
from ..core.ports import Renderer
from .html_forms import form_controls

DEFAULT_MARKUP: dict[str, tuple[str, str]] = {
    "b": ("*", "*"),
    "strong": ("*", "*"),
    "i": ("/", "/"),
    "em": ("/", "/"),
    "u": ("_", "_"),
    "code": ("`", "`"),
    "tt": ("`", "`"),
    "h1": ("= ", " ="),
    "h2": ("== ", " =="),
    "h3": ("=== ", " ==="),
    "h4": ("==== ", " ===="),
    "h5": ("===== ", " ====="),
    "h6": ("====== ", " ======"),
}

SKIP_TAGS = {"head", "script", "style", "noscript", "template", "title", "option"}
BLOCK_TAGS = {
    "div", "section", "article", "header", "footer", "main", "nav", "aside",
    "form", "address", "figure", "figcaption", "center", "dt", "dd", "tr",
    "fieldset", "caption",
}
PARAGRAPH_TAGS = {"p", "table", "dl", "pre", "blockquote"}
HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
LIST_TAGS = {"ul", "ol", "menu", "dir"}
INDENT = 2


class _Layout:
    """Greedy line filler that keeps track of where interactive spans land."""

    def __init__(self, width: int):
        self.width = width
        self.lines: list[str] = []
        self.links: dict[int, list[Span]] = {}
        self.fragments: dict[str, int] = {}
        self.current = ""
        self.indent = 0
        self.pending_space = False
        self.pending_fragments: list[str] = []
        self.link_target: str | None = None
        self.link_id = 0
        self._last_link: tuple[int, int] | None = None  # (link id, line)

    @property
    def line_no(self) -> int:
        return len(self.lines)

    def space(self) -> None:
        self.pending_space = True

    def newline(self, force: bool = False) -> None:
        if self.current.strip() or force:
            self.lines.append(self.current.rstrip())
        self.current = ""
        self.pending_space = False

    def block(self, blank: bool = False) -> None:
        self.newline()
        if blank and self.lines and self.lines[-1] != "":
            self.lines.append("")

    def anchor(self, name: str) -> None:
        self.pending_fragments.append(name)

    def _place_fragments(self) -> None:
        for name in self.pending_fragments:
            self.fragments.setdefault(name, self.line_no)
        self.pending_fragments = []

    def word(self, text: str, span: Span | None = None) -> None:
        has_text = bool(self.current.strip())
        sep = 1 if (has_text and self.pending_space) else 0
        if has_text and len(self.current) + sep + len(text) > self.width:
            self.newline()
            has_text, sep = False, 0
        if not has_text:
            self.current = " " * self.indent
        elif sep:
            self.current += " "
        start = len(self.current)
        self.current += text
        self.pending_space = False
        self._place_fragments()
        end = len(self.current) - 1
        if span is not None:
            span.line, span.start, span.end = self.line_no, start, end
            self.links.setdefault(self.line_no, []).append(span)
            self._last_link = None
        elif self.link_target is not None:
            spans = self.links.setdefault(self.line_no, [])
            if self._last_link == (self.link_id, self.line_no) and spans:
                spans[-1].end = end
            else:
                spans.append(Span(self.line_no, start, end, self.link_target))
                self._last_link = (self.link_id, self.line_no)

    def glue(self, text: str) -> None:
        """Add decoration that sticks to the neighbouring word."""
        spaced = self.pending_space
        self.pending_space = False
        self.word(text)
        self.pending_space = spaced

    def raw(self, text: str) -> None:
        """Preformatted text: no wrapping, newlines kept."""
        for i, piece in enumerate(text.split("\n")):
            if i:
                self.newline(force=True)
            if piece:
                if not self.current:
                    self.current = " " * self.indent
                start = len(self.current)
                self.current += piece
                self._place_fragments()
                if self.link_target is not None:
                    self.links.setdefault(self.line_no, []).append(
                        Span(self.line_no, start, len(self.current) - 1, self.link_target)
                    )

    def finish(self) -> None:
        self.newline()
        while self.lines and self.lines[-1] == "":
            self.lines.pop()
        last = max(len(self.lines) - 1, 0)
        for name in self.pending_fragments:
            self.fragments.setdefault(name, last)
        self.pending_fragments = []


class HtmlRenderer(Renderer):
    def render(
        self,
        source: str,
        width: int,
        base: str,
        forms: list[Form],
        markup: dict[str, tuple[str, str]] | None = None,
    ) -> Rendering:
        soup = BeautifulSoup(source, "html.parser")
        base_el = soup.find("base", href=True)
        if base_el is not None:
            base = urljoin(base, base_el["href"])

        self._base = base
        self._markup = {**DEFAULT_MARKUP, **(markup or {})}
        self._layout = _Layout(width)
        self._pre = 0
        self._list_counters: list[int | None] = []
        self._controls: dict[int, tuple[Form, object]] = {}
        for form_el, form in zip(soup.find_all("form"), forms):
            form.spans = []
            for ctrl, inp in zip(form_controls(form_el), form.inputs):
                self._controls[id(ctrl)] = (form, inp)

        self._walk(soup)
        self._layout.finish()

        return Rendering(
            lines=self._layout.lines,
            links=self._layout.links,
            fragments=self._layout.fragments,
            title=_title(soup),
            meta=_meta(soup),
        )

    def _walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                self._text(str(child))
            elif isinstance(child, Tag):
                self._element(child)

    def _text(self, text: str) -> None:
        layout = self._layout
        if self._pre:
            layout.raw(text)
            return
        words = text.split()
        if text[:1].isspace():
            layout.space()
        for i, word in enumerate(words):
            if i:
                layout.space()
            layout.word(word)
        if words and text[-1:].isspace():
            layout.space()

    def _element(self, el: Tag) -> None:
        layout = self._layout
        name = el.name.lower()
        if name in SKIP_TAGS:
            return

        for attr in ("id", "name") if name == "a" else ("id",):
            if el.get(attr):
                layout.anchor(el[attr])

        if name in ("input", "select", "textarea", "button"):
            self._control(el)
            return
        if name == "br":
            layout.newline(force=True)
            return
        if name == "hr":
            layout.block()
            layout.lines.append("-" * layout.width)
            return
        if name == "img":
            alt = (el.get("alt") or "").strip()
            layout.word(f"[{alt or 'IMG'}]")
            return

        if name in HEADING_TAGS:
            layout.block(blank=True)
            self._decorated(el, name)
            layout.block(blank=True)
        elif name in LIST_TAGS:
            layout.block(blank=not self._list_counters)
            self._list_counters.append(1 if name == "ol" else None)
            layout.indent += INDENT
            self._walk(el)
            layout.indent -= INDENT
            self._list_counters.pop()
            layout.block(blank=not self._list_counters)
        elif name == "li":
            layout.block()
            counters = self._list_counters
            if counters and counters[-1] is not None:
                bullet = f"{counters[-1]}."
                counters[-1] += 1
            else:
                bullet = "*"
            layout.word(bullet)
            layout.space()
            self._walk(el)
            layout.block()
        elif name == "pre":
            layout.block(blank=True)
            self._pre += 1
            self._walk(el)
            self._pre -= 1
            layout.block(blank=True)
        elif name == "blockquote":
            layout.block(blank=True)
            layout.indent += INDENT
            self._walk(el)
            layout.indent -= INDENT
            layout.block(blank=True)
        elif name in PARAGRAPH_TAGS or name in BLOCK_TAGS:
            layout.block(blank=name in PARAGRAPH_TAGS)
            self._walk(el)
            layout.block(blank=name in PARAGRAPH_TAGS)
        elif name in ("td", "th"):
            layout.space()
            self._walk(el)
            layout.space()
        elif name == "a" and el.get("href"):
            self._link(el)
        else:
            self._decorated(el, name)

    def _decorated(self, el: Tag, name: str) -> None:
        start, end = self._markup.get(name, ("", ""))
        if start:
            self._layout.word(start)
            self._layout.pending_space = False
        self._walk(el)
        if end:
            self._layout.glue(end)

    def _link(self, el: Tag) -> None:
        layout = self._layout
        outer = (layout.link_target, layout.link_id)
        layout.link_id += 1
        layout.link_target = urljoin(self._base, el["href"].strip())
        self._walk(el)
        layout.link_target, _ = outer
        layout._last_link = None

    def _control(self, el: Tag) -> None:
        bound = self._controls.get(id(el))
        if bound is None:
            return
        form, inp = bound
        text = render_input(inp)
        if text is None:
            return
        span = InputSpan(0, 0, 0, form=form, input=inp)
        if inp.type in BUTTON_TYPES and inp.type not in ("reset", "button"):
            span.target = submit_target(form, inp)
        self._layout.word(text, span)
        form.spans.append(span)


def _title(soup: BeautifulSoup) -> str | None:
    if soup.title is None:
        return None
    title = " ".join(soup.title.get_text().split())
    return title or None


def _meta(soup: BeautifulSoup) -> dict[str, str]:
    meta: dict[str, str] = {}
    for el in soup.find_all("meta"):
        name = (el.get("name") or "").lower()
        if name in ("keywords", "description") and el.get("content"):
            meta[name] = el["content"].strip()
    return meta
