"""Extract structured form descriptions from an HTML document."""

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ..core.forms import DEFAULT_FIELD_SIZE, Form, Input

CONTROL_TAGS = ["input", "select", "textarea", "button"]


def form_controls(form_el: Tag) -> list[Tag]:
    """Controls of a form in document order. The renderer relies on this order."""
    return form_el.find_all(CONTROL_TAGS)


def input_from_element(el: Tag) -> Input:
    name = el.get("name")
    disabled = el.has_attr("disabled")

    if el.name == "select":
        options = [o.get("value", o.get_text(strip=True)) for o in el.find_all("option")]
        selected = el.find("option", selected=True)
        if selected is not None:
            value = selected.get("value", selected.get_text(strip=True))
        else:
            value = options[0] if options else ""
        return Input("select", name, value, options=options, disabled=disabled)

    if el.name == "textarea":
        cols = el.get("cols", "")
        size = int(cols) if cols.isdigit() else DEFAULT_FIELD_SIZE
        text = el.get_text()
        # a newline right after the start tag is not part of the value
        if text.startswith("\r\n"):
            text = text[2:]
        elif text.startswith("\n"):
            text = text[1:]
        return Input("textarea", name, text, size=size, disabled=disabled)

    if el.name == "button":
        kind = (el.get("type") or "submit").lower()
        return Input(kind, name, el.get("value") or el.get_text(strip=True), disabled=disabled)

    kind = (el.get("type") or "text").lower()
    size = el.get("size", "")
    return Input(
        kind,
        name,
        el.get("value", ""),
        checked=el.has_attr("checked"),
        size=int(size) if size.isdigit() else DEFAULT_FIELD_SIZE,
        disabled=disabled,
    )


def form_from_element(el: Tag, base: str) -> Form:
    return Form(
        action=urljoin(base, el.get("action") or ""),
        method=(el.get("method") or "GET").upper(),
        enctype=el.get("enctype") or "application/x-www-form-urlencoded",
        inputs=[input_from_element(c) for c in form_controls(el)],
    )


def parse_forms(html: str, base: str) -> list[Form]:
    soup = BeautifulSoup(html, "html.parser")
    base_el = soup.find("base", href=True)
    if base_el is not None:
        base = urljoin(base, base_el["href"])
    return [form_from_element(el, base) for el in soup.find_all("form")]
