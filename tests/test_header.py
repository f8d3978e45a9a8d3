"""Tests for the foldable header block."""

from vimbrowser.core.page import Page


def make_home(services):
    return Page.create("http://example.com/", services)


def test_show_header(services):
    """The header is inserted above the content and sets the offset."""
    page = make_home(services)

    assert page.show_header()

    assert page.offset == 5
    assert page.surface.lines[:5] == [
        "Home {{{",
        "  content type: text/html",
        "  encoding: utf-8",
        "}}}",
        "",
    ]
    assert page.surface.lines[5:] == list(page.lines)


def test_header_toggle_is_idempotent(services):
    """Showing twice or hiding twice changes nothing the second time."""
    page = make_home(services)

    assert page.show_header()
    assert not page.show_header()
    assert page.surface.line_count() == len(page.lines) + 5

    assert page.hide_header()
    assert not page.hide_header()
    assert page.surface.lines == list(page.lines)
    assert page.offset == 0


def test_content_lines_skip_header(services):
    """Content line numbers do not move when the header is shown."""
    page = make_home(services)
    before = [page.get_line(n) for n in range(1, len(page.lines) + 1)]

    page.show_header()
    during = [page.get_line(n) for n in range(1, len(page.lines) + 1)]

    assert before == during == list(page.lines)

    page.set_line(1, "changed")
    assert page.surface.get_line(6) == "changed"


def test_fragment_line_follows_header(services):
    """Anchor lines are shifted by the header height."""
    page = make_home(services)

    assert page.line_of_fragment("end") == 5
    page.show_header()
    assert page.line_of_fragment("end") == 10
    assert page.line_of_fragment("missing") is None


def test_collapsed_header(services):
    """Without header fields only the title line is shown."""
    page = make_home(services)
    page.header = {}

    page.show_header()

    assert page.offset == 1
    assert page.surface.lines[0] == "Home"


def test_untitled_header(site, services):
    """Untitled pages get a generic label."""
    page = Page.create("http://example.com/a", services)

    page.show_header()

    assert page.surface.lines[0] == "Document header {{{"


def test_links_shift_with_header(services):
    """Link lookup uses content coordinates under the header."""
    page = make_home(services)
    page.show_header()

    assert page.find_link_at(6, 7).target == "http://example.com/a"
    assert page.find_link_at(1, 0) is None


def test_show_resets_header(services):
    """Redrawing the page drops the header block."""
    page = make_home(services)
    page.show_header()

    page.show()

    assert page.offset == 0
    assert page.surface.lines == list(page.lines)
