"""Tests for the BeautifulSoup text layout."""

from vimbrowser.adapters.html_forms import parse_forms
from vimbrowser.adapters.html_renderer import HtmlRenderer

BASE = "http://example.com/dir/page.html"


def render(html, width=60, markup=None):
    return HtmlRenderer().render(html, width, BASE, parse_forms(html, BASE), markup)


def test_links_and_fragments():
    """Links get one span per line with absolute targets; anchors a line."""
    html = """<html><head><title>Home</title></head><body>
<p>Go to <a href="/a">page A</a> or <a href="b.html">B</a>.</p>
<p>Nothing here</p>
<p><a name="end"></a>Last <a href="http://other.org/c">C</a></p>
</body></html>"""

    r = render(html)

    assert r.title == "Home"
    assert r.lines == ["Go to page A or B.", "", "Nothing here", "", "Last C"]
    first, second = r.links[0]
    assert (first.start, first.end, first.target) == (6, 11, "http://example.com/a")
    assert (second.start, second.end, second.target) == (16, 16, "http://example.com/dir/b.html")
    assert [(s.start, s.end) for s in r.links[4]] == [(5, 5)]
    assert r.fragments == {"end": 4}


def test_base_element():
    """<base href> overrides the document location."""
    r = render('<head><base href="http://cdn.example.net/x/"></head><a href="y">y</a>')

    assert r.links[0][0].target == "http://cdn.example.net/x/y"


def test_wrapping():
    """Text is wrapped to the width."""
    words = " ".join(["lorem"] * 30)

    r = render(f"<p>{words}</p>", width=20)

    assert len(r.lines) > 1
    assert all(len(line) <= 20 for line in r.lines)
    assert " ".join(r.lines).split() == words.split()


def test_link_across_lines():
    """A wrapped link gets a span on each line."""
    r = render('<p><a href="/x">one two three four five six</a></p>', width=10)

    assert len(r.lines) == 3
    assert sorted(r.links) == [0, 1, 2]
    assert {s.target for spans in r.links.values() for s in spans} == {"http://example.com/x"}


def test_markup():
    """Inline and heading tags are decorated, overridable per tag."""
    html = "<h1>Title</h1><p>a <b>bold</b> and <i>slanted</i> word</p>"

    r = render(html)
    assert r.lines == ["= Title =", "", "a *bold* and /slanted/ word"]

    r = render(html, markup={"b": ("<", ">")})
    assert r.lines[-1] == "a <bold> and /slanted/ word"


def test_lists():
    """List items are indented and bulleted or numbered."""
    r = render("<ul><li>one</li><li>two</li></ul><ol><li>first</li><li>second</li></ol>")

    assert r.lines == ["  * one", "  * two", "", "  1. first", "  2. second"]


def test_preformatted():
    """pre keeps spacing and line breaks."""
    r = render("<pre>a  b\n  c</pre>")

    assert r.lines == ["a  b", "  c"]


def test_skipped_content():
    """Scripts, styles and comments never show."""
    r = render("<script>var x = 1;</script><style>p {}</style><!-- note --><p>shown</p>")

    assert r.lines == ["shown"]


def test_meta():
    """keywords and description meta tags are collected."""
    r = render(
        '<head><meta name="keywords" content="a, b">'
        '<meta name="Description" content="About"></head><p>x</p>'
    )

    assert r.meta == {"keywords": "a, b", "description": "About"}


def test_id_fragment():
    """Any id attribute is an anchor."""
    r = render("<p>intro</p><h2 id='sec'>Section</h2><p>body</p>")

    assert r.lines[r.fragments["sec"]] == "== Section =="


def test_form_controls():
    """Form controls are drawn and bound to their structured inputs."""
    html = """<form action="/search">
<input type="text" name="q" value="cats" size="10">
<input type="checkbox" name="safe" checked>
<input type="radio" name="lang" value="en" checked>
<input type="radio" name="lang" value="fr">
<select name="n"><option>10</option><option selected>20</option><option>50</option></select>
<input type="hidden" name="token" value="abc">
<input type="submit" name="go" value="Search">
</form>"""
    forms = parse_forms(html, BASE)

    r = HtmlRenderer().render(html, 60, BASE, forms)

    assert r.lines == ["[cats      ] [X] (*) ( ) [20] [ Search ]"]
    spans = r.links[0]
    assert [s.input.type for s in spans] == ["text", "checkbox", "radio", "radio", "select", "submit"]
    assert [(s.start, s.end) for s in spans] == [
        (0, 11), (13, 15), (17, 19), (21, 23), (25, 28), (30, 39),
    ]
    assert forms[0].spans == spans
    assert spans[0].target is None
    assert callable(spans[-1].target)


def test_textarea_stays_on_one_line():
    """Multi-line textarea values are drawn on a single line."""
    html = '<form action="/post"><textarea name="t">\nline one\nline two</textarea></form>'
    forms = parse_forms(html, BASE)

    r = HtmlRenderer().render(html, 60, BASE, forms)

    assert forms[0].inputs[0].value == "line one\nline two"
    assert r.lines == ["[line one line two   ]"]
