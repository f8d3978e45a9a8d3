"""Tests for editing form controls in rendered text and submitting them."""

import pytest

SEARCH = "http://example.com/form"
SEARCH_HTML = """<html><body><form action="/search">
<input type="text" name="q" value="cats" size="10">
<input type="checkbox" name="safe" checked>
<input type="radio" name="lang" value="en" checked>
<input type="radio" name="lang" value="fr">
<select name="n"><option>10</option><option selected>20</option><option>50</option></select>
<input type="hidden" name="token" value="abc">
<input type="submit" name="go" value="Search">
</form></body></html>"""

LOGIN = "http://example.com/login-form"
LOGIN_HTML = """<form action="/login" method="post">
<input type="password" name="pw" size="8">
<input type="submit" value="Login">
</form>"""


@pytest.fixture
def form_page(site, session):
    site.add(SEARCH, SEARCH_HTML)
    site.add("http://example.com/search", "<p>Results</p>")
    session.browse(SEARCH)
    return session.current.page


def spans_of(page):
    return page.links[0]


def test_click_text_starts_insert(form_page, session, editor):
    """Text fields are edited in place."""
    text = spans_of(form_page)[0]

    assert session.click_input(text)

    assert editor.inserting


def test_click_checkbox_and_radio(form_page, session):
    """Checkboxes toggle; a radio button takes the mark from its group."""
    _, safe, en, fr, _, _ = spans_of(form_page)

    assert session.click_input(safe)
    assert session.click_input(fr)

    assert form_page.get_line(1) == "[cats      ] [ ] ( ) (*) [20] [ Search ]"

    session.click_input(safe)
    assert safe.get_value(form_page) == "X"


def test_click_select(form_page, session, messenger):
    """A select takes the chosen option."""
    select = spans_of(form_page)[4]
    messenger.answers.append(2)

    assert session.click_input(select)

    assert select.get_value(form_page) == "50"


def test_cancelled_select(form_page, session):
    """Nothing changes when no option is chosen."""
    select = spans_of(form_page)[4]

    assert not session.click_input(select)
    assert select.get_value(form_page) == "20"


def test_next_input_choice_select(form_page, session):
    """Select values step through the options without wrapping."""
    select = spans_of(form_page)[4]

    assert session.next_input_choice(1, select)
    assert select.get_value(form_page) == "50"
    assert not session.next_input_choice(1, select)
    assert session.next_input_choice(-2, select)
    assert select.get_value(form_page) == "10"


def test_next_input_choice_radio(form_page, session):
    """The radio mark moves around its group cyclically."""
    _, _, en, fr, _, _ = spans_of(form_page)

    assert session.next_input_choice(1, en)
    assert (en.get_value(form_page), fr.get_value(form_page)) == (" ", "*")
    assert session.next_input_choice(1, en)
    assert (en.get_value(form_page), fr.get_value(form_page)) == ("*", " ")


def test_next_input_choice_needs_input(form_page, session):
    """Only form controls have choices."""
    session.current.viewport.set_cursor(1, 12)

    assert not session.next_input_choice()


def test_submit_get(site, form_page, session, messenger):
    """Submitting reads every control back from the text."""
    _, safe, _, fr, select, _ = spans_of(form_page)
    line = form_page.get_line(1)
    form_page.set_line(1, line.replace("cats", "dogs"))
    session.click_input(safe)
    session.click_input(fr)
    messenger.answers.append(2)
    session.click_input(select)

    session.current.viewport.set_cursor(1, 31)
    assert session.click_input()

    assert str(site.requests[-1].url) == (
        "http://example.com/search?q=dogs&lang=fr&n=50&token=abc&go=Search"
    )
    assert session.current.page.lines == ("Results",)
    assert [str(x) for x in session.current.back] == [SEARCH]


def test_submit_target_is_shown(form_page, session, messenger):
    """The link target of a submit button is the request URL."""
    submit = spans_of(form_page)[-1]

    assert session.current.get_link(submit).startswith("http://example.com/search?q=cats")


def test_password_and_post(site, session, messenger):
    """Passwords are masked on screen and sent in a POST body."""
    site.add(LOGIN, LOGIN_HTML)
    site.add("http://example.com/login", "<p>Welcome</p>")
    session.browse(LOGIN)
    page = session.current.page
    password, submit = spans_of(page)
    assert page.get_line(1) == "[        ] [ Login ]"

    messenger.answers.append("hunter2")
    assert session.click_input(password)
    assert page.get_line(1) == "[******* ] [ Login ]"

    assert session.click_input(submit)

    request = site.requests[-1]
    assert request.method == "POST"
    assert request.content == b"pw=hunter2"
    assert session.current.page.lines == ("Welcome",)


def test_edits_survive_header(form_page, session):
    """Control values are read from content lines when the header is shown."""
    safe = spans_of(form_page)[1]
    session.add_header()

    session.click_input(safe)

    assert safe.get_value(form_page) == " "
    assert form_page.surface.get_line(form_page.offset + 1).startswith("[cats      ] [ ]")


def test_growing_field_moves_neighbours(site, session):
    """A value wider than its field pushes later controls on the line right."""
    site.add(
        "http://example.com/pair",
        '<form action="/go"><input name="a" size="3"> <input name="b" value="xy" size="3"></form>',
    )
    session.browse("http://example.com/pair")
    page = session.current.page
    first, second = spans_of(page)
    assert page.get_line(1) == "[   ] [xy ]"

    first.set_value(page, "hello world")

    assert page.get_line(1) == "[hello world] [xy ]"
    assert (second.start, second.end) == (14, 18)
    assert second.get_value(page) == "xy"
    assert page.find_link_at(1, 15) is second

    request = first.form.click(page)
    assert str(request.url) == "http://example.com/go?a=hello+world&b=xy"
