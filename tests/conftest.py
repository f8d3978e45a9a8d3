"""Shared fixtures: a canned web site behind httpx.MockTransport and an
in-memory editor."""

import httpx
import pytest

from vimbrowser.adapters.html_renderer import HtmlRenderer
from vimbrowser.adapters.http_fetcher import HttpFetcher
from vimbrowser.adapters.memory_editor import MemoryEditor
from vimbrowser.adapters.messenger import RecordingMessenger
from vimbrowser.config import RenderConfig
from vimbrowser.core.page import Services
from vimbrowser.core.session import Session

HTML = "text/html; charset=utf-8"

HOME = """<html><head><title>Home</title></head><body>
<p>Go to <a href="/a">page A</a> or <a href="/b">B</a>.</p>
<p>Nothing here</p>
<p><a name="end"></a>Last <a href="http://other.org/c">C</a></p>
</body></html>"""


class Site:
    """Canned responses keyed by URL (query ignored when there is no exact
    match). Every request is recorded."""

    def __init__(self):
        self.pages = {}
        self.requests = []

    def add(self, url, body="", status=200, content_type=HTML, headers=None):
        all_headers = dict(headers or {})
        if content_type:
            all_headers["content-type"] = content_type
        self.pages[url] = (status, all_headers, body)

    def redirect(self, url, location, status=302):
        self.pages[url] = (status, {"location": location}, "")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        entry = self.pages.get(url) or self.pages.get(url.split("?")[0])
        if entry is None:
            return httpx.Response(404, text="not found")
        status, headers, body = entry
        content = body.encode("utf-8") if isinstance(body, str) else body
        return httpx.Response(status, headers=headers, content=content)

    def hits(self, url):
        return sum(1 for r in self.requests if str(r.url) == url)


@pytest.fixture
def site():
    s = Site()
    s.add("http://example.com/", HOME)
    s.add("http://example.com/a", "<p>This is A</p>")
    s.add("http://example.com/b", "<p>This is B</p>")
    s.add("http://other.org/c", "<p>This is C</p>")
    return s


@pytest.fixture
def messenger():
    return RecordingMessenger()


@pytest.fixture
def editor():
    return MemoryEditor()


@pytest.fixture
def services(site, messenger, editor):
    fetcher = HttpFetcher(messenger, transport=httpx.MockTransport(site.handler))
    yield Services(
        fetcher=fetcher,
        renderer=HtmlRenderer(),
        editor=editor,
        messenger=messenger,
        render=RenderConfig(text_width=60),
    )
    fetcher.close()


@pytest.fixture
def session(services):
    return Session(services)
