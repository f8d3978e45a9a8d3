"""HTTP(S) and file fetching on top of httpx.

The client never follows redirects on its own: ``302 Found`` is chased here,
one hop at a time, and every other redirect class is handed back to httpx.
Failures never raise; they are reported and a response is returned anyway.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from urllib.parse import unquote, urljoin, urlsplit

import httpx

from .. import __version__
from ..core.model import Location
from ..core.ports import Fetcher, Messenger

MAX_REDIRECTS = 20


def status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


class HttpFetcher(Fetcher):
    def __init__(
        self,
        messenger: Messenger,
        *,
        from_header: str | None = None,
        user_agent: str | None = None,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.messenger = messenger
        headers = {"User-Agent": user_agent or f"VimBrowser/{__version__}"}
        if from_header:
            headers["From"] = from_header
        self._client = client or httpx.Client(
            headers=headers,
            follow_redirects=False,
            transport=transport,
        )
        self.hops = 0  # 302 hops taken by the last fetch

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def fetch(self, target: str | Location | httpx.Request) -> httpx.Response:
        self.hops = 0
        return self._fetch(target)

    def _fetch(self, target: str | Location | httpx.Request) -> httpx.Response:
        if isinstance(target, httpx.Request):
            uri = str(target.url)
            self.messenger.message(f"Sending request to {uri}...")
            response = self._send(target)
        else:
            uri = str(target.url if isinstance(target, Location) else target)
            if urlsplit(uri).scheme.lower() == "file":
                return self._fetch_file(uri)
            self.messenger.message(f"Fetching {uri}...")
            response = self._send(self._client.build_request("GET", uri))

        if response.status_code == 302 and "location" in response.headers:
            if self.hops >= MAX_REDIRECTS:
                self.messenger.error(f"Too many redirects fetching {uri}")
                return response
            self.hops += 1
            next_uri = urljoin(str(response.url), response.headers["location"])
            if urlsplit(next_uri).scheme.lower() == "file":
                self.messenger.error(f"Refusing redirect from {uri} to local file {next_uri}")
                return response
            self.messenger.debug(f"302 Found: {uri} -> {next_uri}")
            return self._fetch(next_uri)

        if response.is_redirect and response.next_request is not None:
            response = self._send(response.next_request, follow=True)

        if not response.is_success:
            self.messenger.error(f"Failed to fetch {uri}: {status_line(response)}")
        return response

    def _send(self, request: httpx.Request, follow: bool = False) -> httpx.Response:
        try:
            response = self._client.send(request, follow_redirects=follow)
        except httpx.HTTPError as e:
            self.messenger.debug(f"transport error for {request.url}: {e!r}")
            return httpx.Response(
                502,
                headers={"content-type": "text/plain"},
                content=str(e).encode("utf-8"),
                request=request,
            )
        return response

    def _fetch_file(self, uri: str) -> httpx.Response:
        self.messenger.message(f"Fetching {uri}...")
        request = httpx.Request("GET", uri)
        path = Path(unquote(urlsplit(uri).path))
        if path.is_dir():
            # Directory listings are rendered as a page of links
            body = "".join(
                f'<li><a href="{p.as_uri()}">{p.name}{"/" if p.is_dir() else ""}</a></li>\n'
                for p in sorted(path.iterdir())
            )
            content = f"<html><head><title>{path}</title></head><body><ul>\n{body}</ul></body></html>"
            return httpx.Response(
                200,
                headers={"content-type": "text/html; charset=utf-8"},
                content=content.encode("utf-8"),
                request=request,
            )
        try:
            content = path.read_bytes()
        except OSError as e:
            response = httpx.Response(404, content=str(e).encode("utf-8"), request=request)
            self.messenger.error(f"Failed to fetch {uri}: {status_line(response)}")
            return response
        content_type, _ = mimetypes.guess_type(path.name)
        headers = {"content-type": content_type or "application/octet-stream"}
        return httpx.Response(200, headers=headers, content=content, request=request)
