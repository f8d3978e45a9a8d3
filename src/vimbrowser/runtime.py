"""Runtime wiring helper for the command line and editor front ends."""

from dataclasses import dataclass
from pathlib import Path

import httpx

from .adapters.addrbook import AddressBookDir
from .adapters.html_renderer import HtmlRenderer
from .adapters.http_fetcher import HttpFetcher
from .adapters.memory_editor import MemoryEditor
from .adapters.messenger import TerminalMessenger
from .config import BrowserConfig, load_config, validate_config
from .core.page import Services
from .core.ports import Editor, Messenger
from .core.session import Session


@dataclass
class Runtime:
    """Container for all wired components."""
    session: Session
    services: Services
    fetcher: HttpFetcher
    config: BrowserConfig


def build_runtime(
    config_path: Path | None = None,
    data_dir: Path | None = None,
    editor: Editor | None = None,
    messenger: Messenger | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Runtime:
    """Build and wire all components. Raises ConfigError for bad settings."""
    config = load_config(config_path=config_path, data_dir=data_dir)
    validate_config(config)

    if messenger is None:
        messenger = TerminalMessenger()
    if editor is None:
        editor = MemoryEditor()

    fetcher = HttpFetcher(
        messenger,
        from_header=config.fetch.from_header,
        user_agent=config.fetch.user_agent,
        transport=transport,
    )
    services = Services(
        fetcher=fetcher,
        renderer=HtmlRenderer(),
        editor=editor,
        messenger=messenger,
        render=config.render,
    )

    books = None
    if config.bookmarks.dir is not None:
        books = AddressBookDir(config.bookmarks.dir, messenger)

    session = Session(
        services,
        books=books,
        current_book=config.bookmarks.default_book,
        handlers=config.handlers,
    )
    return Runtime(session=session, services=services, fetcher=fetcher, config=config)
