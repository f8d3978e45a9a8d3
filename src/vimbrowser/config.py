"""Configuration loader for browser.toml."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import ConfigError

DEFAULT_DATA_DIR = Path("~/.vimbrowser")


@dataclass
class BookmarkConfig:
    """Address book configuration. ``dir`` is None when bookmarks are disabled."""
    dir: Path | None
    default_book: str = "default"


@dataclass
class FetchConfig:
    """HTTP client configuration."""
    from_header: str | None = None
    user_agent: str | None = None


@dataclass
class RenderConfig:
    """Rendering configuration."""
    text_width: int = 78
    assumed_encoding: str = "utf-8"
    markup: dict[str, tuple[str, str]] = field(default_factory=dict)


@dataclass
class BrowserConfig:
    """Complete vimbrowser configuration."""
    data_dir: Path
    bookmarks: BookmarkConfig
    fetch: FetchConfig
    render: RenderConfig
    handlers: dict[str, str] = field(default_factory=dict)


def load_config(config_path: Path | None = None, data_dir: Path | None = None) -> BrowserConfig:
    """
    Load configuration from browser.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/browser.toml
    3. data_dir/browser.toml

    Args:
        config_path: Explicit path to config file
        data_dir: Data directory for fallback search

    Returns:
        BrowserConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "browser.toml")
    search_paths.append((data_dir or DEFAULT_DATA_DIR).expanduser() / "browser.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    browser_data = toml_data.get("browser", {})
    data_root = Path(browser_data.get("data_dir", data_dir or DEFAULT_DATA_DIR)).expanduser()

    # An explicit empty string disables bookmarking altogether
    addrbook = browser_data.get("addrbook_dir", data_root / "addressbooks")
    bookmark_config = BookmarkConfig(
        dir=Path(addrbook).expanduser() if addrbook else None,
        default_book=browser_data.get("default_addrbook", "default"),
    )

    fetch_config = FetchConfig(
        from_header=browser_data.get("from_header", os.environ.get("EMAIL")),
        user_agent=browser_data.get("user_agent"),
    )

    markup = {
        tag: (str(pair[0]), str(pair[1]))
        for tag, pair in toml_data.get("markup", {}).items()
        if isinstance(pair, list) and len(pair) == 2
    }
    render_config = RenderConfig(
        text_width=int(browser_data.get("text_width", 78)),
        assumed_encoding=browser_data.get("assumed_encoding", "utf-8"),
        markup=markup,
    )

    handlers = {
        scheme.lower(): str(cmd) for scheme, cmd in toml_data.get("handlers", {}).items()
    }

    return BrowserConfig(
        data_dir=data_root,
        bookmarks=bookmark_config,
        fetch=fetch_config,
        render=render_config,
        handlers=handlers,
    )


def validate_config(config: BrowserConfig) -> None:
    """Reject settings that make the browser unusable. Raises ConfigError."""
    book_dir = config.bookmarks.dir
    if book_dir is not None and not book_dir.is_absolute():
        raise ConfigError(f"Bookmarks directory must be absolute, not {book_dir}")
    if config.render.text_width < 10:
        raise ConfigError(f"text_width must be at least 10, not {config.render.text_width}")
