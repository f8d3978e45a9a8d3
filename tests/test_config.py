"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from vimbrowser.config import load_config, validate_config
from vimbrowser.errors import ConfigError


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        data_dir = Path(tmpdir)
        config = load_config(data_dir=data_dir)

        assert config.data_dir == data_dir
        assert config.bookmarks.dir == data_dir / "addressbooks"
        assert config.bookmarks.default_book == "default"
        assert config.render.text_width == 78
        assert config.render.assumed_encoding == "utf-8"
        assert config.handlers == {}


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "browser.toml"
        config_path.write_text(f"""
[browser]
data_dir = "{tmpdir}"
addrbook_dir = "{tmpdir}/books"
default_addrbook = "work"
assumed_encoding = "latin-1"
text_width = 100
from_header = "me@example.com"

[handlers]
MAILTO = "mutt %s"

[markup]
b = ["<", ">"]
""")

        config = load_config(config_path=config_path)

        assert config.data_dir == Path(tmpdir)
        assert config.bookmarks.dir == Path(tmpdir) / "books"
        assert config.bookmarks.default_book == "work"
        assert config.render.assumed_encoding == "latin-1"
        assert config.render.text_width == 100
        assert config.render.markup == {"b": ("<", ">")}
        assert config.fetch.from_header == "me@example.com"
        assert config.handlers == {"mailto": "mutt %s"}


def test_empty_addrbook_dir_disables_bookmarks():
    """An empty addrbook_dir turns bookmarks off."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "browser.toml"
        config_path.write_text('[browser]\naddrbook_dir = ""\n')

        config = load_config(config_path=config_path)

        assert config.bookmarks.dir is None
        validate_config(config)


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            (Path(tmpdir) / "browser.toml").write_text("[browser]\ntext_width = 40\n")

            config = load_config()
            assert config.render.text_width == 40
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_data_dir():
    """Test config search in the data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "browser.toml").write_text("[browser]\ntext_width = 50\n")

        config = load_config(data_dir=Path(tmpdir))
        assert config.render.text_width == 50


def test_relative_addrbook_dir_is_rejected():
    """A relative bookmarks directory is a configuration error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "browser.toml"
        config_path.write_text('[browser]\naddrbook_dir = "books"\n')

        config = load_config(config_path=config_path)

        with pytest.raises(ConfigError, match="must be absolute"):
            validate_config(config)


def test_tiny_text_width_is_rejected():
    """Widths below 10 columns are refused."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "browser.toml"
        config_path.write_text("[browser]\ntext_width = 3\n")

        with pytest.raises(ConfigError):
            validate_config(load_config(config_path=config_path))
