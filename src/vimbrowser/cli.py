"""CLI for vimbrowser - browse the web as plain text."""

import argparse
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.messenger import TerminalMessenger
from .core.model import Bookmark
from .core.page import Page
from .errors import ConfigError
from .runtime import build_runtime


def _print_surface(rt: Any) -> None:
    viewport = rt.services.editor.current
    if viewport is None or viewport.surface is None:
        return
    for line in viewport.surface.lines:
        print(line)


def cmd_open(args: argparse.Namespace, rt: Any) -> int:
    """Render a location to stdout."""
    if args.width:
        rt.config.render.text_width = args.width
    session = rt.session
    if not session.browse(" ".join(args.tokens)):
        return 1
    page = session.current.page
    if args.header:
        page.show_header()
    _print_surface(rt)

    if args.links:
        targets = []
        for line in sorted(page.links):
            for span in page.links[line]:
                target = session.current.get_link(span)
                if target and target not in targets:
                    targets.append(target)
        if targets:
            print()
            print("Links:")
            for i, target in enumerate(targets, 1):
                print(f"[{i}] {target}")
    return 0


def cmd_source(args: argparse.Namespace, rt: Any) -> int:
    """Print the raw source of a location."""
    if not rt.session.browse(args.location):
        return 1
    surface = rt.session.view_source()
    for line in surface.lines:
        print(line)
    return 0


def cmd_save(args: argparse.Namespace, rt: Any) -> int:
    """Save a location to a file, whatever its type."""
    location = rt.session.resolve(args.location)
    if location is None:
        return 1
    page = Page.create(location, rt.services, "save", str(args.file))
    if page is None or not page.do_action():
        return 1
    if not args.quiet:
        print(f"Saved {page.location} to {args.file}")
    return 0


def cmd_resolve(args: argparse.Namespace, rt: Any) -> int:
    """Print the location that tokens (or a bookmark) resolve to."""
    location = rt.session.resolve(" ".join(args.tokens))
    if location is None:
        return 1
    print(location)
    return 0


def cmd_bookmark_add(args: argparse.Namespace, rt: Any) -> int:
    books = rt.session.books
    if books is None:
        print("Error: bookmarks are disabled", file=sys.stderr)
        return 1
    book = books.open(args.book or rt.session.current_book)
    if not book.put(args.name, Bookmark(args.location, args.desc or "")):
        return 1
    return 0


def cmd_bookmark_rm(args: argparse.Namespace, rt: Any) -> int:
    books = rt.session.books
    if books is None:
        print("Error: bookmarks are disabled", file=sys.stderr)
        return 1
    book = books.get(args.book or rt.session.current_book)
    if book is None or not book.delete(args.name):
        print(f"Bookmark {args.name} not found", file=sys.stderr)
        return 1
    return 0


def cmd_bookmark_ls(args: argparse.Namespace, rt: Any) -> int:
    books = rt.session.books
    if books is None:
        print("Error: bookmarks are disabled", file=sys.stderr)
        return 1
    name = args.book or rt.session.current_book
    book = books.get(name)
    if book is None:
        print(f"Bookmark file {name} does not exist (in {books.root})", file=sys.stderr)
        return 1
    for line in book.listing():
        print(line)
    return 0


def cmd_books(args: argparse.Namespace, rt: Any) -> int:
    for name in rt.session.list_books():
        print(name)
    return 0


def version_text() -> str:
    return "\n".join([
        f"vimbrowser {__version__}",
        f"python {platform.python_version()}",
        f"platform {platform.platform()}",
    ])


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="vbrowse", description="Plain text web browser"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/browser.toml, ~/.vimbrowser/browser.toml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--version", action="store_true", help="Show version information"
    )

    subparsers = parser.add_subparsers(dest="cmd")

    # open command
    parser_open = subparsers.add_parser("open", help="Render a location to stdout")
    parser_open.add_argument("tokens", nargs="+", help="Location or :bookmark, plus arguments")
    parser_open.add_argument(
        "--header", action="store_true", help="Show the document header block"
    )
    parser_open.add_argument(
        "--links", action="store_true", help="List link targets after the text"
    )
    parser_open.add_argument("--width", type=int, default=None, help="Text width")

    # source command
    parser_source = subparsers.add_parser("source", help="Print the raw source")
    parser_source.add_argument("location", help="Location or :bookmark")

    # save command
    parser_save = subparsers.add_parser("save", help="Save a location to a file")
    parser_save.add_argument("location", help="Location or :bookmark")
    parser_save.add_argument("file", type=Path, help="Destination file")

    # resolve command
    parser_resolve = subparsers.add_parser("resolve", help="Resolve a location or bookmark")
    parser_resolve.add_argument("tokens", nargs="+", help="Location or :bookmark, plus arguments")

    # bookmark command
    parser_bookmark = subparsers.add_parser("bookmark", help="Manage bookmarks")
    bookmark_sub = parser_bookmark.add_subparsers(dest="bookmark_cmd", required=True)

    parser_bookmark_add = bookmark_sub.add_parser("add", help="Add or change a bookmark")
    parser_bookmark_add.add_argument("name", help="Nickname")
    parser_bookmark_add.add_argument("location", help="Location (or another :bookmark)")
    parser_bookmark_add.add_argument("--desc", help="Description")
    parser_bookmark_add.add_argument("--book", help="Bookmark file (default: current)")

    parser_bookmark_rm = bookmark_sub.add_parser("rm", help="Remove a bookmark")
    parser_bookmark_rm.add_argument("name", help="Nickname")
    parser_bookmark_rm.add_argument("--book", help="Bookmark file (default: current)")

    parser_bookmark_ls = bookmark_sub.add_parser("ls", help="List bookmarks")
    parser_bookmark_ls.add_argument("book", nargs="?", help="Bookmark file (default: current)")

    # books command
    subparsers.add_parser("books", help="List bookmark files")

    args = parser.parse_args()

    if args.version:
        print(version_text())
        sys.exit(0)
    if args.cmd is None:
        parser.print_help(sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    try:
        rt = build_runtime(
            config_path=args.config,
            messenger=TerminalMessenger(quiet=args.quiet),
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    handlers = {
        "open": cmd_open,
        "source": cmd_source,
        "save": cmd_save,
        "resolve": cmd_resolve,
        "books": cmd_books,
    }

    # Handle bookmark subcommand
    if args.cmd == "bookmark":
        bookmark_handlers = {
            "add": cmd_bookmark_add,
            "rm": cmd_bookmark_rm,
            "ls": cmd_bookmark_ls,
        }
        handler = bookmark_handlers.get(args.bookmark_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
        finally:
            rt.fetcher.close()
        sys.exit(exit_code)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
