#!/usr/bin/env python3
"""Command-line interface for ampfilter."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, NoReturn

from . import AmpFilter, AmpSettings, FilterState, RequestContext, StaticServices
from .errors import AmpFilterError
from .rules import DEFAULT_FONT_PROVIDERS


def _get_version() -> str:
    try:
        return version("ampfilter")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ampfilter",
        description="Convert a rendered HTML page to AMP HTML, or add a link to its AMP variant.",
        epilog=(
            "Examples:\n"
            "  ampfilter page.html --domain www.example.com --page-path /news/item\n"
            "  curl -s https://example.com | ampfilter - --css site.css\n"
            "  ampfilter page.html --state link-only --domain-alias amp.example.com\n"
            "\n"
            "If you don't have the 'ampfilter' command available, use:\n"
            "  python -m ampfilter ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="HTML file to convert, or '-' to read from stdin",
    )
    parser.add_argument(
        "--state",
        choices=[state.value for state in FilterState],
        default=FilterState.ACTIVE.value,
        help="Filter state (default: active)",
    )
    parser.add_argument("--domain", default="", help="Site domain the canonical link points to")
    parser.add_argument("--domain-alias", default="", help="Domain serving the AMP variant")
    parser.add_argument("--page-path", default="/", help="Path of the page on the site (default: /)")
    parser.add_argument("--url", default="", help="Full URL of the page; base for CSS url() rewriting")
    parser.add_argument("--secure", action="store_true", help="Build https:// links")
    parser.add_argument("--extension", default="", help="Friendly URL extension appended to links, e.g. .aspx")
    parser.add_argument("--css", help="Stylesheet to inline in <style amp-custom>")
    parser.add_argument(
        "--font-provider",
        action="append",
        dest="font_providers",
        help="Allowed font provider URL prefix (repeatable; defaults to the AMP allow-list)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print every change made to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ampfilter {_get_version()}",
    )

    args = parser.parse_args(argv)

    if not args.path:
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    return args


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()

    return Path(path).read_text()


def main(argv: list[str] | None = None) -> NoReturn | None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    html = _read_text(args.path)

    settings = AmpSettings(
        domain_name=args.domain,
        domain_alias=args.domain_alias or args.domain,
        friendly_url_extension=args.extension,
        font_providers=args.font_providers or DEFAULT_FONT_PROVIDERS,
    )
    services = StaticServices(page_stylesheet=_read_text(args.css) if args.css else None)
    request = RequestContext(is_secure=args.secure, relative_path=args.page_path, url=args.url)

    def _print_change(msg: str, *, node: Any | None = None) -> None:  # noqa: ARG001
        print(msg, file=sys.stderr)

    amp_filter = AmpFilter(settings, services, report=_print_change if args.verbose else None)
    try:
        out = amp_filter.process(html, args.state, request)
    except AmpFilterError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2) from e

    sys.stdout.write(out)
    if not out.endswith("\n"):
        sys.stdout.write("\n")
    return None


if __name__ == "__main__":
    main()
