"""Rewrite relative URLs inside CSS text."""

from __future__ import annotations

import re
from urllib.parse import urljoin

_CSS_URL_RE = re.compile(
    r"""url\(\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^)"'\s]*))\s*\)""",
    re.IGNORECASE,
)
_CSS_IMPORT_RE = re.compile(r"""(?P<head>@import\s+)(?P<quote>["'])(?P<url>[^"']*)(?P=quote)""", re.IGNORECASE)
_ABSOLUTE_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//|#)")


def _resolve(url: str, base_url: str) -> str:
    url = url.strip()
    if not url or _ABSOLUTE_RE.match(url):
        return url
    return urljoin(base_url, url)


def absolutize_css_urls(css: str, base_url: str) -> str:
    """Make every relative `url(...)` and `@import` target in `css` absolute.

    Data URIs, fragments and absolute or protocol-relative URLs are left
    alone. The original quoting style is kept.
    """
    if not css or not base_url:
        return css or ""

    def _url(m: re.Match[str]) -> str:
        if m.group("dq") is not None:
            return f'url("{_resolve(m.group("dq"), base_url)}")'
        if m.group("sq") is not None:
            return f"url('{_resolve(m.group('sq'), base_url)}')"
        return f"url({_resolve(m.group('bare'), base_url)})"

    def _import(m: re.Match[str]) -> str:
        quote = m.group("quote")
        return f"{m.group('head')}{quote}{_resolve(m.group('url'), base_url)}{quote}"

    css = _CSS_URL_RE.sub(_url, css)
    return _CSS_IMPORT_RE.sub(_import, css)
