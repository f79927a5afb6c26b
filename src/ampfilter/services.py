"""Services the hosting site provides to the AMP filter.

The filter never looks stylesheets up or resolves macros on its own. It
calls a `SiteServices` implementation and lets any exception it raises
propagate: no partial AMP page is produced once the head cannot be built.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from .css import absolutize_css_urls


class SiteServices(Protocol):
    def stylesheet_text(self, stylesheet_id: str | int) -> str | None:
        """Return the text of a stored stylesheet, or None when it does not exist."""
        ...

    def page_stylesheet_text(self) -> str | None:
        """Return the ordinary stylesheet of the page being rendered."""
        ...

    def resolve_macros(self, css: str) -> str: ...

    def rewrite_css_urls(self, css: str, base_url: str) -> str: ...


def _no_macros(css: str) -> str:
    return css


@dataclass(frozen=True, slots=True)
class StaticServices:
    """`SiteServices` backed by in-memory data."""

    stylesheets: Mapping[str, str] = field(default_factory=dict)
    page_stylesheet: str | None = None
    macro_resolver: Callable[[str], str] = _no_macros

    def stylesheet_text(self, stylesheet_id: str | int) -> str | None:
        return self.stylesheets.get(str(stylesheet_id).strip())

    def page_stylesheet_text(self) -> str | None:
        return self.page_stylesheet

    def resolve_macros(self, css: str) -> str:
        return self.macro_resolver(css)

    def rewrite_css_urls(self, css: str, base_url: str) -> str:
        return absolutize_css_urls(css, base_url)
