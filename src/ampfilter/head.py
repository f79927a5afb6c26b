"""Assembly of the mandatory AMP <head> markup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .rules import (
    AMP_BOILERPLATE,
    AMP_CANONICAL_LINK,
    AMP_CHARSET,
    AMP_CUSTOM_STYLE,
    AMP_RUNTIME_SCRIPT,
    AMP_VIEWPORT,
    HEAD_RE,
    HTML_TAG_RE,
    NEW_LINE,
    find_tag,
)
from .settings import PageStylesheet, absolute_page_url

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .services import SiteServices
    from .settings import AmpSettings, RequestContext


def get_stylesheet_text(
    settings: AmpSettings,
    services: SiteServices,
    request: RequestContext,
    page: PageStylesheet | None = None,
) -> str:
    """Return the CSS to inline for the current page.

    The stylesheet is, in priority order:

    - the AMP stylesheet chosen for this page,
    - the default AMP stylesheet of the site,
    - the ordinary stylesheet of the page.

    Macros are resolved and relative URLs made absolute against the request
    URL. Errors raised by `services` propagate.
    """
    page = page or PageStylesheet()
    css: str | None
    if not page.use_default_stylesheet:
        css = services.stylesheet_text(page.stylesheet_id) if page.stylesheet_id is not None else None
    elif settings.has_default_stylesheet:
        css = services.stylesheet_text(settings.default_stylesheet_id)  # type: ignore[arg-type]
    else:
        css = services.page_stylesheet_text()

    css = services.resolve_macros(css or "")
    return services.rewrite_css_urls(css, request.url)


def canonical_url(settings: AmpSettings, request: RequestContext) -> str:
    return absolute_page_url(settings.domain_name, request, settings.friendly_url_extension)


def build_head_markup(
    head_tag: str,
    settings: AmpSettings,
    request: RequestContext,
    custom_elements: Sequence[str],
    css: str,
) -> str:
    return (
        head_tag
        + NEW_LINE
        + AMP_CHARSET
        + NEW_LINE
        + AMP_RUNTIME_SCRIPT.format(settings.runtime_script_url)
        + NEW_LINE
        + "".join(custom_elements)
        + AMP_CANONICAL_LINK.format(canonical_url(settings, request))
        + NEW_LINE
        + AMP_VIEWPORT
        + NEW_LINE
        + AMP_BOILERPLATE
        + NEW_LINE
        + AMP_CUSTOM_STYLE.format(css)
        + NEW_LINE
    )


def insert_compulsory_markup(
    html: str,
    settings: AmpSettings,
    services: SiteServices,
    request: RequestContext,
    custom_elements: Sequence[str],
    page: PageStylesheet | None = None,
) -> str:
    """Extend the opening <head> tag of `html` with the mandatory AMP markup."""
    m = find_tag(HEAD_RE, html)
    head_tag = m.group(1) if m else "<head>"

    # Resolved before splicing so a failing service leaves nothing half built.
    css = get_stylesheet_text(settings, services, request, page)
    markup = build_head_markup(head_tag, settings, request, custom_elements, css)

    if m is not None:
        return html[: m.start(1)] + markup + html[m.end(1) :]

    # No head at all: add one holding only the mandatory markup.
    markup += "</head>"
    html_tag = find_tag(HTML_TAG_RE, html)
    at = html_tag.end(1) if html_tag else 0
    return html[:at] + markup + html[at:]
