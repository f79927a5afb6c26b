"""The AMP output filter.

`AmpFilter.process()` is called once per response with the rendered HTML and
the activation state of the current page:

- `FilterState.ACTIVE` converts the page to AMP HTML,
- `FilterState.LINK_ONLY` only advertises the AMP variant through a
  `<link rel="amphtml">` discovery link,
- anything else returns the HTML untouched.

Each call is self-contained: the parsed tree and the list of required custom
element scripts live only for the duration of one call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .corrections import perform_regex_corrections
from .editor import TreeEditor
from .errors import TransformNote
from .head import insert_compulsory_markup
from .rules import AMP_HTML_LINK, DEFAULT_RULES, HEAD_END_RE, NEW_LINE, find_tag
from .semantics import resolve_complex_elements
from .services import StaticServices
from .settings import AmpSettings, FilterState, PageStylesheet, RequestContext, absolute_page_url
from .strip import remove_restricted_content
from .substitute import replace_regular_tags

if TYPE_CHECKING:
    from collections.abc import Callable

    from .rules import RuleTable
    from .services import SiteServices

    ReportCallback = Callable[..., None]


def transform_to_amp_html(
    html: str,
    settings: AmpSettings,
    services: SiteServices,
    request: RequestContext,
    *,
    page: PageStylesheet | None = None,
    rules: RuleTable = DEFAULT_RULES,
    report: ReportCallback | None = None,
) -> str:
    """Return `html` rewritten as an AMP HTML document."""
    custom_elements: list[str] = []

    editor = TreeEditor(html, report=report)
    remove_restricted_content(editor, rules)
    resolve_complex_elements(editor, settings, rules, custom_elements)
    replace_regular_tags(editor, settings, rules, custom_elements)

    out = insert_compulsory_markup(editor.to_html(), settings, services, request, custom_elements, page)
    return perform_regex_corrections(out, rules, report)


def amp_url(settings: AmpSettings, request: RequestContext) -> str:
    return absolute_page_url(settings.domain_alias, request, settings.friendly_url_extension)


def append_amp_html_link(html: str, settings: AmpSettings, request: RequestContext) -> str:
    """Insert the discovery link to the AMP variant just before </head>."""
    m = find_tag(HEAD_END_RE, html)
    if m is None:
        return html
    link = AMP_HTML_LINK.format(amp_url(settings, request)) + NEW_LINE
    return html[: m.start(1)] + link + html[m.start(1) :]


class AmpFilter:
    __slots__ = ("collect_notes", "notes", "report", "rules", "services", "settings")

    settings: AmpSettings
    services: SiteServices
    rules: RuleTable
    report: ReportCallback | None
    collect_notes: bool
    notes: list[TransformNote]

    def __init__(
        self,
        settings: AmpSettings | None = None,
        services: SiteServices | None = None,
        *,
        rules: RuleTable = DEFAULT_RULES,
        report: ReportCallback | None = None,
        collect_notes: bool = False,
    ) -> None:
        self.settings = settings or AmpSettings()
        self.services = services if services is not None else StaticServices()
        self.rules = rules
        self.report = report
        self.collect_notes = bool(collect_notes)
        self.notes = []

    def process(
        self,
        html: str,
        state: FilterState | str | int | None,
        request: RequestContext,
        *,
        page: PageStylesheet | None = None,
    ) -> str:
        self.notes = []
        state = FilterState.coerce(state)
        if state is FilterState.ACTIVE:
            return transform_to_amp_html(
                html,
                self.settings,
                self.services,
                request,
                page=page,
                rules=self.rules,
                report=self._reporter(),
            )
        if state is FilterState.LINK_ONLY:
            return append_amp_html_link(html, self.settings, request)
        return html

    __call__ = process

    def _reporter(self) -> ReportCallback | None:
        if not self.collect_notes:
            return self.report

        notes = self.notes
        forward = self.report

        def _report(msg: str, *, node: Any | None = None) -> None:
            tag = getattr(node, "name", None) if node is not None else None
            notes.append(TransformNote("amp-transform", message=msg, tag=tag))
            if forward is not None:
                forward(msg, node=node)

        return _report
