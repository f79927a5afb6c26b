from .css import absolutize_css_urls
from .editor import TreeEditor
from .errors import AmpFilterError, RuleError, TransformNote
from .filter import AmpFilter, amp_url, append_amp_html_link, transform_to_amp_html
from .rules import DEFAULT_RULES, AttributeRule, RegexRule, RuleTable, TagMapping
from .serialize import to_html
from .services import SiteServices, StaticServices
from .settings import AmpSettings, FilterState, PageStylesheet, RequestContext

__all__ = [
    "DEFAULT_RULES",
    "AmpFilter",
    "AmpFilterError",
    "AmpSettings",
    "AttributeRule",
    "FilterState",
    "PageStylesheet",
    "RegexRule",
    "RequestContext",
    "RuleError",
    "RuleTable",
    "SiteServices",
    "StaticServices",
    "TagMapping",
    "TransformNote",
    "TreeEditor",
    "absolutize_css_urls",
    "amp_url",
    "append_amp_html_link",
    "to_html",
    "transform_to_amp_html",
]
