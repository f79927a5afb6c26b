"""The AMP rule table.

Everything the filter removes, renames or rewrites is declared here as plain
data. Rules are immutable and shared by every run; callers that need a
broader rule set build their own `RuleTable` instead of patching the
pipeline.

Selectors are CSS selectors evaluated by justhtml. Regex rules run over the
serialized document after the head has been assembled.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass, field

from .errors import RuleError

NEW_LINE = "\n"

# -----------------
# Markup templates
# -----------------

AMP_CHARSET = '<meta charset="utf-8">'
AMP_VIEWPORT = '<meta name="viewport" content="width=device-width,minimum-scale=1,initial-scale=1">'
AMP_RUNTIME_SCRIPT = '<script async src="{0}"></script>'
AMP_CUSTOM_ELEMENT_SCRIPT = '<script async custom-element="{0}" src="{1}"></script>'
AMP_CANONICAL_LINK = '<link rel="canonical" href="{0}">'
AMP_HTML_LINK = '<link rel="amphtml" href="{0}">'
AMP_CUSTOM_STYLE = "<style amp-custom>{0}</style>"
AMP_BOILERPLATE = (
    "<style amp-boilerplate>body{-webkit-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "-moz-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "-ms-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "animation:-amp-start 8s steps(1,end) 0s 1 normal both}"
    "@-webkit-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-moz-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-ms-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-o-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}</style>"
    "<noscript><style amp-boilerplate>body{-webkit-animation:none;-moz-animation:none;"
    "-ms-animation:none;animation:none}</style></noscript>"
)

# Tags located in the serialized document. Comments are matched first so a
# tag spelled out inside a comment is never found; the tag is group 1.
_COMMENT = r"<!--.*?(?:-->|\Z)"
HEAD_RE = re.compile(_COMMENT + r"|(<head(?:\s[^>]*)?>)", re.IGNORECASE | re.DOTALL)
HEAD_END_RE = re.compile(_COMMENT + r"|(</head\s*>)", re.IGNORECASE | re.DOTALL)
HTML_TAG_RE = re.compile(_COMMENT + r"|(<html(?:\s[^>]*)?>)", re.IGNORECASE | re.DOTALL)


def find_tag(pattern: re.Pattern[str], html: str) -> re.Match[str] | None:
    """Return the first match of one of the tag patterns above outside comments."""
    for m in pattern.finditer(html):
        if m.group(1) is not None:
            return m
    return None


# ---------------
# Default values
# ---------------

DEFAULT_RUNTIME_SCRIPT_URL = "https://cdn.ampproject.org/v0.js"
DEFAULT_FORM_SCRIPT_URL = "https://cdn.ampproject.org/v0/amp-form-0.1.js"
DEFAULT_VIDEO_SCRIPT_URL = "https://cdn.ampproject.org/v0/amp-video-0.1.js"
DEFAULT_AUDIO_SCRIPT_URL = "https://cdn.ampproject.org/v0/amp-audio-0.1.js"
DEFAULT_IFRAME_SCRIPT_URL = "https://cdn.ampproject.org/v0/amp-iframe-0.1.js"

DEFAULT_FONT_PROVIDERS: tuple[str, ...] = (
    "https://cloud.typography.com",
    "https://fast.fonts.net",
    "https://fonts.googleapis.com",
    "https://use.typekit.net",
    "https://maxcdn.bootstrapcdn.com",
    "https://use.fontawesome.com",
)


# ------------
# Rule types
# ------------


@dataclass(frozen=True, slots=True)
class TagMapping:
    """Rename elements matched by `selector` to the AMP custom element `name`.

    `setting` names the `AmpSettings` field holding the script URL the custom
    element needs. Mappings without a setting (amp-img) need no extra script.
    """

    selector: str
    name: str
    setting: str | None = None


@dataclass(frozen=True, slots=True)
class RegexRule:
    """A (pattern, replacement) substitution over the whole serialized document."""

    pattern: str
    replacement: str
    flags: int = 0
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", _compile(self.pattern, self.flags))

    def apply(self, html: str) -> str:
        return self.compiled.sub(self.replacement, html)


@dataclass(frozen=True, slots=True)
class AttributeRule:
    """A regex rule evaluated against the attributes of every start tag.

    - With only `name`, attributes whose name fully matches are dropped.
    - With `value`, matching pieces of the attribute value are replaced by
      `replacement`; the attribute is dropped when nothing but whitespace
      remains.
    """

    name: str
    value: str | None = None
    replacement: str = ""
    compiled_name: re.Pattern[str] = field(init=False, repr=False, compare=False)
    compiled_value: re.Pattern[str] | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled_name", _compile(self.name, re.IGNORECASE))
        object.__setattr__(self, "compiled_value", _compile(self.value, 0) if self.value is not None else None)


def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise RuleError(pattern, str(e)) from e


# ------------
# Rule table
# ------------


@dataclass(frozen=True, slots=True)
class RuleTable:
    """All rules one AMP conversion applies, in application order."""

    restricted_elements: tuple[str, ...]
    stripped_attributes: tuple[tuple[str, str], ...]
    form_selector: str
    form_element: str
    font_stylesheet_selector: str
    tag_mappings: tuple[TagMapping, ...]
    document_rules: tuple[RegexRule, ...]
    attribute_rules: tuple[AttributeRule, ...]

    def __init__(
        self,
        *,
        restricted_elements: Collection[str],
        stripped_attributes: Collection[tuple[str, str]],
        form_selector: str,
        form_element: str,
        font_stylesheet_selector: str,
        tag_mappings: Collection[TagMapping],
        document_rules: Collection[RegexRule],
        attribute_rules: Collection[AttributeRule],
    ) -> None:
        object.__setattr__(self, "restricted_elements", tuple(str(s) for s in restricted_elements))
        object.__setattr__(
            self,
            "stripped_attributes",
            tuple((str(sel), str(attr).lower()) for sel, attr in stripped_attributes),
        )
        object.__setattr__(self, "form_selector", str(form_selector))
        object.__setattr__(self, "form_element", str(form_element))
        object.__setattr__(self, "font_stylesheet_selector", str(font_stylesheet_selector))
        object.__setattr__(self, "tag_mappings", tuple(tag_mappings))
        object.__setattr__(self, "document_rules", tuple(document_rules))
        object.__setattr__(self, "attribute_rules", tuple(attribute_rules))

    def extend(
        self,
        *,
        restricted_elements: Collection[str] = (),
        stripped_attributes: Collection[tuple[str, str]] = (),
        tag_mappings: Collection[TagMapping] = (),
        document_rules: Collection[RegexRule] = (),
        attribute_rules: Collection[AttributeRule] = (),
    ) -> RuleTable:
        """Return a copy with extra rules appended after the existing ones."""
        return RuleTable(
            restricted_elements=(*self.restricted_elements, *restricted_elements),
            stripped_attributes=(*self.stripped_attributes, *stripped_attributes),
            form_selector=self.form_selector,
            form_element=self.form_element,
            font_stylesheet_selector=self.font_stylesheet_selector,
            tag_mappings=(*self.tag_mappings, *tag_mappings),
            document_rules=(*self.document_rules, *document_rules),
            attribute_rules=(*self.attribute_rules, *attribute_rules),
        )


# Reserved prefixes AMP keeps for its own runtime classes and ids.
_RESERVED_NAME = r"(?:-amp-|i-amp)\S*"

DEFAULT_RULES = RuleTable(
    restricted_elements=(
        "script",
        "style",
        "base",
        "frame",
        "frameset",
        "object",
        "param",
        "applet",
        "embed",
        'input[type="image"]',
        'input[type="button"]',
        'input[type="password"]',
        'input[type="file"]',
    ),
    stripped_attributes=(
        ("[style]", "style"),
        ("html", "amp"),
        ("html", "\u26a1"),
    ),
    form_selector="form",
    form_element="amp-form",
    font_stylesheet_selector="link[rel]",
    tag_mappings=(
        TagMapping("img", "amp-img"),
        TagMapping("video", "amp-video", "video_script_url"),
        TagMapping("audio", "amp-audio", "audio_script_url"),
        TagMapping("iframe", "amp-iframe", "iframe_script_url"),
    ),
    document_rules=(
        RegexRule(r"<!DOCTYPE[^>]*>", "<!doctype html>", re.IGNORECASE),
        RegexRule(r"<html(?:\s+(?:amp|\u26a1))?(?=[\s>])", "<html amp", re.IGNORECASE),
        RegexRule(r"<!--\[if[^\]]*\]>.*?<!\[endif\]-->", "", re.IGNORECASE | re.DOTALL),
    ),
    attribute_rules=(
        AttributeRule(r"on[a-z][\w:.-]*"),
        AttributeRule(r"xmlns:[\w.-]+|xml:[\w.-]+"),
        AttributeRule(r"i-amp[\w.-]*"),
        AttributeRule("class", r"(?<!\S)" + _RESERVED_NAME),
        AttributeRule("id", r"^" + _RESERVED_NAME + r"$"),
    ),
)
