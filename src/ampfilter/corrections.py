"""Regex corrections over the serialized AMP document.

These handle what is awkward on the tree: the doctype, the `amp` flag on
<html>, conditional comments and attribute name/value patterns AMP reserves.

Attribute rules only look inside start tags as written by
`ampfilter.serialize`: values are double-quoted and never contain a raw `"`,
`<` or `>`, and names never contain `"`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .rules import AttributeRule, RuleTable

_START_TAG_RE = re.compile(r"<(?P<name>[a-zA-Z][^\s/>]*)(?P<attrs>(?:\s+=?[^\s\"/>=]+(?:=\"[^\"]*\")?)*)(?P<tail>\s*/?>)")
_ATTRIBUTE_RE = re.compile(r"(?P<space>\s+)(?P<name>=?[^\s\"/>=]+)(?:=\"(?P<value>[^\"]*)\")?")
_WHITESPACE_RE = re.compile(r"\s+")


def _correct_attribute(
    name: str,
    value: str | None,
    rules: Sequence[AttributeRule],
) -> tuple[bool, str | None]:
    """Return (keep, value) for one attribute after applying `rules`."""
    for rule in rules:
        if not rule.compiled_name.fullmatch(name):
            continue
        if rule.compiled_value is None:
            return False, None
        if value is None:
            continue
        value = rule.compiled_value.sub(rule.replacement, value)
        value = _WHITESPACE_RE.sub(" ", value).strip()
        if not value:
            return False, None
    return True, value


def correct_attributes(
    html: str,
    rules: Sequence[AttributeRule],
    report: Callable[..., None] | None = None,
) -> str:
    """Apply attribute rules to every start tag in `html`."""
    if not rules:
        return html

    def _tag(m: re.Match[str]) -> str:
        attrs = m.group("attrs")
        if not attrs:
            return m.group(0)
        parts: list[str] = []
        for am in _ATTRIBUTE_RE.finditer(attrs):
            name = am.group("name")
            value = am.group("value")
            keep, new_value = _correct_attribute(name, value, rules)
            if not keep:
                if report is not None:
                    report(f"Removed attribute '{name}' from <{m.group('name')}>")
                continue
            if new_value == value:
                parts.append(am.group(0))
            else:
                parts.append(f'{am.group("space")}{name}="{new_value}"')
        return f"<{m.group('name')}{''.join(parts)}{m.group('tail')}"

    return _START_TAG_RE.sub(_tag, html)


def perform_regex_corrections(
    html: str,
    rules: RuleTable,
    report: Callable[..., None] | None = None,
) -> str:
    for rule in rules.document_rules:
        html = rule.apply(html)
    return correct_attributes(html, rules.attribute_rules, report)
