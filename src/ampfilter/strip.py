"""Removal of elements and attributes AMP does not allow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .editor import TreeEditor
    from .rules import RuleTable


def remove_restricted_content(editor: TreeEditor, rules: RuleTable) -> None:
    for selector in rules.restricted_elements:
        editor.remove_matching(selector)

    # Inline styles must go through the amp-custom stylesheet instead.
    for selector, attr_name in rules.stripped_attributes:
        editor.remove_attribute(selector, attr_name)
