"""Replacement of standard tags by AMP custom elements."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .rules import AMP_CUSTOM_ELEMENT_SCRIPT, NEW_LINE

if TYPE_CHECKING:
    from .editor import TreeEditor
    from .rules import RuleTable
    from .settings import AmpSettings


def replace_regular_tags(
    editor: TreeEditor,
    settings: AmpSettings,
    rules: RuleTable,
    custom_elements: list[str],
) -> None:
    for mapping in rules.tag_mappings:
        if not editor.rename_matching(mapping.selector, mapping.name):
            continue
        if mapping.setting is None:
            continue
        script = AMP_CUSTOM_ELEMENT_SCRIPT.format(mapping.name, settings.script_url(mapping.setting)) + NEW_LINE
        if script not in custom_elements:
            custom_elements.append(script)
