"""Element specific AMP rewrites: forms and web fonts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .rules import AMP_CUSTOM_ELEMENT_SCRIPT, NEW_LINE

if TYPE_CHECKING:
    from collections.abc import Collection

    from .editor import TreeEditor
    from .rules import RuleTable
    from .settings import AmpSettings


def resolve_complex_elements(
    editor: TreeEditor,
    settings: AmpSettings,
    rules: RuleTable,
    custom_elements: list[str],
) -> None:
    rewrite_forms(editor, settings, rules, custom_elements)
    filter_font_stylesheets(editor, rules.font_stylesheet_selector, settings.font_providers)


def rewrite_forms(
    editor: TreeEditor,
    settings: AmpSettings,
    rules: RuleTable,
    custom_elements: list[str],
) -> int:
    """Make every form submit asynchronously and open in an allowed target.

    - `method="post"` forms get `action` renamed to `action-xhr`.
    - `target` is forced to `_blank` unless it is already `_top`.

    Appends the amp-form script to `custom_elements` when any form exists.
    Returns the number of forms seen.
    """
    forms = editor.query(rules.form_selector)
    for form in forms:
        method = editor.get_attribute(form, "method")
        if method is not None and method.lower() == "post":
            if editor.rename_attribute(form, "action", "action-xhr"):
                editor.note("Renamed form attribute 'action' to 'action-xhr'", form)

        target = editor.get_attribute(form, "target")
        if target is None or target.lower() != "_top":
            editor.set_attribute(form, "target", "_blank")

    if forms:
        custom_elements.append(
            AMP_CUSTOM_ELEMENT_SCRIPT.format(rules.form_element, settings.form_script_url) + NEW_LINE
        )
    return len(forms)


def is_allowed_font(href: str | None, providers: Collection[str]) -> bool:
    if href is None:
        return False
    href = href.lower()
    return any(href.startswith(provider.strip()) for provider in providers if provider.strip())


def filter_font_stylesheets(editor: TreeEditor, selector: str, providers: Collection[str]) -> int:
    """Drop stylesheet links that do not come from an allowed font provider.

    Of the links matched by `selector`, only those whose `rel` holds the
    `stylesheet` token (in any case) are checked.
    """
    removed = 0
    for link in editor.query(selector):
        rel = editor.get_attribute(link, "rel") or ""
        if "stylesheet" not in rel.lower().split():
            continue
        href = editor.get_attribute(link, "href")
        if is_allowed_font(href, providers):
            continue
        editor.remove(link)
        editor.note(f"Removed stylesheet link {href!r} (not an allowed font provider)", link)
        removed += 1
    return removed
