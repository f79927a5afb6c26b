"""In-place editing of a parsed HTML document.

`TreeEditor` wraps a justhtml document and exposes the handful of mutations
the AMP pipeline needs. Removals and renames run as justhtml transforms, so
they reach every element of the tree, `<template>` contents included.
Selectors are re-evaluated on every call, so a rule never sees nodes an
earlier rule already removed.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from justhtml import JustHTML, SelectorError
from justhtml.transforms import Drop, Edit, EditAttrs, apply_compiled_transforms, compile_transforms

from .errors import RuleError
from .serialize import to_html

if TYPE_CHECKING:
    from collections.abc import Callable

    ReportCallback = Callable[..., None]

# The pipeline works on the tree exactly as parsed: no sanitizing, and
# <noscript> content parsed as elements so rules can reach inside it.
_WANTED_OPTIONS: dict[str, Any] = {"sanitize": False, "scripting_enabled": False}


def _parser_options() -> dict[str, Any]:
    try:
        params = inspect.signature(JustHTML).parameters
    except (TypeError, ValueError):
        return {}
    return {name: value for name, value in _WANTED_OPTIONS.items() if name in params}


_PARSER_OPTIONS = _parser_options()


def parse_document(html: str) -> JustHTML:
    return JustHTML(html, **_PARSER_OPTIONS)


class TreeEditor:
    __slots__ = ("document", "report")

    document: JustHTML
    report: ReportCallback | None

    def __init__(self, html: str | JustHTML, *, report: ReportCallback | None = None) -> None:
        self.document = parse_document(html) if isinstance(html, str) else html
        self.report = report

    @property
    def root(self) -> Any:
        return self.document.root

    def query(self, selector: str) -> list[Any]:
        """Return the nodes matching `selector` in document order."""
        try:
            return list(self.document.query(selector))
        except SelectorError as e:
            raise RuleError(selector, str(e)) from e

    def apply(self, *transforms: Any) -> None:
        """Run justhtml transform specs over the whole document."""
        try:
            compiled = compile_transforms(transforms)
        except SelectorError as e:
            raise RuleError(", ".join(getattr(t, "selector", "") for t in transforms), str(e)) from e
        apply_compiled_transforms(self.root, compiled)

    def remove_matching(self, selector: str) -> int:
        """Detach every node matched by `selector`. Returns the number removed.

        Descendants of a removed node are not visited again.
        """
        removed: list[Any] = []

        def _removed(node: Any) -> None:
            removed.append(node)
            self.note(f"Removed restricted element <{node.name}>", node)

        self.apply(Drop(selector, callback=_removed))
        return len(removed)

    def remove_attribute(self, selector: str, attr_name: str) -> int:
        changed: list[Any] = []

        def _drop(node: Any) -> dict[str, str | None] | None:
            attrs = node.attrs
            if not attrs or attr_name not in attrs:
                return None
            changed.append(node)
            self.note(f"Removed attribute '{attr_name}' from <{node.name}>", node)
            return {key: value for key, value in attrs.items() if key != attr_name}

        self.apply(EditAttrs(selector, _drop))
        return len(changed)

    def rename_matching(self, selector: str, new_name: str) -> bool:
        """Rename every matched element to `new_name`.

        Returns True when at least one element matched.
        """
        renamed: list[Any] = []

        def _rename(node: Any) -> None:
            old_name = node.name
            node.name = new_name
            renamed.append(node)
            self.note(f"Renamed <{old_name}> to <{new_name}>", node)

        self.apply(Edit(selector, _rename))
        return bool(renamed)

    def remove(self, node: Any) -> None:
        parent = node.parent
        if parent is not None:
            parent.remove_child(node)

    @staticmethod
    def get_attribute(node: Any, name: str) -> str | None:
        attrs = node.attrs or {}
        if name not in attrs:
            return None
        return attrs[name] or ""

    @staticmethod
    def set_attribute(node: Any, name: str, value: str) -> None:
        if node.attrs is None:
            node.attrs = {}
        node.attrs[name] = value

    @staticmethod
    def rename_attribute(node: Any, old: str, new: str) -> bool:
        """Rename attribute `old` to `new` keeping its value and position."""
        attrs = node.attrs
        if not attrs or old not in attrs:
            return False
        node.attrs = {(new if key == old else key): value for key, value in attrs.items() if key != new or old == new}
        return True

    def to_html(self) -> str:
        return to_html(self.document.root)

    def note(self, msg: str, node: Any) -> None:
        if self.report is not None:
            self.report(msg, node=node)
