"""HTML serialization for AMP output.

Unlike justhtml's own `to_html()`, this serializer never sanitizes and never
pretty-prints: the AMP document must carry over the page markup exactly as
the pipeline left it. Its output format is fixed so the textual corrections
in `corrections.py` can rely on it:

- attribute values are always double-quoted with `&`, `"`, `<` and `>`
  escaped,
- attributes without a value are written as a bare name,
- attribute names containing `"` cannot be written back and are dropped,
- every non-void element gets an explicit end tag.
"""

from __future__ import annotations

from typing import Any

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
        # Obsolete, but still void per the HTML parsing algorithm.
        "basefont",
        "bgsound",
        "frame",
        "keygen",
    }
)

# Children of these elements are written verbatim.
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset(
    {"script", "style", "xmp", "iframe", "noembed", "noframes", "plaintext"}
)


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        if '"' in key:
            continue
        if value is None or value == "":
            parts.extend([" ", key])
            continue
        parts.extend([" ", key, '="', _escape_attr_value(str(value)), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Any) -> str:
    """Serialize `node` and its subtree."""
    parts: list[str] = []
    _write(node, parts, raw=False)
    return "".join(parts)


def _write(node: Any, parts: list[str], *, raw: bool) -> None:
    name: str = node.name

    if name == "#text":
        parts.append((node.data or "") if raw else _escape_text(node.data))
        return

    if name == "#comment":
        parts.append(f"<!--{node.data or ''}-->")
        return

    if name == "!doctype":
        parts.append(_doctype(node.data))
        return

    if name in {"#document", "#document-fragment"}:
        for child in node.children or []:
            _write(child, parts, raw=raw)
        return

    parts.append(serialize_start_tag(name, node.attrs))
    if name in VOID_ELEMENTS and not node.children:
        return

    # HTML templates keep their contents in `template_content`.
    template_content = getattr(node, "template_content", None)
    if name == "template" and node.namespace in {None, "html"} and template_content is not None:
        children: list[Any] = template_content.children or []
    else:
        children = node.children or []

    child_raw = name in RAW_TEXT_ELEMENTS and node.namespace in {None, "html"}
    for child in children:
        _write(child, parts, raw=child_raw)
    parts.append(serialize_end_tag(name))


def _doctype(doctype: Any) -> str:
    if doctype is None or isinstance(doctype, str):
        return f"<!DOCTYPE {doctype or 'html'}>"
    name = getattr(doctype, "name", None) or "html"
    public_id = getattr(doctype, "public_id", None)
    system_id = getattr(doctype, "system_id", None)
    if public_id:
        tail = f' PUBLIC "{public_id}"' + (f' "{system_id}"' if system_id else "")
    elif system_id:
        tail = f' SYSTEM "{system_id}"'
    else:
        tail = ""
    return f"<!DOCTYPE {name}{tail}>"
