"""Site configuration and request context consumed by the AMP filter.

All of these are supplied by the hosting application and treated as
read-only. They are passed explicitly to the filter; nothing here is global.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .rules import (
    DEFAULT_AUDIO_SCRIPT_URL,
    DEFAULT_FONT_PROVIDERS,
    DEFAULT_FORM_SCRIPT_URL,
    DEFAULT_IFRAME_SCRIPT_URL,
    DEFAULT_RUNTIME_SCRIPT_URL,
    DEFAULT_VIDEO_SCRIPT_URL,
)

_LIST_SEPARATOR_RE = re.compile(r"[;,\r\n]+")

P_HTTP = "http://"
P_HTTPS = "https://"


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class FilterState(_StrEnum):
    DISABLED = "disabled"
    ACTIVE = "active"
    LINK_ONLY = "link-only"

    @classmethod
    def coerce(cls, value: Any) -> FilterState:
        """Map a raw activation value onto a state.

        Accepts members, their string values, the CMS state names
        (`activeTransform`, `linkOnly`) and the integer codes the CMS stored
        (0 disabled, 1 active, 2 link only). Anything unrecognized is
        treated as disabled.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.DISABLED
        if isinstance(value, int):
            return _STATE_CODES.get(value, cls.DISABLED)
        if isinstance(value, str):
            key = value.strip().lower().replace("_", "-")
            for state in cls:
                if state.value == key:
                    return state
            return _STATE_ALIASES.get(key.replace("-", ""), cls.DISABLED)
        return cls.DISABLED


_STATE_CODES: dict[int, FilterState] = {
    0: FilterState.DISABLED,
    1: FilterState.ACTIVE,
    2: FilterState.LINK_ONLY,
}

# Names the CMS used for its states, compared without separators.
_STATE_ALIASES: dict[str, FilterState] = {
    "activetransform": FilterState.ACTIVE,
    "linkonly": FilterState.LINK_ONLY,
}


def _split_list(value: str | Collection[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    items = _LIST_SEPARATOR_RE.split(value) if isinstance(value, str) else value
    return tuple(str(item).strip().lower() for item in items if str(item).strip())


@dataclass(frozen=True, slots=True)
class AmpSettings:
    """Site-wide AMP filter settings.

    - `domain_name` is the site domain the canonical link points to.
    - `domain_alias` is the host serving the AMP variant (discovery link).
    - Domains may carry a scheme; without one the connection protocol is
      prepended.
    - `font_providers` accepts a list or a single `;`/`,`/newline separated
      string. Prefixes are stripped and lowercased.
    """

    domain_name: str = ""
    domain_alias: str = ""
    friendly_url_extension: str = ""
    default_stylesheet_id: str | int | None = None
    font_providers: Collection[str] = field(default_factory=lambda: DEFAULT_FONT_PROVIDERS)
    runtime_script_url: str = DEFAULT_RUNTIME_SCRIPT_URL
    form_script_url: str = DEFAULT_FORM_SCRIPT_URL
    video_script_url: str = DEFAULT_VIDEO_SCRIPT_URL
    audio_script_url: str = DEFAULT_AUDIO_SCRIPT_URL
    iframe_script_url: str = DEFAULT_IFRAME_SCRIPT_URL

    def __post_init__(self) -> None:
        # Accept lists/strings from user code, normalize for internal use.
        object.__setattr__(self, "font_providers", _split_list(self.font_providers))
        object.__setattr__(self, "friendly_url_extension", self.friendly_url_extension or "")

    @property
    def has_default_stylesheet(self) -> bool:
        value = self.default_stylesheet_id
        if value is None:
            return False
        text = str(value).strip()
        return bool(text) and text != "0"

    def script_url(self, setting: str) -> str:
        return str(getattr(self, setting))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> AmpSettings:
        """Build settings from a flat key/value store using the CMS key names."""

        def get(key: str, default: Any) -> Any:
            value = values.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                return default
            return value

        return cls(
            domain_name=str(get("CMSDomainName", "")),
            domain_alias=str(get("AmpFilterDomainAlias", "")),
            friendly_url_extension=str(get("CMSFriendlyURLExtension", "")),
            default_stylesheet_id=get("AmpFilterDefaultCSS", None),
            font_providers=get("AmpFilterFontProviders", DEFAULT_FONT_PROVIDERS),
            runtime_script_url=str(get("AmpFilterRuntimeScriptUrl", DEFAULT_RUNTIME_SCRIPT_URL)),
            form_script_url=str(get("AmpFilterFormScriptUrl", DEFAULT_FORM_SCRIPT_URL)),
            video_script_url=str(get("AmpFilterVideoScriptUrl", DEFAULT_VIDEO_SCRIPT_URL)),
            audio_script_url=str(get("AmpFilterAudioScriptUrl", DEFAULT_AUDIO_SCRIPT_URL)),
            iframe_script_url=str(get("AmpFilterIframeScriptUrl", DEFAULT_IFRAME_SCRIPT_URL)),
        )


@dataclass(frozen=True, slots=True)
class PageStylesheet:
    """Per-page AMP stylesheet choice. The default instance means "use default"."""

    use_default_stylesheet: bool = True
    stylesheet_id: str | int | None = None


@dataclass(frozen=True, slots=True)
class RequestContext:
    is_secure: bool = False
    relative_path: str = "/"
    # Full URL of the current request; base for CSS URL rewriting.
    url: str = ""

    @property
    def protocol_prefix(self) -> str:
        return P_HTTPS if self.is_secure else P_HTTP


def absolute_page_url(domain: str, request: RequestContext, extension: str = "") -> str:
    """Return protocol + domain + current document path + friendly URL extension."""
    domain = domain.strip()
    if "://" not in domain:
        domain = request.protocol_prefix + domain
    path = request.relative_path or ""
    if path and not path.startswith("/") and not domain.endswith("/"):
        path = "/" + path
    elif path.startswith("/") and domain.endswith("/"):
        path = path[1:]
    return domain + path + extension
