from __future__ import annotations

import re
from typing import Dict, Iterable, Mapping, Optional, Tuple

_RE_HTML_CHARS = re.compile(r"[&<>'\"]")
_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&#39;",
    '"': "&quot;",
}

# Attribute names we are willing to emit; anything else is dropped
_RE_ATTR_NAME = re.compile(r"^[A-Za-z_:][-A-Za-z0-9_:.]*$")

# Subtrees never decorated: scripting, form controls and existing images
SKIPPED_TAGS = frozenset(
    {"iframe", "noframes", "noscript", "script", "select", "style", "textarea", "svg", "img"}
)


def escape_html(value: str) -> str:
    return _RE_HTML_CHARS.sub(lambda m: _HTML_ESCAPES[m.group(0)], value)


def is_safe_attribute(name: str) -> bool:
    """Event handler attributes (``on*``) and malformed names are rejected."""
    if not name or name.lower().startswith("on"):
        return False
    return bool(_RE_ATTR_NAME.match(name))


def merge_attributes(
    base: Mapping[str, str], extra: Optional[Mapping[str, object]]
) -> Dict[str, str]:
    """Overlay caller-supplied attributes on the defaults, dropping unsafe names."""
    merged: Dict[str, str] = dict(base)
    if extra:
        for k, v in extra.items():
            if v is None:
                continue
            merged[str(k)] = str(v)
    return {k: v for k, v in merged.items() if is_safe_attribute(k)}


def render_img(attributes: Iterable[Tuple[str, str]]) -> str:
    parts = " ".join(f'{k}="{escape_html(v)}"' for k, v in attributes)
    return f"<img {parts}/>"


def local_name(tag: object) -> str:
    """Lower-cased tag without an ElementTree ``{namespace}`` prefix."""
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        tag = tag.split("}", 1)[-1]
    return tag.lower()


__all__ = [
    "SKIPPED_TAGS",
    "escape_html",
    "is_safe_attribute",
    "merge_attributes",
    "render_img",
    "local_name",
]
