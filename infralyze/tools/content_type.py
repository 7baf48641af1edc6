"""Content-type sniffing for uploaded configuration text."""
from __future__ import annotations

import re
from typing import Literal

ContentType = Literal["json", "yaml", "unknown"]

_EXTENSION_TYPES: tuple[tuple[str, ContentType], ...] = (
    (".json", "json"),
    (".yaml", "yaml"),
    (".yml", "yaml"),
)

_JSON_ENVELOPES = (("{", "}"), ("[", "]"))

_YAML_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*:\s")
_YAML_ITEM_RE = re.compile(r"\s*-\s")


def content_type_from_extension(filename: str | None) -> ContentType:
    lowered = (filename or "").lower()
    for suffix, content_type in _EXTENSION_TYPES:
        if lowered.endswith(suffix):
            return content_type
    return "unknown"


def detect_content_type(content: str, filename: str | None = None) -> ContentType:
    """Classify text as json, yaml or unknown.

    The filename extension wins over content inspection. Never raises.
    """
    by_extension = content_type_from_extension(filename)
    if by_extension != "unknown":
        return by_extension

    trimmed = (content or "").strip()
    for opener, closer in _JSON_ENVELOPES:
        if trimmed.startswith(opener) and trimmed.endswith(closer):
            return "json"

    if "---" in trimmed or _YAML_KEY_RE.match(trimmed) or _YAML_ITEM_RE.match(trimmed):
        return "yaml"
    return "unknown"
