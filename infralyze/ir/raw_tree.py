"""RawTree tagging and scalar coercion.

A RawTree is whatever a JSON/YAML decoder hands back: a scalar, a list of
RawTrees, or a mapping of string keys to RawTrees. Every consumer in this
package dispatches on :func:`node_kind` instead of ad hoc ``isinstance``
chains so the three shapes are handled explicitly.
"""
from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

RawTree = Any
Number = Union[int, float]

# Numeric string forms a JavaScript Number() call accepts; no digit separators.
_DECIMAL_NUMBER = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_HEX_NUMBER = re.compile(r"0[xX][0-9a-fA-F]+")


class NodeKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


def node_kind(value: RawTree) -> NodeKind:
    # bool before int: True is an int in Python
    if value is None:
        return NodeKind.NULL
    if isinstance(value, bool):
        return NodeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if isinstance(value, str):
        return NodeKind.STRING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    if isinstance(value, dict):
        return NodeKind.MAPPING
    return NodeKind.OTHER


def is_mapping(value: RawTree) -> bool:
    return node_kind(value) is NodeKind.MAPPING


def is_sequence(value: RawTree) -> bool:
    return node_kind(value) is NodeKind.SEQUENCE


def is_present(value: RawTree) -> bool:
    """Loose truthiness used by every "first present key" lookup.

    ``None``, ``False``, ``0`` and ``""`` are absent; empty lists and
    mappings still count as present.
    """
    kind = node_kind(value)
    if kind is NodeKind.NULL:
        return False
    if kind is NodeKind.BOOLEAN:
        return value
    if kind is NodeKind.NUMBER:
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if kind is NodeKind.STRING:
        return value != ""
    return True


def first_present(item: Dict[str, RawTree], aliases: Iterable[str]) -> RawTree:
    for alias in aliases:
        value = item.get(alias)
        if is_present(value):
            return value
    return None


def first_present_key(item: Dict[str, RawTree], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        if is_present(item.get(key)):
            return key
    return None


def format_number(value: Number) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def to_text(value: RawTree) -> str:
    """Coerce a scalar to a string; composites and null become ``""``."""
    kind = node_kind(value)
    if kind is NodeKind.STRING:
        return value
    if kind is NodeKind.BOOLEAN:
        return "true" if value else "false"
    if kind is NodeKind.NUMBER:
        return format_number(value)
    return ""


def to_number(value: RawTree) -> Optional[Number]:
    """Coerce a number or numeric string; anything else is ``None``."""
    kind = node_kind(value)
    if kind is NodeKind.NUMBER:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value
    if kind is not NodeKind.STRING:
        return None
    text = value.strip()
    if _HEX_NUMBER.fullmatch(text):
        return int(text, 16)
    if not _DECIMAL_NUMBER.fullmatch(text):
        return None
    parsed = float(text)
    if not math.isfinite(parsed):
        return None
    return int(parsed) if parsed.is_integer() else parsed


def shape_name(value: RawTree) -> str:
    """Runtime shape label: scalar type name, ``object`` or ``array[N]``."""
    kind = node_kind(value)
    if kind is NodeKind.SEQUENCE:
        return f"array[{len(value)}]"
    if kind is NodeKind.MAPPING:
        return "object"
    if kind is NodeKind.OTHER:
        return type(value).__name__
    return kind.value


def children(value: RawTree) -> List[RawTree]:
    kind = node_kind(value)
    if kind is NodeKind.SEQUENCE:
        return list(value)
    if kind is NodeKind.MAPPING:
        return list(value.values())
    return []
