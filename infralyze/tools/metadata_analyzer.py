"""Aggregate statistics over a decoded config tree."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from infralyze.ir.raw_tree import NodeKind, RawTree, node_kind
from infralyze.models.infra import ConfigMetadata
from infralyze.utils.config import settings

logger = logging.getLogger(__name__)

SECRET_KEY_MARKERS = ("password", "secret")

COMPLEX_PROPERTY_COUNT = 50
COMPLEX_NESTED_PROPERTY_COUNT = 20
MODERATE_PROPERTY_COUNT = 15


@dataclass
class _WalkState:
    max_depth: int
    case_sensitive: bool
    total_properties: int = 0
    has_nesting: bool = False
    deepest: int = 0
    truncated: bool = False
    sensitive_keys: List[str] = field(default_factory=list)


def _is_secret_key(key: str, case_sensitive: bool) -> bool:
    candidate = key if case_sensitive else key.lower()
    return any(marker in candidate for marker in SECRET_KEY_MARKERS)


def _visit(value: RawTree, path: str, depth: int, state: _WalkState) -> None:
    kind = node_kind(value)
    if kind not in (NodeKind.SEQUENCE, NodeKind.MAPPING):
        return
    if depth > state.max_depth:
        state.truncated = True
        return
    if depth > 0:
        state.has_nesting = True
    state.deepest = max(state.deepest, depth)
    state.total_properties += len(value)

    if kind is NodeKind.SEQUENCE:
        for index, item in enumerate(value):
            _visit(item, f"{path}[{index}]", depth + 1, state)
        return

    for key, item in value.items():
        child_path = f"{path}.{key}" if path else str(key)
        if isinstance(item, str) and item and _is_secret_key(str(key), state.case_sensitive):
            state.sensitive_keys.append(child_path)
        _visit(item, child_path, depth + 1, state)


def classify_complexity(total_properties: int, has_nesting: bool) -> str:
    if total_properties > COMPLEX_PROPERTY_COUNT or (has_nesting and total_properties > COMPLEX_NESTED_PROPERTY_COUNT):
        return "complex"
    if total_properties > MODERATE_PROPERTY_COUNT or has_nesting:
        return "moderate"
    return "simple"


def _recommendations(state: _WalkState, complexity: str) -> List[str]:
    recs: List[str] = []
    if complexity == "complex":
        recs.append("Configuration is complex - consider splitting it into smaller files per service.")
        recs.append("Document how the nested sections relate to each other.")
    elif complexity == "moderate":
        recs.append("Consider grouping related settings under clear top-level sections.")
    if state.has_nesting and state.deepest > 4:
        recs.append(f"Nesting reaches depth {state.deepest} - flatter structures are easier to review.")
    if state.sensitive_keys:
        recs.append(
            "Plain-text secrets found in " + ", ".join(state.sensitive_keys)
            + " - move them to a secret manager or environment references."
        )
    if state.truncated:
        recs.append(f"Content nested deeper than {state.max_depth} levels was not analyzed.")
    return recs


def analyze_metadata(
    data: RawTree,
    *,
    max_depth: Optional[int] = None,
    case_sensitive: Optional[bool] = None,
) -> ConfigMetadata:
    state = _WalkState(
        max_depth=settings.max_depth if max_depth is None else max_depth,
        case_sensitive=settings.sensitive_keys_case_sensitive if case_sensitive is None else case_sensitive,
    )
    _visit(data, "", 0, state)
    complexity = classify_complexity(state.total_properties, state.has_nesting)
    return ConfigMetadata(
        total_properties=state.total_properties,
        has_nesting=state.has_nesting,
        max_depth=state.deepest,
        sensitive_keys=state.sensitive_keys,
        complexity=complexity,
        recommendations=_recommendations(state, complexity),
    )


def safe_analyze_metadata(data: RawTree) -> Optional[ConfigMetadata]:
    try:
        return analyze_metadata(data)
    except Exception:
        logger.exception("Metadata analysis failed")
        return None
