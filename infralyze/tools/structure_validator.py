"""Score a decoded tree against known infrastructure-description conventions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple

from infralyze.ir.raw_tree import NodeKind, RawTree, is_mapping, node_kind
from infralyze.models.infra import Confidence, ValidationResult
from infralyze.utils.config import settings

logger = logging.getLogger(__name__)

SENSITIVE_KEY_MARKERS: Tuple[str, ...] = ("password", "secret", "key")
MAX_TOP_LEVEL_KEYS = 10

HIGH_CONFIDENCE_SCORE = 3
MEDIUM_CONFIDENCE_SCORE = 1


@dataclass(frozen=True)
class FormatSignature:
    name: str
    tags: FrozenSet[str]
    weight: int
    required_key: Optional[str] = None

    def matches(self, keys: FrozenSet[str]) -> bool:
        if self.required_key is not None and self.required_key not in keys:
            return False
        return bool(self.tags & keys)


# Evaluated in order; every matching signature adds its weight.
FORMAT_SIGNATURES: Tuple[FormatSignature, ...] = (
    FormatSignature("Kubernetes", frozenset({"apiVersion", "kind", "metadata", "spec"}), 3),
    FormatSignature(
        "Docker Compose",
        frozenset({"version", "services", "volumes", "networks"}),
        3,
        required_key="services",
    ),
    FormatSignature("Terraform", frozenset({"resource", "provider", "variable", "output"}), 2),
    FormatSignature(
        "Generic Infrastructure",
        frozenset({"services", "applications", "apps", "components", "containers"}),
        2,
    ),
    FormatSignature("Database Config", frozenset({"databases", "db", "data", "storage"}), 1),
    FormatSignature("Environment Config", frozenset({"environment", "env", "config", "variables"}), 1),
)


def score_keys(keys) -> Tuple[int, List[str]]:
    """Return the accumulated score and the names of matching signatures."""
    key_set = frozenset(keys)
    score = 0
    matched: List[str] = []
    for signature in FORMAT_SIGNATURES:
        if signature.matches(key_set):
            score += signature.weight
            matched.append(signature.name)
    return score, matched


def confidence_for_score(score: int) -> Confidence:
    if score >= HIGH_CONFIDENCE_SCORE:
        return Confidence.HIGH
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return Confidence.MEDIUM
    return Confidence.LOW


def find_sensitive_keys(keys, case_sensitive: Optional[bool] = None) -> List[str]:
    if case_sensitive is None:
        case_sensitive = settings.sensitive_keys_case_sensitive
    flagged = []
    for key in keys:
        candidate = str(key) if case_sensitive else str(key).lower()
        if any(marker in candidate for marker in SENSITIVE_KEY_MARKERS):
            flagged.append(key)
    return flagged


def _score_suggestions(score: int, matched: List[str], keys: FrozenSet[str]) -> List[str]:
    if score == 0:
        return [
            "No recognized infrastructure sections found. Add 'services', 'databases' or "
            "'environment' keys so components can be extracted reliably.",
        ]
    suggestions = []
    if score < HIGH_CONFIDENCE_SCORE:
        suggestions.append(
            f"Partial match ({', '.join(matched)}). Adding a 'services' section improves extraction."
        )
    if "Kubernetes" in matched and not {"apiVersion", "kind"} <= keys:
        suggestions.append("Kubernetes manifests usually declare both 'apiVersion' and 'kind'.")
    if "Terraform" in matched and "resource" not in keys:
        suggestions.append("Terraform configs without 'resource' blocks describe no infrastructure.")
    return suggestions


def _has_nested_objects(data: dict) -> bool:
    return any(is_mapping(value) for value in data.values())


def validate_infra_structure(data: RawTree, *, case_sensitive: Optional[bool] = None) -> ValidationResult:
    """Classify a RawTree and return confidence plus actionable suggestions.

    Objects are always considered valid; extraction is attempted regardless
    of the score.
    """
    kind = node_kind(data)
    if kind is NodeKind.SEQUENCE:
        return ValidationResult(
            is_valid=True,
            confidence=Confidence.MEDIUM,
            detected_format="Service Array",
            suggestions=["Array detected - each entry is treated as a service."],
        )
    if kind is not NodeKind.MAPPING:
        return ValidationResult(
            is_valid=False,
            confidence=Confidence.LOW,
            suggestions=["Provide a JSON or YAML object describing services, databases or environment settings."],
        )

    keys = frozenset(data.keys())
    score, matched = score_keys(keys)
    if matched:
        detected_format = " + ".join(matched)
    elif _has_nested_objects(data):
        detected_format = "Generic Config"
    else:
        detected_format = "Unknown Format"

    suggestions = _score_suggestions(score, matched, keys)
    if len(keys) > MAX_TOP_LEVEL_KEYS:
        suggestions.append(
            f"Found {len(keys)} top-level keys - consider organizing them into sections."
        )
    sensitive = find_sensitive_keys(data.keys(), case_sensitive)
    if sensitive:
        suggestions.append(
            "Security warning: possible credentials in keys "
            f"{', '.join(sensitive)}. Use a secret manager or environment references instead."
        )

    return ValidationResult(
        is_valid=True,
        confidence=confidence_for_score(score),
        detected_format=detected_format,
        suggestions=suggestions,
    )


def safe_validate_infra_structure(
    data: RawTree,
    validator: Callable[[RawTree], ValidationResult] = validate_infra_structure,
) -> Optional[ValidationResult]:
    """Run the validator in its own fault domain; failures yield ``None``."""
    try:
        return validator(data)
    except Exception:
        logger.exception("Structure validation failed")
        return None
