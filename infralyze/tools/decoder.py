"""JSON / YAML decoding with independent failure handling and fallback."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

import yaml
from yaml.parser import ParserError
from yaml.tokens import FlowEntryToken, FlowMappingEndToken, ValueToken

from infralyze.ir.raw_tree import NodeKind, RawTree, format_number, node_kind
from infralyze.tools.content_type import ContentType
from infralyze.utils.config import settings

logger = logging.getLogger(__name__)

_HINT_SYNTAX = "Check for missing quotes, commas, or brackets in your JSON structure"
_HINT_INCOMPLETE = "Your JSON appears to be incomplete - check for missing closing brackets or braces"
_HINT_GENERIC = "There's a syntax error in your JSON - try validating it with a JSON formatter"


class _StrictLoader(yaml.SafeLoader):
    """SafeLoader that rejects ``{"a": }`` and reads unknown ``!Tags`` as plain values."""

    def parse_flow_mapping_value(self):
        if self.check_token(ValueToken):
            token = self.get_token()
            if self.check_token(FlowEntryToken, FlowMappingEndToken):
                found = self.peek_token()
                raise ParserError(
                    "while parsing a flow mapping",
                    token.start_mark,
                    "expected a value, but found %s" % found.id,
                    found.start_mark,
                )
            self.states.append(self.parse_flow_mapping_key)
            return self.parse_flow_node()
        return super().parse_flow_mapping_value()


def _construct_unknown_tag(loader, suffix, node):
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_yaml_str(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_mapping(node, deep=True)


_StrictLoader.add_multi_constructor("!", _construct_unknown_tag)


@dataclass
class FormatAttempt:
    format: str
    ok: bool
    tree: RawTree = None
    error: Optional[str] = None
    hint: Optional[str] = None

    def describe_error(self) -> str:
        if self.hint:
            return f"{self.error} ({self.hint})"
        return self.error or ""


@dataclass
class DecodeResult:
    tree: RawTree
    content_type: ContentType
    declared_type: ContentType
    json_hint: Optional[str] = None


class DecodeError(ValueError):
    """Raised when neither JSON nor YAML could decode the text."""

    def __init__(self, message: str, json_error: str, yaml_error: str):
        super().__init__(message)
        self.json_error = json_error
        self.yaml_error = yaml_error


def _json_hint(exc: json.JSONDecodeError) -> str:
    if exc.msg.startswith("Unterminated") or exc.pos >= len(exc.doc.rstrip()):
        return _HINT_INCOMPLETE
    if exc.msg.startswith(("Expecting", "Invalid", "Extra data")):
        return _HINT_SYNTAX
    return _HINT_GENERIC


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def _key_text(key) -> str:
    if isinstance(key, str):
        return key
    kind = node_kind(key)
    if kind is NodeKind.NULL:
        return "null"
    if kind is NodeKind.BOOLEAN:
        return "true" if key else "false"
    if kind is NodeKind.NUMBER:
        return format_number(key)
    return str(key)


class TreeTooLargeError(ValueError):
    """Raised when a decoded document expands past the node budget."""


class _TreeBuilder:
    def __init__(self, max_depth: int, max_nodes: int):
        self.max_depth = max_depth
        self.max_nodes = max_nodes
        self.nodes = 0

    def build(self, value, depth: int) -> RawTree:
        if depth > self.max_depth:
            return None
        self.nodes += 1
        if self.nodes > self.max_nodes:
            # shared YAML aliases are copied per reference
            raise TreeTooLargeError(
                f"Document expands to more than {self.max_nodes} nodes; "
                "check for deeply nested YAML aliases"
            )
        kind = node_kind(value)
        if kind is NodeKind.MAPPING:
            return {_key_text(k): self.build(v, depth + 1) for k, v in value.items()}
        if kind is NodeKind.SEQUENCE:
            return [self.build(v, depth + 1) for v in value]
        if kind is NodeKind.NUMBER and isinstance(value, float):
            return value if math.isfinite(value) else format_number(value)
        if kind is not NodeKind.OTHER:
            return value
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="ignore")
        if isinstance(value, (set, frozenset, tuple)):
            return [self.build(v, depth + 1) for v in value]
        return str(value)


def to_raw_tree(
    value,
    depth: int = 0,
    max_depth: Optional[int] = None,
    max_nodes: Optional[int] = None,
) -> RawTree:
    """Coerce decoder output into a JSON-compatible RawTree.

    Keys become strings, dates and times become ISO strings and non-finite
    floats become their text form. Subtrees below ``max_depth`` are dropped
    to ``None``. Raises TreeTooLargeError once more than ``max_nodes`` nodes
    have been produced.
    """
    builder = _TreeBuilder(
        settings.max_depth if max_depth is None else max_depth,
        settings.max_tree_nodes if max_nodes is None else max_nodes,
    )
    return builder.build(value, depth)


def _node_budget(content: str) -> int:
    return max(settings.max_tree_nodes, len(content))


def try_json(content: str) -> FormatAttempt:
    try:
        data = json.loads(content, parse_constant=_reject_constant)
        tree = to_raw_tree(data, max_nodes=_node_budget(content))
    except json.JSONDecodeError as exc:
        return FormatAttempt("json", False, error=str(exc), hint=_json_hint(exc))
    except (ValueError, RecursionError) as exc:
        return FormatAttempt("json", False, error=str(exc) or exc.__class__.__name__)
    return FormatAttempt("json", True, tree=tree)


def try_yaml(content: str) -> FormatAttempt:
    try:
        data = yaml.load(content, Loader=_StrictLoader)
        tree = to_raw_tree(data, max_nodes=_node_budget(content))
    except (yaml.YAMLError, TreeTooLargeError, RecursionError) as exc:
        return FormatAttempt("yaml", False, error=str(exc) or exc.__class__.__name__)
    return FormatAttempt("yaml", True, tree=tree)


def decode_content(content: str, declared: ContentType) -> DecodeResult:
    """Decode text following the classifier verdict.

    json and yaml verdicts try their own format first and fall back to the
    other; unknown tries both and prefers JSON. Raises DecodeError when both
    fail, carrying both parser messages.
    """
    if declared == "yaml":
        yaml_attempt = try_yaml(content)
        if yaml_attempt.ok:
            return DecodeResult(yaml_attempt.tree, "yaml", declared)
        json_attempt = try_json(content)
        if json_attempt.ok:
            logger.info("YAML decode failed, fell back to JSON")
            return DecodeResult(json_attempt.tree, "json", declared)
        raise DecodeError(
            f"YAML parse error: {yaml_attempt.error}. JSON parse error: {json_attempt.describe_error()}",
            json_attempt.error or "",
            yaml_attempt.error or "",
        )

    json_attempt = try_json(content)
    if json_attempt.ok:
        return DecodeResult(json_attempt.tree, "json", declared)
    yaml_attempt = try_yaml(content)
    if yaml_attempt.ok:
        if declared == "json":
            logger.info("JSON decode failed, fell back to YAML")
        return DecodeResult(yaml_attempt.tree, "yaml", declared, json_hint=json_attempt.hint)

    if declared == "json":
        message = (
            f"JSON parse error: {json_attempt.describe_error()}. "
            f"YAML parse error: {yaml_attempt.error}"
        )
    else:
        message = (
            "Could not parse as JSON or YAML. "
            f"JSON error: {json_attempt.describe_error()}. YAML error: {yaml_attempt.error}"
        )
    raise DecodeError(message, json_attempt.error or "", yaml_attempt.error or "")
