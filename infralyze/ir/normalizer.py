"""Map an arbitrary decoded config tree onto {services, databases, environment}.

Extraction is heuristic and never raises. Each section is resolved on its
own against the same tree using ordered tables: the first present key wins,
then the value's shape (sequence or keyed mapping) picks the record builder.
When no section yields anything, every nested object at the top level is
read as an implicit component.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from infralyze.ir.raw_tree import (
    NodeKind,
    RawTree,
    first_present,
    first_present_key,
    is_mapping,
    node_kind,
    to_number,
    to_text,
)
from infralyze.models.infra import Database, InfraData, Service

logger = logging.getLogger(__name__)

SERVICE_SECTION_KEYS = ("services", "applications", "apps")
DATABASE_SECTION_KEYS = ("databases", "db", "data")
ENVIRONMENT_SECTION_KEYS = ("environment", "env", "envVars", "variables")

# canonical field -> source aliases, in priority order
SERVICE_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("name", ("name", "id")),
    ("type", ("type", "kind")),
    ("runtime", ("runtime", "image", "version")),
    ("build_command", ("buildCommand", "build")),
    ("start_command", ("startCommand", "command", "cmd")),
    ("root_dir", ("rootDir", "workingDir", "path")),
)

DATABASE_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("name", ("name", "id")),
    ("type", ("type", "engine")),
    ("version", ("version",)),
    ("host", ("host", "hostname")),
)

DEFAULT_ARRAY_SERVICE_TYPE = "unknown"
DEFAULT_SECTION_SERVICE_TYPE = "unknown"
DEFAULT_KEYED_SERVICE_TYPE = "service"
DEFAULT_COMPONENT_TYPE = "component"
DEFAULT_DATABASE_TYPE = "database"
UNKNOWN_SERVICE_NAME = "Unknown Service"
UNKNOWN_DATABASE_NAME = "Unknown Database"


def _as_object(item: RawTree) -> Dict[str, RawTree]:
    return item if is_mapping(item) else {}


def _resolve_aliases(item: Dict[str, RawTree], table) -> Dict[str, Optional[str]]:
    fields: Dict[str, Optional[str]] = {}
    for field, aliases in table:
        fields[field] = to_text(first_present(item, aliases)) or None
    return fields


def build_service(item: RawTree, *, default_name: str, default_type: str, name: Optional[str] = None) -> Service:
    fields = _resolve_aliases(_as_object(item), SERVICE_ALIASES)
    fields["name"] = name or fields["name"] or default_name
    fields["type"] = fields["type"] or default_type
    return Service(**fields)


def build_database(item: RawTree, *, default_name: str, name: Optional[str] = None) -> Database:
    body = _as_object(item)
    fields = _resolve_aliases(body, DATABASE_ALIASES)
    fields["name"] = name or fields["name"] or default_name
    fields["type"] = fields["type"] or DEFAULT_DATABASE_TYPE
    return Database(port=to_number(body.get("port")), **fields)


def _services_from_sequence(items: List[RawTree]) -> List[Service]:
    return [
        build_service(item, default_name=UNKNOWN_SERVICE_NAME, default_type=DEFAULT_SECTION_SERVICE_TYPE)
        for item in items
    ]


def _services_from_mapping(entries: Dict[str, RawTree]) -> List[Service]:
    return [
        build_service(body, name=key, default_name=UNKNOWN_SERVICE_NAME, default_type=DEFAULT_KEYED_SERVICE_TYPE)
        for key, body in entries.items()
    ]


def _databases_from_sequence(items: List[RawTree]) -> List[Database]:
    return [build_database(item, default_name=UNKNOWN_DATABASE_NAME) for item in items]


def _databases_from_mapping(entries: Dict[str, RawTree]) -> List[Database]:
    return [build_database(body, name=key, default_name=UNKNOWN_DATABASE_NAME) for key, body in entries.items()]


def _environment_from_mapping(entries: Dict[str, RawTree]) -> Dict[str, str]:
    return {key: to_text(value) for key, value in entries.items()}


# section keys, then one builder per accepted value shape
SectionRule = Tuple[Tuple[str, ...], Dict[NodeKind, Callable]]

SERVICE_RULE: SectionRule = (
    SERVICE_SECTION_KEYS,
    {NodeKind.SEQUENCE: _services_from_sequence, NodeKind.MAPPING: _services_from_mapping},
)
DATABASE_RULE: SectionRule = (
    DATABASE_SECTION_KEYS,
    {NodeKind.SEQUENCE: _databases_from_sequence, NodeKind.MAPPING: _databases_from_mapping},
)
ENVIRONMENT_RULE: SectionRule = (
    ENVIRONMENT_SECTION_KEYS,
    {NodeKind.MAPPING: _environment_from_mapping},
)


def extract_section(data: Dict[str, RawTree], rule: SectionRule):
    """Apply one section rule; ``None`` when no key or shape matched."""
    keys, builders = rule
    key = first_present_key(data, keys)
    if key is None:
        return None
    value = data[key]
    builder = builders.get(node_kind(value))
    if builder is None:
        logger.debug("Section key %r holds a %s, ignoring", key, node_kind(value).value)
        return None
    return builder(value)


def extract_implicit_services(data: Dict[str, RawTree]) -> Optional[List[Service]]:
    services = [
        build_service(value, name=key, default_name=UNKNOWN_SERVICE_NAME, default_type=DEFAULT_COMPONENT_TYPE)
        for key, value in data.items()
        if is_mapping(value)
    ]
    return services or None


def normalize_array(items: List[RawTree]) -> InfraData:
    services = [
        build_service(item, default_name=f"Service {index}", default_type=DEFAULT_ARRAY_SERVICE_TYPE)
        for index, item in enumerate(items, start=1)
    ]
    return InfraData(services=services)


def normalize_object(data: Dict[str, RawTree]) -> InfraData:
    services = extract_section(data, SERVICE_RULE)
    databases = extract_section(data, DATABASE_RULE)
    environment = extract_section(data, ENVIRONMENT_RULE)
    if services is None and databases is None and environment is None:
        services = extract_implicit_services(data)
    return InfraData(services=services, databases=databases, environment=environment)


def normalize_to_infra_data(data: RawTree) -> InfraData:
    """Normalize any RawTree (or ``None``) into InfraData. Never raises."""
    kind = node_kind(data)
    try:
        if kind is NodeKind.SEQUENCE:
            return normalize_array(data)
        if kind is NodeKind.MAPPING:
            return normalize_object(data)
    except Exception:
        logger.exception("Normalization failed, returning empty result")
    return InfraData()
