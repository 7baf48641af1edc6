"""Summaries and JSON export of parse results."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel

from infralyze.models.infra import InfraData, InfraSummary, InfraSummaryDetails

EXPORT_KINDS = ("parsed", "raw", "summary")


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def generate_infra_summary(infra: InfraData) -> InfraSummary:
    services = infra.services or []
    databases = infra.databases or []
    environment = infra.environment or {}
    return InfraSummary(
        services=len(services),
        databases=len(databases),
        environments=len(environment),
        total_components=len(services) + len(databases),
        details=InfraSummaryDetails(
            service_types=_unique(s.type for s in services),
            database_types=_unique(d.type for d in databases),
            runtimes=_unique(s.runtime for s in services),
        ),
    )


def export_as_json(data: Any) -> str:
    """Pretty-print data (pydantic models included) as two-space indented JSON."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_none=True, mode="json")
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_filename(source_name: str, kind: str) -> str:
    stem = Path(source_name or "infra").stem or "infra"
    return f"{stem}-{kind}.json"


def build_export(kind: str, parsed: Optional[InfraData], raw: Any) -> Any:
    """Select the artifact for an export kind; ValueError on unknown kinds."""
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Unknown export kind: {kind}. Expected one of {', '.join(EXPORT_KINDS)}")
    if kind == "raw":
        return raw
    infra = parsed or InfraData()
    if kind == "summary":
        return generate_infra_summary(infra)
    return infra
