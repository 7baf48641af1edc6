"""Canonical infrastructure model (framework-agnostic)."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class Service(BaseModel):
    name: str
    type: str = "unknown"
    runtime: Optional[str] = None
    build_command: Optional[str] = Field(default=None, alias="buildCommand")
    start_command: Optional[str] = Field(default=None, alias="startCommand")
    root_dir: Optional[str] = Field(default=None, alias="rootDir")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class Database(BaseModel):
    name: str
    type: str = "database"
    version: Optional[str] = None
    host: Optional[str] = None
    port: Optional[Union[int, float]] = None

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class InfraData(BaseModel):
    """Normalized {services, databases, environment} view of a config file.

    A section is ``None`` when the source had no signal for it; an empty list
    means the signal was there but held no entries.
    """

    services: Optional[List[Service]] = None
    databases: Optional[List[Database]] = None
    environment: Optional[Dict[str, str]] = None

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    def is_empty(self) -> bool:
        return self.services is None and self.databases is None and self.environment is None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValidationResult(BaseModel):
    is_valid: bool = Field(..., alias="isValid")
    confidence: Confidence
    suggestions: List[str] = Field(default_factory=list)
    detected_format: Optional[str] = Field(default=None, alias="detectedFormat")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class ConfigMetadata(BaseModel):
    total_properties: int = Field(..., alias="totalProperties")
    has_nesting: bool = Field(..., alias="hasNesting")
    max_depth: int = Field(..., alias="maxDepth")
    sensitive_keys: List[str] = Field(default_factory=list, alias="sensitiveKeys")
    complexity: str
    recommendations: List[str] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class InfraSummaryDetails(BaseModel):
    service_types: List[str] = Field(default_factory=list, alias="serviceTypes")
    database_types: List[str] = Field(default_factory=list, alias="databaseTypes")
    runtimes: List[str] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
    }


class InfraSummary(BaseModel):
    services: int = 0
    databases: int = 0
    environments: int = 0
    total_components: int = Field(default=0, alias="totalComponents")
    details: InfraSummaryDetails = Field(default_factory=InfraSummaryDetails)

    model_config = {
        "populate_by_name": True,
    }
