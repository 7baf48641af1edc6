"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from infralyze.models.infra import ConfigMetadata, InfraData, ValidationResult


class ParseResponse(BaseModel):
    name: str
    size: int
    preview: str
    type: str
    parsed: Optional[InfraData] = None
    raw_parsed: Any = Field(default=None, alias="rawParsed")
    parse_error: Optional[str] = Field(default=None, alias="parseError")
    validation: Optional[ValidationResult] = None
    suggestions: List[str] = Field(default_factory=list)
    metadata: Optional[ConfigMetadata] = None
    diagram: Optional[str] = None

    model_config = {
        "populate_by_name": True,
    }

    def to_payload(self) -> dict:
        """JSON-ready dict; empty canonical sections are omitted rather than null."""
        payload = self.model_dump(by_alias=True, mode="json")
        if self.parsed is not None:
            payload["parsed"] = self.parsed.model_dump(by_alias=True, exclude_none=True, mode="json")
        if self.validation is not None:
            payload["validation"] = self.validation.model_dump(by_alias=True, exclude_none=True, mode="json")
        return payload


class DiagramResponse(BaseModel):
    format: str = "mermaid"
    lines: List[str]
    text: str


class ErrorResponse(BaseModel):
    error: str
