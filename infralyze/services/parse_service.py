"""Single-request parse flow: classify, decode, validate, normalize, describe.

Decoding and validation are separate fault domains: a validator failure
leaves ``validation`` empty but never blocks the normalized result, and a
decode failure becomes ``parseError`` instead of an exception.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from infralyze.ir.normalizer import normalize_to_infra_data
from infralyze.renderers.mermaid_builder import make_mermaid_diagram, render_mermaid_text
from infralyze.schemas import ParseResponse
from infralyze.tools.content_type import content_type_from_extension, detect_content_type
from infralyze.tools.decoder import DecodeError, DecodeResult, decode_content
from infralyze.tools.metadata_analyzer import safe_analyze_metadata
from infralyze.tools.structure_validator import safe_validate_infra_structure
from infralyze.utils.config import settings
from infralyze.utils.file_utils import is_supported_file_type, read_text_file

logger = logging.getLogger(__name__)


def _format_note(filename: str, decoded: DecodeResult) -> Optional[str]:
    by_extension = content_type_from_extension(filename)
    if by_extension == "unknown" or by_extension == decoded.content_type:
        return None
    if decoded.content_type == "yaml":
        return f"Note: File parsed as YAML despite .json extension. {decoded.json_hint or ''}".strip()
    return "Note: File parsed as JSON despite YAML-like extension"


def parse_content(content: str, filename: str, size: Optional[int] = None) -> ParseResponse:
    """Parse uploaded text into a full response. Never raises for bad content."""
    if not is_supported_file_type(filename):
        logger.info("Unrecognized extension for %s, sniffing content", filename)
    declared = detect_content_type(content, filename)
    response = ParseResponse(
        name=filename,
        size=len(content.encode("utf-8")) if size is None else size,
        preview=content[: settings.preview_chars],
        type=declared,
    )

    try:
        decoded = decode_content(content, declared)
    except DecodeError as exc:
        logger.warning("Could not decode %s: %s", filename, exc)
        return response.model_copy(update={"parse_error": str(exc)})

    raw = decoded.tree
    validation = safe_validate_infra_structure(raw)
    parsed = normalize_to_infra_data(raw)
    suggestions = list(validation.suggestions) if validation else []
    note = _format_note(filename, decoded)
    if note:
        suggestions.insert(0, note)

    logger.info(
        "Parsed %s as %s (%s)",
        filename,
        decoded.content_type,
        validation.detected_format if validation else "validation unavailable",
    )
    return response.model_copy(
        update={
            "type": decoded.content_type,
            "parsed": parsed,
            "raw_parsed": raw,
            "validation": validation,
            "suggestions": suggestions,
            "metadata": safe_analyze_metadata(raw),
            "diagram": render_mermaid_text(make_mermaid_diagram(parsed, raw)),
        }
    )


def parse_file(path: str) -> ParseResponse:
    p = Path(path)
    content = read_text_file(path)
    return parse_content(content, p.name, size=p.stat().st_size)
