"""REST API server."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.responses import JSONResponse, Response

from infralyze import __version__
from infralyze.models.infra import InfraData
from infralyze.renderers.mermaid_builder import make_mermaid_diagram, render_mermaid_text
from infralyze.schemas import DiagramResponse
from infralyze.services.export_service import EXPORT_KINDS, build_export, export_as_json, export_filename
from infralyze.services.parse_service import parse_content
from infralyze.utils.config import settings
from infralyze.utils.file_utils import decode_upload, format_file_size

logger = logging.getLogger(__name__)

app = FastAPI(title="Infralyze API", version=__version__)


@app.get("/health")
async def health():
    return {"status": "ok"}


async def _read_upload(file: Optional[UploadFile]):
    """Return (parse response, None) or (None, error response)."""
    if file is None or not file.filename:
        return None, JSONResponse(status_code=400, content={"error": "No file uploaded"})
    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        return None, JSONResponse(
            status_code=413,
            content={
                "error": f"File too large ({format_file_size(len(data))}); "
                f"limit is {format_file_size(settings.max_upload_bytes)}"
            },
        )
    return parse_content(decode_upload(data), file.filename, size=len(data)), None


@app.post("/api/parse")
async def parse_upload(file: Optional[UploadFile] = File(None)):
    """Parse an uploaded JSON/YAML config into normalized infrastructure data."""
    result, error = await _read_upload(file)
    if error is not None:
        return error
    return JSONResponse(content=result.to_payload())


@app.post("/api/diagram", response_model=DiagramResponse)
def diagram(payload: dict):
    """Build the Mermaid description for already-normalized data.

    Expected payload: { "parsed": {...}, "rawParsed": optional }
    """
    parsed = (payload or {}).get("parsed")
    if not isinstance(parsed, dict):
        return JSONResponse(status_code=400, content={"error": "Missing or invalid 'parsed' in payload"})
    try:
        infra = InfraData.model_validate(parsed)
    except ValueError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    lines = make_mermaid_diagram(infra, payload.get("rawParsed"))
    return DiagramResponse(lines=lines, text=render_mermaid_text(lines))


@app.post("/api/export/{kind}")
async def export(kind: str, file: Optional[UploadFile] = File(None)):
    """Parse an upload and return one artifact as a downloadable JSON file."""
    if kind not in EXPORT_KINDS:
        return JSONResponse(status_code=400, content={"error": f"Invalid export kind: {kind}"})
    result, error = await _read_upload(file)
    if error is not None:
        return error
    if result.parse_error:
        return JSONResponse(status_code=422, content={"error": result.parse_error})
    body = export_as_json(build_export(kind, result.parsed, result.raw_parsed))
    filename = export_filename(result.name, kind)
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
