"""CLI interface."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from infralyze import __version__
from infralyze.renderers.mermaid_builder import make_mermaid_diagram, render_mermaid_text
from infralyze.schemas import ParseResponse
from infralyze.services.export_service import EXPORT_KINDS, build_export, export_as_json, export_filename
from infralyze.services.parse_service import parse_file
from infralyze.utils.config import settings
from infralyze.utils.file_utils import ensure_dir

app = typer.Typer(add_completion=False, help="Parse infrastructure configs and describe them as diagrams.")


def _load(file: Path) -> ParseResponse:
    if not file.exists() or file.is_dir():
        raise typer.BadParameter(f"File not found: {file}")
    if file.stat().st_size > settings.max_upload_bytes:
        raise typer.BadParameter(f"File exceeds {settings.max_upload_bytes} bytes: {file}")
    return parse_file(str(file))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def parse(
    file: Path = typer.Argument(..., help="JSON or YAML config file."),
    raw: bool = typer.Option(False, "--raw", help="Include the decoded tree."),
):
    """Print the normalized parse result as JSON."""
    result = _load(file)
    payload = result.to_payload()
    if not raw:
        payload.pop("rawParsed", None)
    typer.echo(json.dumps(payload, indent=2))
    if result.parse_error:
        raise typer.Exit(code=1)


@app.command()
def diagram(
    file: Path = typer.Argument(..., help="JSON or YAML config file."),
    direction: Optional[str] = typer.Option(None, "--direction", help="Mermaid direction (TD, LR, ...)."),
):
    """Print the Mermaid flowchart description."""
    result = _load(file)
    if result.parse_error:
        typer.echo(result.parse_error, err=True)
        raise typer.Exit(code=1)
    typer.echo(render_mermaid_text(make_mermaid_diagram(result.parsed, result.raw_parsed, direction)))


@app.command()
def summary(file: Path = typer.Argument(..., help="JSON or YAML config file.")):
    """Print component counts and the distinct types/runtimes found."""
    result = _load(file)
    if result.parse_error:
        typer.echo(result.parse_error, err=True)
        raise typer.Exit(code=1)
    typer.echo(export_as_json(build_export("summary", result.parsed, result.raw_parsed)))


@app.command()
def export(
    file: Path = typer.Argument(..., help="JSON or YAML config file."),
    kind: str = typer.Option("parsed", "--kind", "-k", help=f"One of: {', '.join(EXPORT_KINDS)}."),
    out_dir: Optional[str] = typer.Option(None, "--out-dir", help="Directory for the exported file."),
):
    """Write the parsed, raw or summary view as a pretty-printed JSON file."""
    if kind not in EXPORT_KINDS:
        raise typer.BadParameter(f"--kind must be one of: {', '.join(EXPORT_KINDS)}")
    result = _load(file)
    if result.parse_error:
        typer.echo(result.parse_error, err=True)
        raise typer.Exit(code=1)
    target = ensure_dir(out_dir or settings.output_dir) / export_filename(result.name, kind)
    target.write_text(export_as_json(build_export(kind, result.parsed, result.raw_parsed)), encoding="utf-8")
    typer.echo(f"wrote {target}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("infralyze.server:app", host=host, port=port)


@app.command()
def version():
    """Print version and exit."""
    typer.echo(__version__)


if __name__ == "__main__":
    app()
