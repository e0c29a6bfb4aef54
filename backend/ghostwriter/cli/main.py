"""CLI entrypoint for the retrieval core."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import requests
import typer

app = typer.Typer(name="ghw", help="Ghostwriter retrieval command-line interface")

DEFAULT_HOST = "http://127.0.0.1:8000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip("/")
    env_host = os.environ.get("GHW_HOST")
    if env_host:
        return env_host.rstrip("/")
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    url = f"{_resolve_host(host)}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


@app.command()
def ingest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plain-text file to ingest"),
    doc_type: str = typer.Option("content", "--type", help="style or content"),
    project: Optional[str] = typer.Option(None, "--project", help="Owning project id"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Chunk and index a text file."""
    body = {
        "text": path.expanduser().read_text(encoding="utf-8"),
        "type": doc_type,
        "filename": path.name,
        "project_id": project,
    }
    resp = _request("POST", "/ingest", host=host, json=body)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def search(
    q: str = typer.Argument(..., help="Query text"),
    doc_type: str = typer.Option("content", "--type", help="style or content"),
    project: Optional[str] = typer.Option(None, "--project", help="Restrict to one project"),
    k: int = typer.Option(4, "--k", help="Number of results to return"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Run a hybrid search."""
    payload = {"query": q, "type": doc_type, "project_id": project, "k": k}
    resp = _request("POST", "/search", host=host, json=payload)
    typer.echo(json.dumps(resp.json(), indent=2, ensure_ascii=False))


@app.command()
def reindex(host: Optional[str] = typer.Option(None, "--host", help="Override backend host")) -> None:
    """Embed every chunk still missing a vector."""
    resp = _request("POST", "/reindex", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def chunks(
    ids: str = typer.Argument(..., help="Comma-separated chunk ids"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Show stored chunks."""
    resp = _request("GET", "/chunks", host=host, params={"ids": ids})
    typer.echo(json.dumps(resp.json(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
