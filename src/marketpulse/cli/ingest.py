"""Ingest subcommand: run one ingestion cycle."""

from __future__ import annotations

import asyncio
import json

import structlog
import typer

from marketpulse.ingestion.manager import IngestionManager, build_adapters
from marketpulse.models import IngestResult, Source
from marketpulse.storage.repository import DuckDBRepository

log = structlog.get_logger(__name__)

app = typer.Typer(help="Fetch provider markets and append snapshots")


async def _run(manager: IngestionManager, source: Source | None) -> IngestResult:
    try:
        if source is None:
            return await manager.ingest_all()
        return await manager.ingest_one_source(source)
    finally:
        await manager.close()


@app.command("run")
def run(
    ctx: typer.Context,
    source: Source | None = typer.Option(None, "--source", "-s", help="Ingest only this source"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Max markets per source (overrides config)"),
) -> None:
    """Run adapters, upsert markets, append one snapshot per market. Prints the result as JSON."""
    settings = ctx.obj["settings"]
    try:
        with DuckDBRepository.open(settings.db_path) as repo:
            manager = IngestionManager(
                repo,
                build_adapters(settings),
                limit_per_source=limit if limit is not None else settings.limit_per_source,
            )
            result = asyncio.run(_run(manager, source))
    except Exception as e:
        log.error("ingest_failed", error=str(e))
        typer.echo(json.dumps(IngestResult.failed(str(e))))
        raise typer.Exit(1)
    typer.echo(json.dumps(result.to_dict()))
