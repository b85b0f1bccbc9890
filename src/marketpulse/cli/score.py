"""Score subcommand: run one scoring pass."""

from __future__ import annotations

import json

import structlog
import typer

from marketpulse.models import ScoreAllResult
from marketpulse.scoring.runner import ScoringManager
from marketpulse.storage.repository import DuckDBRepository

log = structlog.get_logger(__name__)

app = typer.Typer(help="Compute features and persist signals")


@app.command("run")
def run(
    ctx: typer.Context,
    include_inactive: bool = typer.Option(False, "--all", help="Score every market, not only active ones"),
) -> None:
    """Score markets outside their cooldown window. Prints the result as JSON."""
    settings = ctx.obj["settings"]
    active_only = settings.score_active_only and not include_inactive
    try:
        with DuckDBRepository.open(settings.db_path) as repo:
            manager = ScoringManager(repo, cooldown_sec=settings.signal_cooldown_sec)
            result = manager.score_all_markets(active_only=active_only)
    except Exception as e:
        log.error("score_failed", error=str(e))
        typer.echo(json.dumps(ScoreAllResult.failed(str(e))))
        raise typer.Exit(1)
    typer.echo(json.dumps(result.to_dict()))
