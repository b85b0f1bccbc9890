"""Markets subcommand: list, features, signals."""

from __future__ import annotations

import json

import typer

from marketpulse.features.engine import FeatureEngine
from marketpulse.storage.repository import DuckDBRepository

app = typer.Typer(help="Inspect tracked markets and their signals")


@app.command("list")
def list_markets(
    ctx: typer.Context,
    status: str | None = typer.Option(None, "--status", help="Only markets with this status (e.g. active)"),
) -> None:
    """List markets in local storage."""
    settings = ctx.obj["settings"]
    with DuckDBRepository.open(settings.db_path) as repo:
        rows = repo.list_markets(status=status)
        for m in rows:
            title = (m.title or "")[:60]
            typer.echo(f"  {m.id}  {m.source.value:<10}  {m.status:<8}  {title}")
        typer.echo(f"Total: {len(rows)} markets")


@app.command("features")
def features(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Internal market id (see 'mpulse markets list')"),
) -> None:
    """Compute features and score for one market without persisting a signal."""
    settings = ctx.obj["settings"]
    with DuckDBRepository.open(settings.db_path) as repo:
        if repo.get_market(market_id) is None:
            typer.echo(f"Unknown market: {market_id}")
            raise typer.Exit(1)
        result = FeatureEngine(repo).compute_features(market_id)
    typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))


@app.command("signals")
def signals(
    ctx: typer.Context,
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market id"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max signals to show"),
) -> None:
    """Show latest persisted signals."""
    settings = ctx.obj["settings"]
    with DuckDBRepository.open(settings.db_path) as repo:
        rows = repo.list_signals(market_id=market, limit=limit)
    for s in rows:
        typer.echo(f"  {s.ts}  {s.market_id}  {s.score:>3}  {s.confidence.value:<4}  {s.explanation}")
    typer.echo(f"Total: {len(rows)} signals")
