"""Market identity persistence."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from marketpulse.models import Market, NormalizedMarket

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = ["id", "source", "external_id", "title", "url", "category", "status", "created_at", "updated_at"]
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM markets"


def _row_to_market(row: tuple[Any, ...]) -> Market:
    return Market(**dict(zip(_COLUMNS, row)))


def upsert_market(conn: DuckDBPyConnection, market: NormalizedMarket, ts: int) -> Market:
    """Create the market or refresh its mutable fields, keyed by (source, external_id).

    The conditional write is a single statement so overlapping ingestion runs
    cannot create duplicate identities.
    """
    conn.execute(
        """
        INSERT INTO markets (id, source, external_id, title, url, category, status, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (source, external_id) DO UPDATE SET
            title = excluded.title,
            url = excluded.url,
            category = excluded.category,
            status = excluded.status,
            updated_at = excluded.updated_at
        """,
        [
            str(uuid.uuid4()),
            market.source.value,
            market.external_id,
            market.title,
            market.url,
            market.category,
            market.status or "active",
            ts,
            ts,
        ],
    )
    row = conn.execute(
        f"{_SELECT} WHERE source = ? AND external_id = ?",
        [market.source.value, market.external_id],
    ).fetchone()
    return _row_to_market(row)


def get_market(conn: DuckDBPyConnection, market_id: str) -> Market | None:
    row = conn.execute(f"{_SELECT} WHERE id = ?", [market_id]).fetchone()
    return _row_to_market(row) if row else None


def list_markets(conn: DuckDBPyConnection, status: str | None = None) -> list[Market]:
    """List markets, optionally filtered by exact status."""
    if status is not None:
        rows = conn.execute(f"{_SELECT} WHERE status = ? ORDER BY created_at, id", [status]).fetchall()
    else:
        rows = conn.execute(f"{_SELECT} ORDER BY created_at, id").fetchall()
    return [_row_to_market(r) for r in rows]
