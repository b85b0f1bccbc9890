"""Append and query market snapshots."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from marketpulse.models import MarketSnapshot, NormalizedMarket

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def append_snapshot(
    conn: DuckDBPyConnection,
    market_id: str,
    ts: int,
    market: NormalizedMarket,
) -> MarketSnapshot:
    """Append one market_snapshots row. Never deduplicates."""
    snapshot = MarketSnapshot(
        market_id=market_id,
        ts=ts,
        probability=market.probability,
        price_yes=market.price_yes,
        price_no=market.price_no,
        volume=market.volume,
        liquidity=market.liquidity,
        spread=market.spread,
        raw=market.raw,
    )
    conn.execute(
        """
        INSERT INTO market_snapshots (market_id, ts, probability, price_yes, price_no, volume, liquidity, spread, raw)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            snapshot.market_id,
            snapshot.ts,
            snapshot.probability,
            snapshot.price_yes,
            snapshot.price_no,
            snapshot.volume,
            snapshot.liquidity,
            snapshot.spread,
            json.dumps(snapshot.raw, default=str) if snapshot.raw is not None else None,
        ],
    )
    return snapshot


def query_snapshots_in_window(
    conn: DuckDBPyConnection,
    market_id: str,
    since_ts: int,
) -> list[MarketSnapshot]:
    """Snapshots with ts >= since_ts, ascending by ts (insertion order breaks ties)."""
    rows = conn.execute(
        """
        SELECT id, market_id, ts, probability, price_yes, price_no, volume, liquidity, spread, raw
        FROM market_snapshots
        WHERE market_id = ? AND ts >= ?
        ORDER BY ts, id
        """,
        [market_id, since_ts],
    ).fetchall()
    out = []
    for r in rows:
        raw = r[9]
        out.append(
            MarketSnapshot(
                id=r[0],
                market_id=r[1],
                ts=r[2],
                probability=r[3],
                price_yes=r[4],
                price_no=r[5],
                volume=r[6],
                liquidity=r[7],
                spread=r[8],
                raw=json.loads(raw) if isinstance(raw, str) else raw,
            )
        )
    return out


def count_snapshots(conn: DuckDBPyConnection, market_id: str | None = None) -> int:
    if market_id:
        return conn.execute("SELECT COUNT(*) FROM market_snapshots WHERE market_id = ?", [market_id]).fetchone()[0]
    return conn.execute("SELECT COUNT(*) FROM market_snapshots").fetchone()[0]
