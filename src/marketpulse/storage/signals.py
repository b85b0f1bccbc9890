"""Market signal persistence and cooldown lookup."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from marketpulse.models import MarketSignal

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_SELECT = "SELECT id, market_id, ts, score, confidence, explanation, features FROM market_signals"


def _row_to_signal(r: tuple[Any, ...]) -> MarketSignal:
    features = r[6]
    return MarketSignal(
        id=r[0],
        market_id=r[1],
        ts=r[2],
        score=r[3],
        confidence=r[4],
        explanation=r[5],
        features=json.loads(features) if isinstance(features, str) else (features or {}),
    )


def insert_signal(conn: DuckDBPyConnection, signal: MarketSignal) -> None:
    """Append one market_signals row."""
    conn.execute(
        """
        INSERT INTO market_signals (market_id, ts, score, confidence, explanation, features)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            signal.market_id,
            signal.ts,
            signal.score,
            signal.confidence.value,
            signal.explanation,
            json.dumps(signal.features),
        ],
    )


def find_signal_since(conn: DuckDBPyConnection, market_id: str, since_ts: int) -> MarketSignal | None:
    """Most recent signal for market with ts >= since_ts, if any."""
    row = conn.execute(
        f"{_SELECT} WHERE market_id = ? AND ts >= ? ORDER BY ts DESC, id DESC LIMIT 1",
        [market_id, since_ts],
    ).fetchone()
    return _row_to_signal(row) if row else None


def list_signals(conn: DuckDBPyConnection, market_id: str | None = None, limit: int = 50) -> list[MarketSignal]:
    """Latest signals first, optionally for one market."""
    if market_id:
        rows = conn.execute(
            f"{_SELECT} WHERE market_id = ? ORDER BY ts DESC, id DESC LIMIT ?", [market_id, limit]
        ).fetchall()
    else:
        rows = conn.execute(f"{_SELECT} ORDER BY ts DESC, id DESC LIMIT ?", [limit]).fetchall()
    return [_row_to_signal(r) for r in rows]
