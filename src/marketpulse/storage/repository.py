"""Repository seam between the pipeline and the storage engine."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from marketpulse.models import Market, MarketSignal, MarketSnapshot, NormalizedMarket
from marketpulse.storage import markets, signals, snapshots
from marketpulse.storage.db import get_connection, init_schema

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


class MarketRepository(Protocol):
    """Storage operations used by ingestion and scoring."""

    def upsert_market(self, market: NormalizedMarket, ts: int) -> Market: ...
    def append_snapshot(self, market_id: str, ts: int, market: NormalizedMarket) -> MarketSnapshot: ...
    def query_snapshots_in_window(self, market_id: str, since_ts: int) -> list[MarketSnapshot]: ...
    def find_signal_since(self, market_id: str, since_ts: int) -> MarketSignal | None: ...
    def insert_signal(self, signal: MarketSignal) -> None: ...
    def list_markets(self, status: str | None = None) -> list[Market]: ...


class DuckDBRepository:
    """MarketRepository backed by a DuckDB connection."""

    def __init__(self, conn: DuckDBPyConnection):
        self.conn = conn

    @classmethod
    def open(cls, db_path: str | Path, read_only: bool = False) -> DuckDBRepository:
        conn = get_connection(db_path, read_only=read_only)
        if not read_only:
            init_schema(conn)
        return cls(conn)

    def upsert_market(self, market: NormalizedMarket, ts: int) -> Market:
        return markets.upsert_market(self.conn, market, ts)

    def append_snapshot(self, market_id: str, ts: int, market: NormalizedMarket) -> MarketSnapshot:
        return snapshots.append_snapshot(self.conn, market_id, ts, market)

    def query_snapshots_in_window(self, market_id: str, since_ts: int) -> list[MarketSnapshot]:
        return snapshots.query_snapshots_in_window(self.conn, market_id, since_ts)

    def find_signal_since(self, market_id: str, since_ts: int) -> MarketSignal | None:
        return signals.find_signal_since(self.conn, market_id, since_ts)

    def insert_signal(self, signal: MarketSignal) -> None:
        signals.insert_signal(self.conn, signal)

    def list_markets(self, status: str | None = None) -> list[Market]:
        return markets.list_markets(self.conn, status=status)

    def get_market(self, market_id: str) -> Market | None:
        return markets.get_market(self.conn, market_id)

    def list_signals(self, market_id: str | None = None, limit: int = 50) -> list[MarketSignal]:
        return signals.list_signals(self.conn, market_id=market_id, limit=limit)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> DuckDBRepository:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
