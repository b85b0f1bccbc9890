"""Shared fixtures: in-memory repository fake and DuckDB temp database."""

from __future__ import annotations

import itertools
import uuid
from pathlib import Path

import pytest

from marketpulse.models import Market, MarketSignal, MarketSnapshot, NormalizedMarket, Source
from marketpulse.storage.repository import DuckDBRepository

NOW = 1_760_000_000_000  # fixed ms epoch for deterministic windows
HOUR = 60 * 60 * 1000


class InMemoryRepository:
    """MarketRepository fake keeping rows in lists."""

    def __init__(self) -> None:
        self.markets: dict[tuple[Source, str], Market] = {}
        self.snapshots: list[MarketSnapshot] = []
        self.signals: list[MarketSignal] = []
        self._ids = itertools.count(1)

    def upsert_market(self, market: NormalizedMarket, ts: int) -> Market:
        key = (market.source, market.external_id)
        existing = self.markets.get(key)
        if existing is None:
            stored = Market(
                id=str(uuid.uuid4()),
                source=market.source,
                external_id=market.external_id,
                title=market.title,
                url=market.url,
                category=market.category,
                status=market.status,
                created_at=ts,
                updated_at=ts,
            )
        else:
            stored = existing.model_copy(
                update={
                    "title": market.title,
                    "url": market.url,
                    "category": market.category,
                    "status": market.status,
                    "updated_at": ts,
                }
            )
        self.markets[key] = stored
        return stored

    def append_snapshot(self, market_id: str, ts: int, market: NormalizedMarket) -> MarketSnapshot:
        snap = MarketSnapshot(
            id=next(self._ids),
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
        self.snapshots.append(snap)
        return snap

    def query_snapshots_in_window(self, market_id: str, since_ts: int) -> list[MarketSnapshot]:
        rows = [s for s in self.snapshots if s.market_id == market_id and s.ts >= since_ts]
        return sorted(rows, key=lambda s: (s.ts, s.id))

    def find_signal_since(self, market_id: str, since_ts: int) -> MarketSignal | None:
        rows = [s for s in self.signals if s.market_id == market_id and s.ts >= since_ts]
        return max(rows, key=lambda s: s.ts) if rows else None

    def insert_signal(self, signal: MarketSignal) -> None:
        self.signals.append(signal)

    def list_markets(self, status: str | None = None) -> list[Market]:
        return [m for m in self.markets.values() if status is None or m.status == status]

    # Test helpers
    def add_market(self, external_id: str, status: str = "active", source: Source = Source.POLYMARKET) -> Market:
        return self.upsert_market(
            NormalizedMarket(source=source, external_id=external_id, title=external_id, status=status), NOW
        )

    def add_snapshot(
        self,
        market_id: str,
        ts: int,
        probability: float | None = None,
        volume: float | None = None,
    ) -> None:
        self.snapshots.append(
            MarketSnapshot(
                id=next(self._ids),
                market_id=market_id,
                ts=ts,
                probability=probability,
                volume=volume,
            )
        )


def normalized(external_id: str = "m1", source: Source = Source.POLYMARKET, **kwargs) -> NormalizedMarket:
    fields = {"title": f"Market {external_id}", "probability": 0.5, "volume": 100.0}
    fields.update(kwargs)
    return NormalizedMarket(source=source, external_id=external_id, **fields)


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def temp_db(tmp_path: Path):
    repository = DuckDBRepository.open(tmp_path / "test.duckdb")
    yield repository
    repository.close()
