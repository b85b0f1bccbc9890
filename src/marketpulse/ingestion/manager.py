"""Ingestion orchestrator - source adapters -> market upsert + snapshot append."""

from __future__ import annotations

import asyncio
import time

import structlog

from marketpulse.config.settings import Settings
from marketpulse.errors import RecordPersistError
from marketpulse.ingestion.base import SourceAdapter
from marketpulse.ingestion.kalshi.client import KalshiAdapter
from marketpulse.ingestion.polymarket.gamma import PolymarketAdapter
from marketpulse.models import ErrorScope, IngestResult, NormalizedMarket, PipelineError, Source
from marketpulse.storage.repository import MarketRepository

log = structlog.get_logger(__name__)

LIMIT_PER_SOURCE = 100


def build_adapters(settings: Settings) -> dict[Source, SourceAdapter]:
    """Adapters for every configured provider."""
    return {
        Source.POLYMARKET: PolymarketAdapter(
            base_url=settings.gamma_api_base,
            page_size=settings.polymarket_page_size,
            timeout=settings.http_timeout_sec,
        ),
        Source.KALSHI: KalshiAdapter(
            base_url=settings.kalshi_api_base,
            page_size=settings.kalshi_page_size,
            timeout=settings.http_timeout_sec,
        ),
    }


class IngestionManager:
    """Runs source adapters concurrently and persists what they return.

    Within one source, records are written sequentially and every snapshot of
    the batch carries the same ingestion timestamp.
    """

    def __init__(
        self,
        repository: MarketRepository,
        adapters: dict[Source, SourceAdapter],
        limit_per_source: int = LIMIT_PER_SOURCE,
    ):
        self.repository = repository
        self.adapters = adapters
        self.limit_per_source = limit_per_source

    def _persist_one(self, market: NormalizedMarket, ts: int) -> None:
        try:
            stored = self.repository.upsert_market(market, ts)
            self.repository.append_snapshot(stored.id, ts, market)
        except Exception as e:
            raise RecordPersistError(market.source.value, market.external_id, str(e)) from e

    async def _ingest_source(self, source: Source) -> tuple[int, list[PipelineError]]:
        adapter = self.adapters[source]
        errors: list[PipelineError] = []
        try:
            markets = await adapter.fetch(self.limit_per_source)
        except Exception as e:
            log.warning("source_fetch_failed", source=source.value, error=str(e))
            return 0, [PipelineError(scope=ErrorScope.SOURCE_FETCH, key=source.value, message=str(e))]

        ts = int(time.time() * 1000)
        count = 0
        for m in markets:
            try:
                self._persist_one(m, ts)
                count += 1
            except RecordPersistError as e:
                log.warning("record_persist_failed", source=e.source, external_id=e.external_id, error=str(e))
                errors.append(
                    PipelineError(
                        scope=ErrorScope.RECORD_PERSIST,
                        key=f"{e.source} {e.external_id}",
                        message=str(e),
                    )
                )
        log.info("ingest_source_done", source=source.value, fetched=len(markets), processed=count, ts=ts)
        return count, errors

    async def ingest_all(self) -> IngestResult:
        """Ingest every configured source; one source failing never affects the others."""
        sources = list(self.adapters)
        outcomes = await asyncio.gather(*(self._ingest_source(s) for s in sources))
        result = IngestResult()
        for source, (count, errors) in zip(sources, outcomes):
            result.by_source[source] = count
            result.errors.extend(errors)
        log.info(
            "ingest_all_done",
            total_processed=result.total_processed,
            errors=len(result.errors),
            success=result.success,
        )
        return result

    async def ingest_one_source(self, source: Source) -> IngestResult:
        """Ingest a single source; other sources report zero."""
        if source not in self.adapters:
            raise KeyError(f"No adapter configured for {source.value}")
        count, errors = await self._ingest_source(source)
        result = IngestResult(errors=errors)
        result.by_source[source] = count
        return result

    async def close(self) -> None:
        for adapter in self.adapters.values():
            await adapter.close()
