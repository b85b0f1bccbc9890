"""Scoring pass over tracked markets, gated by a per-market signal cooldown."""

from __future__ import annotations

import time

import structlog

from marketpulse.errors import ScoringError
from marketpulse.features.engine import FeatureEngine
from marketpulse.models import ErrorScope, Market, MarketSignal, PipelineError, ScoreAllResult
from marketpulse.storage.repository import MarketRepository

log = structlog.get_logger(__name__)

SIGNAL_COOLDOWN_SEC = 10 * 60


class ScoringManager:
    """Feature engine -> scorer -> persisted MarketSignal, one market at a time.

    A market with a signal inside the cooldown window is skipped; it becomes
    eligible again once the window elapses.
    """

    def __init__(
        self,
        repository: MarketRepository,
        engine: FeatureEngine | None = None,
        cooldown_sec: int = SIGNAL_COOLDOWN_SEC,
    ):
        self.repository = repository
        self.engine = engine or FeatureEngine(repository)
        self.cooldown_ms = cooldown_sec * 1000

    def in_cooldown(self, market_id: str, now: int) -> bool:
        return self.repository.find_signal_since(market_id, now - self.cooldown_ms) is not None

    def _score_market(self, market: Market, now: int) -> None:
        try:
            result = self.engine.compute_features(market.id, now=now)
            self.repository.insert_signal(
                MarketSignal(
                    market_id=market.id,
                    ts=now,
                    score=result.score,
                    confidence=result.confidence,
                    explanation=result.explanation,
                    features=result.features.model_dump(),
                )
            )
        except Exception as e:
            raise ScoringError(market.id, str(e)) from e
        log.debug("market_scored", market_id=market.id, score=result.score, confidence=result.confidence.value)

    def score_all_markets(self, active_only: bool = True, now: int | None = None) -> ScoreAllResult:
        """Score every eligible market. Per-market failures are recorded, never raised."""
        now = now if now is not None else int(time.time() * 1000)
        markets = self.repository.list_markets(status="active" if active_only else None)
        result = ScoreAllResult()
        for market in markets:
            try:
                if self.in_cooldown(market.id, now):
                    result.markets_skipped += 1
                    log.debug("scoring_skipped_cooldown", market_id=market.id)
                    continue
                self._score_market(market, now)
                result.markets_scored += 1
            except ScoringError as e:
                log.warning("scoring_failed", market_id=e.market_id, error=str(e))
                result.errors.append(PipelineError(scope=ErrorScope.SCORING, key=e.market_id, message=str(e)))
            except Exception as e:
                # Cooldown lookup failed; treat like any other per-market failure
                log.warning("scoring_failed", market_id=market.id, error=str(e))
                result.errors.append(PipelineError(scope=ErrorScope.SCORING, key=market.id, message=str(e)))
        log.info(
            "score_all_done",
            candidates=len(markets),
            scored=result.markets_scored,
            skipped_cooldown=result.markets_skipped,
            errors=len(result.errors),
        )
        return result
