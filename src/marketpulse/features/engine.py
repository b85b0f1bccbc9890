"""Windowed features over a market's snapshot history - deltas, volatility, volume flow, reversal risk."""

from __future__ import annotations

import math
import time
from typing import Sequence

import structlog

from marketpulse.models import Confidence, EngineeredFeatures, FeatureResult, MarketSnapshot
from marketpulse.scoring.scorer import HeuristicScorer, Scorer
from marketpulse.storage.repository import MarketRepository

log = structlog.get_logger(__name__)

MS_1H = 60 * 60 * 1000
MS_24H = 24 * MS_1H
MS_7D = 7 * MS_24H

# Reversal risk: moves beyond this are suspect when thinly traded or sparsely sampled
REVERSAL_MOVE_THRESHOLD = 0.10
REVERSAL_VOLUME_SCALE = 10_000.0
REVERSAL_COUNT_SCALE = 10.0

EMPTY_HISTORY_EXPLANATION = "No snapshots available; cannot compute features."


def clamp_probability(p: float | None) -> float | None:
    """Clamp into [0, 1]; non-finite or missing -> None."""
    if p is None or not math.isfinite(p):
        return None
    return max(0.0, min(1.0, p))


def probability_at(snapshots: Sequence[MarketSnapshot], target_ts: int) -> float | None:
    """Clamped probability of the snapshot nearest target_ts. Earliest wins ties; no interpolation."""
    best: MarketSnapshot | None = None
    best_diff = math.inf
    for s in snapshots:
        if s.probability is None:
            continue
        diff = abs(s.ts - target_ts)
        if diff < best_diff:
            best_diff = diff
            best = s
    return clamp_probability(best.probability) if best is not None else None


def volatility(probs: Sequence[float | None]) -> float | None:
    """Population std dev of first differences of the valid probabilities."""
    valid = [p for p in probs if p is not None and math.isfinite(p)]
    if len(valid) < 2:
        return None
    changes = [b - a for a, b in zip(valid, valid[1:])]
    mean = sum(changes) / len(changes)
    var = sum((c - mean) ** 2 for c in changes) / len(changes)
    return math.sqrt(var)


def volume_delta(snapshots: Sequence[MarketSnapshot], now: int, window_ms: int) -> float | None:
    """Latest minus earliest cumulative volume inside the window, floored at 0."""
    cutoff = now - window_ms
    points = sorted(
        (s for s in snapshots if cutoff <= s.ts <= now and s.volume is not None and math.isfinite(s.volume)),
        key=lambda s: s.ts,
    )
    if len(points) < 2:
        return None
    return max(0.0, points[-1].volume - points[0].volume)


def reversal_risk(chg_24h: float | None, volume_24h: float | None, count_24h: int) -> float:
    if chg_24h is None or abs(chg_24h) <= REVERSAL_MOVE_THRESHOLD:
        return 0.0
    vol_norm = min(1.0, volume_24h / REVERSAL_VOLUME_SCALE) if volume_24h is not None and volume_24h > 0 else 0.0
    count_norm = min(1.0, count_24h / REVERSAL_COUNT_SCALE)
    return min(1.0, 0.6 * (1 - vol_norm) + 0.4 * (1 - count_norm))


def _delta(current: float | None, past: float | None) -> float | None:
    if current is None or past is None:
        return None
    return current - past


def build_features(snapshots: Sequence[MarketSnapshot], now: int) -> EngineeredFeatures:
    """Compute features from ascending 7-day history. Caller handles the empty case."""
    current = clamp_probability(snapshots[-1].probability)
    chg_1h = _delta(current, probability_at(snapshots, now - MS_1H))
    chg_24h = _delta(current, probability_at(snapshots, now - MS_24H))
    chg_7d = _delta(current, probability_at(snapshots, now - MS_7D))

    last_24h = [s for s in snapshots if s.ts >= now - MS_24H]
    vol_24h = volatility([clamp_probability(s.probability) for s in last_24h])
    vol_7d = volatility([clamp_probability(s.probability) for s in snapshots])

    volume_24h = volume_delta(snapshots, now, MS_24H)
    volume_7d = volume_delta(snapshots, now, MS_7D)

    return EngineeredFeatures(
        chg_1h=chg_1h,
        chg_24h=chg_24h,
        chg_7d=chg_7d,
        vol_24h=vol_24h,
        vol_7d=vol_7d,
        volume_24h=volume_24h,
        volume_7d=volume_7d,
        snapshots_count_24h=len(last_24h),
        snapshots_count_7d=len(snapshots),
        reversal_risk=reversal_risk(chg_24h, volume_24h, len(last_24h)),
        current_probability=current,
    )


def empty_history_result() -> FeatureResult:
    return FeatureResult(
        features=EngineeredFeatures(reversal_risk=0.5),
        score=50,
        confidence=Confidence.LOW,
        explanation=EMPTY_HISTORY_EXPLANATION,
    )


class FeatureEngine:
    """Loads trailing 7-day snapshots for a market and scores the derived features."""

    def __init__(self, repository: MarketRepository, scorer: Scorer | None = None):
        self.repository = repository
        self.scorer = scorer or HeuristicScorer()

    def compute_features(self, market_id: str, now: int | None = None) -> FeatureResult:
        now = now if now is not None else int(time.time() * 1000)
        snapshots = self.repository.query_snapshots_in_window(market_id, now - MS_7D)
        if not snapshots:
            log.debug("features_empty_history", market_id=market_id)
            return empty_history_result()
        features = build_features(snapshots, now)
        scored = self.scorer.score_features(features)
        return FeatureResult(
            features=features,
            score=scored.score,
            confidence=scored.confidence,
            explanation=scored.explanation,
        )
