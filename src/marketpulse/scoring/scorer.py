"""Scorer interface and the heuristic implementation.

A Scorer maps EngineeredFeatures to a ScoreResult with no I/O. A model-backed
scorer can replace HeuristicScorer without touching the feature engine or the
scoring runner.
"""

from __future__ import annotations

import math
from typing import Protocol

from marketpulse.models import Confidence, EngineeredFeatures, ScoreResult

NEUTRAL_SCORE = 50
INSUFFICIENT_DATA = "insufficient data"


class Scorer(Protocol):
    def score_features(self, features: EngineeredFeatures) -> ScoreResult: ...


def confidence_for(features: EngineeredFeatures) -> Confidence:
    """Confidence tier from snapshot density."""
    if features.snapshots_count_7d >= 20 and features.snapshots_count_24h >= 5:
        return Confidence.HIGH
    if features.snapshots_count_7d >= 5:
        return Confidence.MED
    return Confidence.LOW


def score_features(features: EngineeredFeatures) -> ScoreResult:
    """Heuristic 0-100 score starting from a neutral 50."""
    confidence = confidence_for(features)
    score = NEUTRAL_SCORE
    parts: list[str] = []

    p = features.current_probability
    if p is not None:
        if p > 0.7:
            score += 10
            parts.append("high probability")
        elif p < 0.3:
            score -= 10
            parts.append("low probability")

    chg = features.chg_24h
    if chg is not None and abs(chg) > 0.05:
        score += int(math.copysign(5, chg))
        parts.append(f"24h chg {chg * 100:.1f}%")

    if features.vol_24h is not None and features.vol_24h > 0.05:
        score -= 5
        parts.append("high volatility")

    if features.reversal_risk > 0.5:
        score -= 10
        parts.append("elevated reversal risk")

    if confidence == Confidence.HIGH:
        score += 5
    elif confidence == Confidence.LOW:
        score -= 5

    score = max(0, min(100, score))
    return ScoreResult(
        score=score,
        confidence=confidence,
        explanation="; ".join(parts) if parts else INSUFFICIENT_DATA,
    )


class HeuristicScorer:
    """Default Scorer backed by score_features()."""

    def score_features(self, features: EngineeredFeatures) -> ScoreResult:
        return score_features(features)
