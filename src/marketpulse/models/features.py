"""EngineeredFeatures and scoring outputs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from marketpulse.models.market import Confidence


class EngineeredFeatures(BaseModel):
    """Windowed statistics over a market's snapshot history."""

    chg_1h: float | None = None
    chg_24h: float | None = None
    chg_7d: float | None = None
    vol_24h: float | None = None
    vol_7d: float | None = None
    volume_24h: float | None = None
    volume_7d: float | None = None
    snapshots_count_24h: int = 0
    snapshots_count_7d: int = 0
    reversal_risk: float = Field(0.0, ge=0, le=1)
    current_probability: float | None = Field(None, ge=0, le=1)


class ScoreResult(BaseModel):
    """Scorer output: 0-100 score, confidence tier, human-readable explanation."""

    score: int = Field(..., ge=0, le=100)
    confidence: Confidence
    explanation: str


class FeatureResult(ScoreResult):
    """Features plus the score derived from them."""

    features: EngineeredFeatures
