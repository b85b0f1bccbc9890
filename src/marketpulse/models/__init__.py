"""Canonical schema (Pydantic) - Market, MarketSnapshot, MarketSignal, features, results."""

from marketpulse.models.features import EngineeredFeatures, FeatureResult, ScoreResult
from marketpulse.models.market import (
    Confidence,
    Market,
    MarketSignal,
    MarketSnapshot,
    NormalizedMarket,
    Source,
)
from marketpulse.models.results import ErrorScope, IngestResult, PipelineError, ScoreAllResult

__all__ = [
    "Source",
    "Confidence",
    "NormalizedMarket",
    "Market",
    "MarketSnapshot",
    "MarketSignal",
    "EngineeredFeatures",
    "ScoreResult",
    "FeatureResult",
    "ErrorScope",
    "PipelineError",
    "IngestResult",
    "ScoreAllResult",
]
