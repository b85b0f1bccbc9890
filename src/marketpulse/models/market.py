"""Market, MarketSnapshot, MarketSignal - canonical entities."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Source(str, Enum):
    """Provider tag for a tracked market."""

    POLYMARKET = "POLYMARKET"
    KALSHI = "KALSHI"


class Confidence(str, Enum):
    """How much snapshot history backs a score."""

    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


class NormalizedMarket(BaseModel):
    """Provider payload translated into the common shape. Numeric fields are best-effort."""

    source: Source
    external_id: str
    title: str
    url: str | None = None
    category: str | None = None
    status: str = "active"
    probability: float | None = None
    price_yes: float | None = None
    price_no: float | None = None
    volume: float | None = None
    liquidity: float | None = None
    spread: float | None = None
    raw: dict[str, Any] | None = None


class Market(BaseModel):
    """Tracked market identity. (source, external_id) is unique."""

    id: str
    source: Source
    external_id: str
    title: str = ""
    url: str | None = None
    category: str | None = None
    status: str = "active"
    created_at: int  # ms epoch
    updated_at: int  # ms epoch


class MarketSnapshot(BaseModel):
    """One append-only observation of a market. Probability is not range-checked at capture."""

    id: int | None = None
    market_id: str
    ts: int  # ms epoch
    probability: float | None = None
    price_yes: float | None = None
    price_no: float | None = None
    volume: float | None = None
    liquidity: float | None = None
    spread: float | None = None
    raw: dict[str, Any] | None = None


class MarketSignal(BaseModel):
    """Persisted scoring result for a market at a point in time."""

    id: int | None = None
    market_id: str
    ts: int  # ms epoch
    score: int = Field(..., ge=0, le=100)
    confidence: Confidence
    explanation: str
    features: dict[str, Any] = Field(default_factory=dict)
