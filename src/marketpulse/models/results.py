"""Pipeline result objects and structured error records."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from marketpulse.models.market import Source


class ErrorScope(str, Enum):
    SOURCE_FETCH = "source_fetch"
    RECORD_PERSIST = "record_persist"
    SCORING = "scoring"


class PipelineError(BaseModel):
    """One recorded failure. key is the source, 'SOURCE externalId', or market id depending on scope."""

    scope: ErrorScope
    key: str
    message: str

    def __str__(self) -> str:
        if self.scope == ErrorScope.SOURCE_FETCH:
            return f"{self.key} fetch failed: {self.message}"
        return f"{self.key}: {self.message}"


class IngestResult(BaseModel):
    """Outcome of one ingestion run across one or more sources."""

    by_source: dict[Source, int] = Field(
        default_factory=lambda: {source: 0 for source in Source}
    )
    errors: list[PipelineError] = Field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return sum(self.by_source.values())

    @property
    def success(self) -> bool:
        # Zero processed counts as failure even with no errors (empty provider page).
        return self.total_processed > 0

    def to_dict(self) -> dict[str, Any]:
        """Boundary shape: errors omitted when empty."""
        out: dict[str, Any] = {
            "success": self.success,
            "totalProcessed": self.total_processed,
            "bySource": {source.value: n for source, n in self.by_source.items()},
        }
        if self.errors:
            out["errors"] = [str(e) for e in self.errors]
        return out

    @staticmethod
    def failed(message: str) -> dict[str, Any]:
        """Zeroed-failure body for an invocation that raised."""
        return {
            "success": False,
            "totalProcessed": 0,
            "bySource": {source.value: 0 for source in Source},
            "error": message,
        }


class ScoreAllResult(BaseModel):
    """Outcome of one scoring pass."""

    markets_scored: int = 0
    markets_skipped: int = 0
    errors: list[PipelineError] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.markets_scored > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "marketsScored": self.markets_scored,
            "errors": [str(e) for e in self.errors],
        }

    @staticmethod
    def failed(message: str) -> dict[str, Any]:
        return {
            "success": False,
            "marketsScored": 0,
            "errors": [message],
            "error": message,
        }
