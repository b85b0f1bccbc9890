"""Pipeline exception taxonomy."""

from __future__ import annotations


class MarketPulseError(Exception):
    """Base for pipeline errors."""


class SourceFetchError(MarketPulseError):
    """A provider call failed: non-2xx, transport error, or malformed top-level body."""

    def __init__(self, source: str, message: str):
        super().__init__(message)
        self.source = source


class RecordPersistError(MarketPulseError):
    """Upsert or snapshot append failed for one normalized market."""

    def __init__(self, source: str, external_id: str, message: str):
        super().__init__(message)
        self.source = source
        self.external_id = external_id


class ScoringError(MarketPulseError):
    """Feature computation or signal persistence failed for one market."""

    def __init__(self, market_id: str, message: str):
        super().__init__(message)
        self.market_id = market_id
