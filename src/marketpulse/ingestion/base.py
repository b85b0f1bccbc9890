"""Abstract source adapter for pluggable providers (Polymarket, Kalshi, ...)."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any

import httpx

from marketpulse.errors import SourceFetchError
from marketpulse.models import NormalizedMarket, Source


def to_float(value: Any) -> float | None:
    """Best-effort numeric parse. Missing, malformed or non-finite -> None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def to_text(value: Any) -> str | None:
    """Provider text field as str. Missing or empty -> None."""
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


class SourceAdapter(ABC):
    """Fetch one provider's markets and normalize them. Implement for each provider.

    fetch() either returns up to `limit` records or raises SourceFetchError;
    a failed page aborts the whole call.
    """

    source: Source

    def __init__(self, http_client: httpx.AsyncClient | None = None, timeout: float = 30.0):
        self._client = http_client
        self._owns_client = http_client is None
        self.timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, headers={"Accept": "application/json"})
        return self._client

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET url and decode JSON, mapping every failure to SourceFetchError."""
        client = self._get_client()
        try:
            resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise SourceFetchError(self.source.value, f"{type(e).__name__}: {e}") from e
        if not resp.is_success:
            raise SourceFetchError(
                self.source.value,
                f"{self.source.value.title()} API error: {resp.status_code} {resp.reason_phrase}",
            )
        try:
            return resp.json()
        except ValueError as e:
            raise SourceFetchError(self.source.value, f"invalid JSON body: {e}") from e

    @abstractmethod
    async def fetch(self, limit: int = 100) -> list[NormalizedMarket]:
        """Return up to `limit` normalized markets."""
        ...

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
