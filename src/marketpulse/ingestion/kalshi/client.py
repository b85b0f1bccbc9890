"""Kalshi Trade API v2 adapter - flat market list, cursor pagination.

Price fields arrive either as integer cents (yes_bid, last_price, ...) or as
decimal-dollar strings (yes_bid_dollars, last_price_dollars, ...). Cents win
when both are present.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from marketpulse.errors import SourceFetchError
from marketpulse.ingestion.base import SourceAdapter, to_float, to_text
from marketpulse.models import NormalizedMarket, Source

log = structlog.get_logger(__name__)

KALSHI_API_BASE = "https://api.elections.kalshi.com/trade-api/v2"
KALSHI_WEB = "https://kalshi.com"
MAX_PAGE_SIZE = 200


def cents_to_decimal(value: Any) -> float | None:
    cents = to_float(value)
    return cents / 100 if cents is not None else None


def _price(raw: dict[str, Any], field: str) -> float | None:
    """Decimal price from `<field>` cents or `<field>_dollars`."""
    if raw.get(field) is not None:
        return cents_to_decimal(raw.get(field))
    return to_float(raw.get(f"{field}_dollars"))


def _first(*values: float | None) -> float | None:
    for v in values:
        if v is not None:
            return v
    return None


def parse_market(raw: dict[str, Any]) -> NormalizedMarket:
    """Convert a Kalshi market object to NormalizedMarket."""
    ticker = to_text(raw.get("ticker")) or ""
    last_price = _price(raw, "last_price")
    yes_bid = _price(raw, "yes_bid")
    yes_ask = _price(raw, "yes_ask")
    no_bid = _price(raw, "no_bid")
    no_ask = _price(raw, "no_ask")
    spread = yes_ask - yes_bid if yes_bid is not None and yes_ask is not None else None
    volume = _first(to_float(raw.get("volume")), to_float(raw.get("volume_fp")))
    liquidity = _first(to_float(raw.get("liquidity")), to_float(raw.get("liquidity_dollars")))

    return NormalizedMarket(
        source=Source.KALSHI,
        external_id=ticker,
        title=to_text(raw.get("title")) or to_text(raw.get("subtitle")) or ticker,
        url=f"{KALSHI_WEB}/markets/{to_text(raw.get('event_ticker')) or ticker}",
        category=to_text(raw.get("category")),
        status=to_text(raw.get("status")) or "active",
        probability=last_price,
        price_yes=_first(last_price, yes_bid, yes_ask),
        price_no=_first(no_bid, no_ask, 1 - last_price if last_price is not None else None),
        volume=volume,
        liquidity=liquidity,
        spread=spread,
        raw=raw,
    )


class KalshiAdapter(SourceAdapter):
    """Cursor-paginated /markets crawl filtered to open markets."""

    source = Source.KALSHI

    def __init__(
        self,
        base_url: str = KALSHI_API_BASE,
        page_size: int = MAX_PAGE_SIZE,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.page_size = min(page_size, MAX_PAGE_SIZE)

    async def fetch(self, limit: int = 100) -> list[NormalizedMarket]:
        results: list[NormalizedMarket] = []
        cursor: str | None = None
        while len(results) < limit:
            params: dict[str, Any] = {
                "status": "open",
                "limit": min(limit - len(results), self.page_size),
            }
            if cursor:
                params["cursor"] = cursor
            data = await self._get_json(f"{self.base_url}/markets", params=params)
            if not isinstance(data, dict):
                raise SourceFetchError(self.source.value, "expected a JSON object with 'markets'")
            markets = data.get("markets") or []
            if not markets:
                break
            for m in markets:
                if len(results) >= limit:
                    break
                if not isinstance(m, dict):
                    continue
                try:
                    results.append(parse_market(m))
                except ValidationError as e:
                    log.warning("kalshi_market_skipped", ticker=m.get("ticker"), error=str(e))
            log.debug("kalshi_page", cursor=cursor, markets=len(markets), collected=len(results))
            cursor = data.get("cursor") or None
            if not cursor:
                break
        return results[:limit]
