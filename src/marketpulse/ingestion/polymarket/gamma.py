"""Polymarket Gamma API adapter - paged events with nested markets."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from marketpulse.errors import SourceFetchError
from marketpulse.ingestion.base import SourceAdapter, to_float, to_text
from marketpulse.models import NormalizedMarket, Source

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"
POLYMARKET_WEB = "https://polymarket.com"


def _json_list(value: str | list[Any] | None) -> list[Any] | None:
    """Gamma encodes outcome arrays as JSON strings; accept decoded lists too."""
    if value is None or value == "":
        return None
    if isinstance(value, list):
        return value
    try:
        decoded = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return None
    return decoded if isinstance(decoded, list) else None


def parse_outcome_prices(
    outcome_prices: str | list[Any] | None,
    outcomes: str | list[Any] | None,
) -> tuple[float | None, float | None] | None:
    """Return (yes, no) prices, matching outcome names case-insensitively.

    Falls back to positions 0/1 when no outcome is named yes/no. None if there are no prices.
    """
    prices = _json_list(outcome_prices)
    if not prices:
        return None
    names = _json_list(outcomes) or ["Yes", "No"]
    lowered = [str(n).lower() for n in names]
    yes_idx = lowered.index("yes") if "yes" in lowered else -1
    no_idx = lowered.index("no") if "no" in lowered else -1

    def at(i: int) -> Any:
        return prices[i] if 0 <= i < len(prices) else None

    yes = to_float(at(yes_idx)) if yes_idx >= 0 else to_float(at(0))
    if no_idx >= 0:
        no = to_float(at(no_idx))
    else:
        no = to_float(at(1) if len(prices) > 1 else at(0))
    return yes, no


def _market_status(raw: dict[str, Any]) -> str:
    if raw.get("closed"):
        return "closed"
    return "active" if raw.get("active") else "inactive"


def parse_market(raw: dict[str, Any], event: dict[str, Any]) -> NormalizedMarket:
    """Convert a Gamma market nested in an event to NormalizedMarket."""
    tags = event.get("tags") or []
    first_tag = tags[0] if tags and isinstance(tags[0], dict) else {}
    category = to_text(first_tag.get("label")) or to_text(first_tag.get("slug"))

    prices = parse_outcome_prices(raw.get("outcomePrices"), raw.get("outcomes"))
    yes, no = prices if prices else (None, None)

    volume = raw.get("volume")
    if isinstance(volume, (int, float)) and not isinstance(volume, bool):
        volume = to_float(volume)
    elif raw.get("volumeNum") is not None:
        volume = to_float(raw.get("volumeNum"))
    else:
        volume = to_float(volume)
    liquidity = to_float(raw.get("liquidityNum"))
    if liquidity is None:
        liquidity = to_float(raw.get("liquidityClob"))

    slug = to_text(event.get("slug")) or to_text(raw.get("slug")) or ""
    return NormalizedMarket(
        source=Source.POLYMARKET,
        external_id=to_text(raw.get("id")) or "",
        title=to_text(raw.get("question")) or to_text(event.get("title")) or "",
        url=f"{POLYMARKET_WEB}/event/{slug}",
        category=category,
        status=_market_status(raw),
        probability=yes,
        price_yes=yes,
        price_no=no,
        volume=volume,
        liquidity=liquidity,
        spread=to_float(raw.get("spread")),
        raw=raw,
    )


class PolymarketAdapter(SourceAdapter):
    """Offset-paginated /events crawl; each event carries zero or more markets."""

    source = Source.POLYMARKET

    def __init__(
        self,
        base_url: str = GAMMA_API_BASE,
        page_size: int = 50,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size

    async def fetch(self, limit: int = 100) -> list[NormalizedMarket]:
        results: list[NormalizedMarket] = []
        offset = 0
        while len(results) < limit:
            events = await self._get_json(
                f"{self.base_url}/events",
                params={"active": "true", "closed": "false", "limit": self.page_size, "offset": offset},
            )
            if not isinstance(events, list):
                raise SourceFetchError(self.source.value, "expected a JSON array of events")
            if not events:
                break
            for event in events:
                if not isinstance(event, dict):
                    continue
                for m in event.get("markets") or []:
                    if len(results) >= limit:
                        break
                    if not isinstance(m, dict):
                        continue
                    if m.get("closed") and not m.get("active"):
                        continue
                    try:
                        results.append(parse_market(m, event))
                    except ValidationError as e:
                        log.warning("polymarket_market_skipped", market_id=m.get("id"), error=str(e))
                if len(results) >= limit:
                    break
            log.debug("polymarket_page", offset=offset, events=len(events), collected=len(results))
            offset += self.page_size
            if len(events) < self.page_size:
                break
        return results[:limit]
