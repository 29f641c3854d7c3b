"""API routes for price and top-list lookups."""

import re
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from src.api.dependencies import get_market_data_service
from src.api.error_handlers import create_lookup_error, create_validation_error
from src.services.market_data_service import MarketDataService

router = APIRouter()

DEFAULT_TOP_LIMIT = 10
MAX_TOP_LIMIT = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class PriceResponse(BaseModel):
    """Response model for a single-symbol price lookup."""
    id: str
    symbol: str
    name: str
    current_price: float
    price_change_percentage_24h: float
    market_cap: Optional[float]
    last_updated: datetime


class TopListResponse(BaseModel):
    """Response model for the top-N market list."""
    limit: int
    count: int
    entries: list[dict[str, Any]]


def _parse_limit(raw: Optional[str]) -> int:
    """
    Parse the limit from its leading integer, so "5abc" is 5 and "3.7" is 3.

    Missing, zero or non-numeric input falls back to the default.
    """
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return DEFAULT_TOP_LIMIT
    return int(match.group(1)) or DEFAULT_TOP_LIMIT


@router.get("/price/{symbol}", response_model=PriceResponse)
def get_price(
    symbol: str,
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Get the current USD price for a cryptocurrency symbol.

    Returns 404 when the symbol is unknown upstream, 503 when the upstream
    is unreachable and 502 when it answers with an unexpected payload.
    """
    result = service.lookup_price(symbol)
    if not result.ok:
        raise create_lookup_error(
            result, f"Could not find price data for {symbol.strip().upper()}"
        )
    return result.value.to_dict()


@router.get("/top", response_model=TopListResponse)
def get_top(
    limit: Optional[str] = Query(None, description="Number of assets, 1-100 (default 10)"),
    service: MarketDataService = Depends(get_market_data_service),
):
    """Get the top cryptocurrencies ordered by market capitalization."""
    value = _parse_limit(limit)
    if not 1 <= value <= MAX_TOP_LIMIT:
        raise create_validation_error(
            "limit", f"Must be between 1 and {MAX_TOP_LIMIT}"
        )

    result = service.lookup_top_list(value)
    if not result.ok:
        raise create_lookup_error(result, "Could not fetch top cryptocurrencies")

    return {"limit": value, "count": len(result.value), "entries": result.value}
