"""Market data lookups: single-symbol price and top-N market list."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from src.models.market_data import LookupResult, LookupStatus, MarketEntry, PriceRecord
from src.services.coingecko_client import CoinGeckoClient
from src.services.errors import (
    MalformedResponseError,
    UnknownSymbolError,
    UpstreamUnavailableError,
)
from src.services.request_coalescer import RequestCoalescer
from src.services.symbol_resolver import resolve
from src.utils.config import Config
from src.utils.logger import StructuredLogger
from src.utils.ttl_cache import TTLCache


def price_cache_key(symbol: str) -> str:
    return f"price:{symbol}"


def top_cache_key(limit: int) -> str:
    return f"top:{limit}"


def _as_float(value: Any, field_name: str) -> float:
    # bool is an int subclass but never a valid price field
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"Field '{field_name}' is not numeric: {value!r}")
    return float(value)


def _copy_entries(entries: tuple[MarketEntry, ...]) -> list[MarketEntry]:
    """Fresh list of fresh entry dicts, so callers cannot alter the cached tuple."""
    return [dict(entry) for entry in entries]


class MarketDataService:
    """
    Resolves symbols, caches results and fetches from CoinGecko on a miss.

    Each instance owns its cache and in-flight request table, so their
    lifetime is the lifetime of the service rather than of the process.
    Failures never propagate: the lookup_* methods return a tagged
    LookupResult and the get_* methods collapse it to None or [].
    """

    def __init__(
        self,
        client: CoinGeckoClient | None = None,
        cache: TTLCache | None = None,
        coalescer: RequestCoalescer | None = None,
        resolver: Callable[[str], str] = resolve,
    ):
        self.client = client if client is not None else CoinGeckoClient()
        self.cache = cache if cache is not None else TTLCache()
        self.coalescer = coalescer if coalescer is not None else RequestCoalescer()
        self.resolver = resolver
        self.logger = StructuredLogger("MarketDataService")

    @classmethod
    def from_config(cls, cfg: Config) -> "MarketDataService":
        """Build a service wired from application configuration."""
        return cls(
            client=CoinGeckoClient(cfg.coingecko),
            cache=TTLCache(ttl_seconds=cfg.cache.ttl, max_entries=cfg.cache.max_entries),
        )

    def lookup_price(self, symbol: str) -> LookupResult[PriceRecord]:
        """
        Look up the current USD price for a ticker symbol.

        Args:
            symbol: Ticker symbol in any case (e.g., "btc")

        Returns:
            LookupResult holding a PriceRecord on success, or the failure status
        """
        display_symbol = (symbol or "").strip().upper()
        if not display_symbol:
            return LookupResult.failure(LookupStatus.NOT_FOUND, "Empty symbol")

        key = price_cache_key(display_symbol)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Using cached price", context={"symbol": display_symbol})
            return LookupResult.success(cached)

        coin_id = self.resolver(display_symbol)
        context = {"symbol": display_symbol, "coin_id": coin_id}
        return self._run(key, lambda: self._fetch_price(key, display_symbol, coin_id), context)

    def get_price(self, symbol: str) -> PriceRecord | None:
        """Return the PriceRecord for symbol, or None when no data is available."""
        return self.lookup_price(symbol).value

    def lookup_top_list(self, limit: int) -> LookupResult[list[MarketEntry]]:
        """
        Look up the top assets by market capitalization.

        Args:
            limit: Number of assets to request; forwarded to the upstream verbatim

        Returns:
            LookupResult holding the market entries on success, or the failure status
        """
        key = top_cache_key(limit)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Using cached top list", context={"limit": limit})
            return LookupResult.success(_copy_entries(cached))

        result = self._run(key, lambda: self._fetch_top_list(key, limit), {"limit": limit})
        if not result.ok:
            return result
        return LookupResult.success(_copy_entries(result.value))

    def get_top_list(self, limit: int = 10) -> list[MarketEntry]:
        """Return the top market entries, or an empty list when no data is available."""
        result = self.lookup_top_list(limit)
        return result.value if result.ok else []

    def _run(self, key: str, fetch: Callable[[], Any], context: dict[str, Any]) -> LookupResult:
        """Run a coalesced fetch and translate failures into a tagged result."""
        try:
            value = self.coalescer.run(key, fetch)
        except UnknownSymbolError as e:
            self.logger.warning("No upstream data for identifier", context={**context, "result": "not_found"})
            return LookupResult.failure(LookupStatus.NOT_FOUND, str(e))
        except UpstreamUnavailableError as e:
            self.logger.error(
                "Upstream unavailable",
                context={**context, "result": "unavailable", "status_code": e.status_code, "error": str(e)},
            )
            return LookupResult.failure(LookupStatus.UNAVAILABLE, str(e))
        except MalformedResponseError as e:
            self.logger.error(
                "Malformed upstream response",
                context={**context, "result": "malformed", "error": str(e)},
            )
            return LookupResult.failure(LookupStatus.MALFORMED, str(e))
        except Exception as e:
            self.logger.error(
                "Unexpected error during market data lookup",
                context={**context, "result": "failed"},
                exception=e,
            )
            return LookupResult.failure(LookupStatus.UNAVAILABLE, str(e))
        return LookupResult.success(value)

    def _fetch_price(self, key: str, display_symbol: str, coin_id: str) -> PriceRecord:
        # A concurrent leader may have filled the cache while we queued
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        self.logger.info("Fetching price", context={"symbol": display_symbol, "coin_id": coin_id})
        data = self.client.get_simple_price(coin_id)

        coin_data = data.get(coin_id)
        if coin_data is None:
            raise UnknownSymbolError(coin_id)
        if not isinstance(coin_data, dict):
            raise MalformedResponseError(f"Entry for '{coin_id}' is not an object")

        change = coin_data.get("usd_24h_change")
        market_cap = coin_data.get("usd_market_cap")
        record = PriceRecord(
            id=coin_id,
            symbol=display_symbol,
            # /simple/price carries no display name
            name=display_symbol,
            current_price=_as_float(coin_data.get("usd"), "usd"),
            price_change_percentage_24h=_as_float(change, "usd_24h_change") if change is not None else 0.0,
            market_cap=_as_float(market_cap, "usd_market_cap") if market_cap is not None else None,
            last_updated=datetime.now(UTC),
        )

        self.cache.set(key, record)
        self.logger.info(
            "Successfully fetched price",
            context={
                "symbol": display_symbol,
                "coin_id": coin_id,
                "result": "success",
                "current_price": record.current_price,
                "price_change_percentage_24h": record.price_change_percentage_24h,
            },
        )
        return record

    def _fetch_top_list(self, key: str, limit: int) -> tuple[MarketEntry, ...]:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        self.logger.info("Fetching top list", context={"limit": limit})
        data = self.client.get_coins_markets(limit)
        if not all(isinstance(entry, dict) for entry in data):
            raise MalformedResponseError("Every /coins/markets entry must be an object")

        # Frozen copy; callers only ever see fresh lists built from it
        entries = tuple(dict(entry) for entry in data)
        self.cache.set(key, entries)
        self.logger.info(
            "Successfully fetched top list",
            context={"limit": limit, "result": "success", "count": len(entries)},
        )
        return entries

    def close(self) -> None:
        """Drop cached data and close the upstream client."""
        self.cache.clear()
        self.client.close()
