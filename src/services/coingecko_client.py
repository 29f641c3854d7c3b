"""HTTP client for the CoinGecko public API."""

import time
from collections.abc import Callable
from typing import Any

import requests

from src.services.errors import MalformedResponseError, UpstreamUnavailableError
from src.utils.config import CoinGeckoConfig, config
from src.utils.logger import StructuredLogger


class CoinGeckoClient:
    """Issues the simple-price and markets requests with a deadline and retry budget."""

    def __init__(
        self,
        settings: CoinGeckoConfig | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the client.

        Args:
            settings: Upstream configuration (defaults to the global config)
            session: Optional requests session, mainly for tests
            sleep: Function used to wait between retries
        """
        self.settings = settings or config.coingecko
        self.base_url = self.settings.base_url.rstrip("/")
        self.timeout = self.settings.timeout
        self.retry_delays = list(self.settings.retry_delays)
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(self._default_headers())
        self._sleep = sleep
        self.logger = StructuredLogger("CoinGeckoClient")

    def _default_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }
        if self.settings.api_key:
            headers["x-cg-demo-api-key"] = self.settings.api_key
        return headers

    def get_simple_price(self, coin_id: str) -> dict[str, Any]:
        """
        Fetch USD price, 24h change and market cap for one identifier.

        Args:
            coin_id: CoinGecko identifier (e.g., "bitcoin")

        Returns:
            JSON object keyed by identifier

        Raises:
            UpstreamUnavailableError: On network failure or error status
            MalformedResponseError: If the body is not a JSON object
        """
        params = {
            "ids": coin_id,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_market_cap": "true",
        }
        data = self._get("/simple/price", params)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a JSON object from /simple/price, got {type(data).__name__}"
            )
        return data

    def get_coins_markets(self, limit: int) -> list[dict[str, Any]]:
        """
        Fetch the first page of assets ordered by market cap.

        Args:
            limit: Page size, forwarded verbatim

        Returns:
            List of market objects in upstream order

        Raises:
            UpstreamUnavailableError: On network failure or error status
            MalformedResponseError: If the body is not a JSON array
        """
        params = {
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": limit,
            "page": 1,
            "sparkline": "false",
            "price_change_percentage": "24h",
        }
        data = self._get("/coins/markets", params)
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"Expected a JSON array from /coins/markets, got {type(data).__name__}"
            )
        return data

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        """GET path with retries; returns the decoded JSON body."""
        url = f"{self.base_url}{path}"
        max_attempts = len(self.retry_delays) + 1

        for attempt in range(1, max_attempts + 1):
            self.logger.debug(
                "Sending upstream request",
                context={"url": url, "params": params, "attempt": attempt},
            )
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except (requests.Timeout, requests.ConnectionError) as e:
                error = UpstreamUnavailableError(f"Request to {path} failed: {e}")
            else:
                if response.ok:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise MalformedResponseError(f"Invalid JSON from {path}: {e}") from e

                error = UpstreamUnavailableError(
                    f"{path} returned {response.status_code} {response.reason}",
                    status_code=response.status_code,
                )
                # Client errors will not change on retry
                if response.status_code < 500:
                    self.logger.warning(
                        "Upstream rejected request",
                        context={"url": url, "status_code": response.status_code, "attempt": attempt},
                    )
                    raise error

            if attempt < max_attempts:
                delay = self.retry_delays[attempt - 1]
                self.logger.warning(
                    f"Upstream request failed, retrying in {delay}s",
                    context={
                        "url": url,
                        "attempt": attempt,
                        "error": str(error),
                        "retry_delay_seconds": delay,
                    },
                )
                self._sleep(delay)
            else:
                self.logger.error(
                    "Upstream request failed after all retry attempts",
                    context={"url": url, "attempts": max_attempts, "error": str(error)},
                )
                raise error

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()
