"""Shared test doubles."""

import json
from http import HTTPStatus

import requests


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code: int = 200, payload=None, body: bytes | None = None) -> requests.Response:
    """Build a real requests.Response with the given status and JSON payload."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    response._content = body if body is not None else json.dumps(payload).encode()
    return response


BTC_PAYLOAD = {"bitcoin": {"usd": 50000, "usd_24h_change": 2.5, "usd_market_cap": 1e12}}

TOP3_PAYLOAD = [
    {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "current_price": 50000.0,
     "market_cap": 1.0e12, "price_change_percentage_24h": 2.5},
    {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "current_price": 3000.0,
     "market_cap": 3.6e11, "price_change_percentage_24h": -1.2},
    {"id": "tether", "symbol": "usdt", "name": "Tether", "current_price": 1.0,
     "market_cap": 1.1e11, "price_change_percentage_24h": 0.01},
]
