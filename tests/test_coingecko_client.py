"""Tests for the CoinGecko HTTP client."""

import pytest
import requests

from src.services.coingecko_client import CoinGeckoClient
from src.services.errors import MalformedResponseError, UpstreamUnavailableError
from src.utils.config import CoinGeckoConfig
from tests.helpers import BTC_PAYLOAD, TOP3_PAYLOAD, make_response


class TestRequestShape:
    """The client sends the documented endpoints, parameters and headers."""

    def test_simple_price_request(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(200, BTC_PAYLOAD)

        data = coingecko_client.get_simple_price("bitcoin")

        assert data == BTC_PAYLOAD
        http_session.get.assert_called_once_with(
            "https://api.example.test/api/v3/simple/price",
            params={
                "ids": "bitcoin",
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_market_cap": "true",
            },
            timeout=5,
        )

    def test_markets_request(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(200, TOP3_PAYLOAD)

        data = coingecko_client.get_coins_markets(3)

        assert data == TOP3_PAYLOAD
        http_session.get.assert_called_once_with(
            "https://api.example.test/api/v3/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": 3,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
            timeout=5,
        )

    def test_identifying_headers(self, coingecko_client, http_session):
        assert http_session.headers["User-Agent"] == "crypto-market-bot/test"
        assert http_session.headers["Accept"] == "application/json"
        assert "x-cg-demo-api-key" not in http_session.headers

    def test_api_key_header_when_configured(self, http_session):
        settings = CoinGeckoConfig(api_key="demo-key")
        CoinGeckoClient(settings, session=http_session)
        assert http_session.headers["x-cg-demo-api-key"] == "demo-key"


class TestRetries:
    """Timeouts, connection errors and 5xx responses are retried under a budget."""

    def test_server_error_is_retried_then_succeeds(self, coingecko_client, http_session):
        http_session.get.side_effect = [
            make_response(502, {"error": "bad gateway"}),
            make_response(200, BTC_PAYLOAD),
        ]

        assert coingecko_client.get_simple_price("bitcoin") == BTC_PAYLOAD
        assert http_session.get.call_count == 2
        assert coingecko_client.sleeps == [0.1]

    def test_timeout_is_retried(self, coingecko_client, http_session):
        http_session.get.side_effect = [
            requests.Timeout("read timed out"),
            requests.ConnectionError("reset"),
            make_response(200, TOP3_PAYLOAD),
        ]

        assert coingecko_client.get_coins_markets(3) == TOP3_PAYLOAD
        assert coingecko_client.sleeps == [0.1, 0.2]

    def test_budget_exhausted_raises_unavailable(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(500, {"error": "boom"})

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            coingecko_client.get_simple_price("bitcoin")

        assert exc_info.value.status_code == 500
        assert http_session.get.call_count == 3
        assert coingecko_client.sleeps == [0.1, 0.2]

    def test_network_failure_exhausted_has_no_status(self, coingecko_client, http_session):
        http_session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            coingecko_client.get_coins_markets(10)

        assert exc_info.value.status_code is None
        assert http_session.get.call_count == 3

    def test_client_error_is_not_retried(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(429, {"status": "rate limited"})

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            coingecko_client.get_simple_price("bitcoin")

        assert exc_info.value.status_code == 429
        assert http_session.get.call_count == 1
        assert coingecko_client.sleeps == []

    def test_no_retry_budget(self, http_session):
        settings = CoinGeckoConfig(retry_delays=[])
        coingecko = CoinGeckoClient(settings, session=http_session, sleep=lambda _: None)
        http_session.get.return_value = make_response(503, {})

        with pytest.raises(UpstreamUnavailableError):
            coingecko.get_simple_price("bitcoin")
        assert http_session.get.call_count == 1


class TestMalformedBodies:
    """Bodies that are not JSON, or not the expected JSON type, are rejected."""

    def test_invalid_json(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(200, body=b"<html>oops</html>")

        with pytest.raises(MalformedResponseError):
            coingecko_client.get_simple_price("bitcoin")
        assert http_session.get.call_count == 1

    def test_simple_price_expects_object(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(200, [1, 2, 3])

        with pytest.raises(MalformedResponseError):
            coingecko_client.get_simple_price("bitcoin")

    def test_markets_expects_array(self, coingecko_client, http_session):
        http_session.get.return_value = make_response(200, {"error": "nope"})

        with pytest.raises(MalformedResponseError):
            coingecko_client.get_coins_markets(3)


def test_close_closes_session(coingecko_client, http_session):
    coingecko_client.close()
    http_session.close.assert_called_once()
