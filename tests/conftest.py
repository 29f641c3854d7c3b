"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from main import app
from src.api.dependencies import get_market_data_service
from src.services.coingecko_client import CoinGeckoClient
from src.services.market_data_service import MarketDataService
from src.utils.config import CoinGeckoConfig
from src.utils.ttl_cache import TTLCache
from tests.helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=300, max_entries=64, clock=clock)


@pytest.fixture
def client():
    """Mocked upstream client with the real client's interface."""
    return MagicMock(spec=CoinGeckoClient)


@pytest.fixture
def service(client, cache):
    return MarketDataService(client=client, cache=cache)


@pytest.fixture
def http_session():
    """Mocked requests session whose get() is set per test."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def coingecko_client(http_session):
    """Real client over a mocked session with instant retries."""
    settings = CoinGeckoConfig(
        base_url="https://api.example.test/api/v3",
        timeout=5,
        retry_delays=[0.1, 0.2],
        user_agent="crypto-market-bot/test",
    )
    sleeps: list[float] = []
    coingecko = CoinGeckoClient(settings, session=http_session, sleep=sleeps.append)
    coingecko.sleeps = sleeps
    return coingecko


@pytest.fixture
def test_client(service):
    """Test client whose routes use the test service."""
    app.dependency_overrides[get_market_data_service] = lambda: service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
