"""FastAPI dependencies for the market data API."""

from fastapi import Request

from src.services.market_data_service import MarketDataService


def get_market_data_service(request: Request) -> MarketDataService:
    """
    FastAPI dependency returning the service created at application start-up.

    Args:
        request: Incoming request, used to reach the application state

    Returns:
        The application's MarketDataService
    """
    return request.app.state.market_data_service
