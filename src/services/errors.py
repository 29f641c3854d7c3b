"""Exceptions raised while talking to the upstream market-data API."""


class MarketDataError(Exception):
    """Base class for market-data lookup failures."""


class UnknownSymbolError(MarketDataError):
    """The upstream API has no data for the resolved identifier."""

    def __init__(self, identifier: str):
        super().__init__(f"No market data for identifier '{identifier}'")
        self.identifier = identifier


class UpstreamUnavailableError(MarketDataError):
    """The upstream API could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(MarketDataError):
    """The upstream response body does not have the expected shape."""
