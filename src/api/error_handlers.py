"""Error responses for the market data API."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.models.market_data import LookupResult, LookupStatus


class MarketError:
    """Standard error codes for market data endpoints."""

    SYMBOL_NOT_FOUND = "SYMBOL_NOT_FOUND"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    MALFORMED_UPSTREAM_RESPONSE = "MALFORMED_UPSTREAM_RESPONSE"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class ErrorResponse(Exception):
    """
    API error raised from a route and rendered as {"error", "message"[, "details"]}.

    Raise it from a route; market_error_handler turns it into the JSON body.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        body = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


_FAILURE_RESPONSES = {
    LookupStatus.NOT_FOUND: (MarketError.SYMBOL_NOT_FOUND, status.HTTP_404_NOT_FOUND),
    LookupStatus.UNAVAILABLE: (MarketError.UPSTREAM_UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE),
    LookupStatus.MALFORMED: (MarketError.MALFORMED_UPSTREAM_RESPONSE, status.HTTP_502_BAD_GATEWAY),
}


def create_lookup_error(result: LookupResult, message: str) -> ErrorResponse:
    """
    Create the error response for a failed lookup.

    Args:
        result: The failed lookup result
        message: Human-readable message for the caller

    Returns:
        ErrorResponse whose code and status reflect the failure kind
    """
    error_code, status_code = _FAILURE_RESPONSES[result.status]
    return ErrorResponse(
        error_code=error_code,
        message=message,
        details={"reason": result.error} if result.error else None,
        status_code=status_code,
    )


def create_validation_error(field: str, message: str) -> ErrorResponse:
    """Create a validation error for a single request field."""
    return ErrorResponse(
        error_code=MarketError.VALIDATION_ERROR,
        message="Validation failed for one or more fields",
        details={field: message},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def market_error_handler(request: Request, exc: ErrorResponse) -> JSONResponse:
    """Render an ErrorResponse as a flat JSON error body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
