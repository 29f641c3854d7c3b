"""Market data models for price lookups and market listings."""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# One row of the upstream /coins/markets response, passed through untouched
MarketEntry = dict[str, Any]


@dataclass(frozen=True)
class PriceRecord:
    """Current USD price snapshot for a single asset."""

    id: str
    symbol: str
    name: str
    current_price: float
    price_change_percentage_24h: float
    market_cap: float | None
    last_updated: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert record to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "current_price": self.current_price,
            "price_change_percentage_24h": self.price_change_percentage_24h,
            "market_cap": self.market_cap,
            "last_updated": self.last_updated.isoformat(),
        }


class LookupStatus(str, enum.Enum):
    """Outcome of a market-data lookup."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Tagged lookup outcome carrying either a value or the reason it is missing."""

    status: LookupStatus
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.SUCCESS

    @classmethod
    def success(cls, value: T) -> "LookupResult[T]":
        return cls(status=LookupStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, status: LookupStatus, error: str) -> "LookupResult[T]":
        return cls(status=status, error=error)
