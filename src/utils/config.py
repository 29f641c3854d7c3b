"""Configuration management for the application."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VERSION = "1.0.0"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_delays(raw: str) -> list[float]:
    """Parse a comma-separated list of delays in seconds."""
    return [float(part) for part in raw.split(",") if part.strip()]


@dataclass
class CoinGeckoConfig:
    """Upstream market-data API configuration."""

    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: str | None = None
    timeout: float = 10.0  # Per-request deadline in seconds
    retry_delays: list[float] = field(default_factory=lambda: [0.5, 1.0])
    user_agent: str = f"crypto-market-bot/{VERSION}"


@dataclass
class CacheConfig:
    """Lookup cache configuration."""

    ttl: float = 300  # Cache time-to-live in seconds
    max_entries: int = 1024


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


class Config:
    """Main application configuration."""

    def __init__(self):
        self.coingecko = CoinGeckoConfig(
            base_url=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
            api_key=os.getenv("COINGECKO_API_KEY") or None,
            timeout=float(os.getenv("UPSTREAM_TIMEOUT", "10")),
            retry_delays=_parse_delays(os.getenv("UPSTREAM_RETRY_DELAYS", "0.5,1.0")),
            user_agent=os.getenv("USER_AGENT", f"crypto-market-bot/{VERSION}"),
        )

        self.cache = CacheConfig(
            ttl=float(os.getenv("CACHE_TTL", "300")),
            max_entries=int(os.getenv("CACHE_MAX_ENTRIES", "1024")),
        )

        self.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> bool:
        """
        Validate configuration.

        Returns:
            True if configuration is valid

        Raises:
            ValueError if configuration is invalid
        """
        if not self.coingecko.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"COINGECKO_BASE_URL must be an http(s) URL, got: {self.coingecko.base_url}"
            )
        if self.coingecko.timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")
        if any(delay < 0 for delay in self.coingecko.retry_delays):
            raise ValueError("UPSTREAM_RETRY_DELAYS must not contain negative values")

        if self.cache.ttl <= 0:
            raise ValueError("CACHE_TTL must be positive")
        if self.cache.max_entries <= 0:
            raise ValueError("CACHE_MAX_ENTRIES must be positive")

        if self.logging.level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL: {self.logging.level}. Use one of {', '.join(LOG_LEVELS)}"
            )

        return True


# Global config instance
config = Config()
