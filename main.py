"""Main application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.error_handlers import ErrorResponse, market_error_handler
from src.api.routes import router
from src.services.market_data_service import MarketDataService
from src.utils.config import VERSION, config
from src.utils.logger import StructuredLogger

logger = StructuredLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    try:
        config.validate()
    except ValueError as e:
        logger.critical("Configuration error", context={"error": str(e)}, exception=e)
        raise
    app.state.market_data_service = MarketDataService.from_config(config)
    logger.info(
        "Market data service started",
        context={
            "base_url": config.coingecko.base_url,
            "cache_ttl": config.cache.ttl,
            "cache_max_entries": config.cache.max_entries,
        },
    )
    yield
    # Shutdown
    app.state.market_data_service.close()


app = FastAPI(
    title="Crypto Market Bot",
    description="Cached cryptocurrency price and market-cap lookups backed by CoinGecko",
    version=VERSION,
    lifespan=lifespan,
)

app.add_exception_handler(ErrorResponse, market_error_handler)
app.include_router(router, prefix="/api", tags=["market"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
