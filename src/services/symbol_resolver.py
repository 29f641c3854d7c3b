"""Ticker symbol to CoinGecko identifier resolution."""

# Common tickers whose CoinGecko id differs from the lower-cased ticker
SYMBOL_TO_ID = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "ada": "cardano",
    "bnb": "binancecoin",
    "sol": "solana",
    "matic": "polygon-ecosystem-token",
    "dot": "polkadot",
    "avax": "avalanche-2",
    "ltc": "litecoin",
    "atom": "cosmos",
    "link": "chainlink",
    "doge": "dogecoin",
}


def resolve(symbol: str) -> str:
    """
    Map a ticker symbol to its canonical upstream identifier.

    Unmapped symbols resolve to themselves, lower-cased, on the assumption
    that the upstream id space overlaps the ticker space.

    Args:
        symbol: Ticker symbol in any case (e.g., "BTC", "eth")

    Returns:
        Upstream identifier (e.g., "bitcoin")
    """
    key = (symbol or "").strip().lower()
    return SYMBOL_TO_ID.get(key, key)
