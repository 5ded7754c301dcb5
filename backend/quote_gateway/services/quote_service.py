"""Quote resolution: exchange-prefix rewrite, cache, upstream fetch, suggestions."""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from fastapi import BackgroundTasks, Response

from quote_gateway.core.config import Settings
from quote_gateway.core.responses import not_found, permanent_redirect, text_response
from quote_gateway.models.schemas import CachedResponse
from quote_gateway.services.quote_provider import QuoteProviderError, YahooFinanceClient, format_price
from quote_gateway.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

QUOTES_PATH = "/api/quotes/"
# Exchange prefixes accepted as PREFIX:BASE and the provider suffix they map to
EXCHANGE_SUFFIXES: Dict[str, str] = {"BIT": ".MI"}
MAX_SUGGESTIONS = 3


def build_cache_key(method: str, url: str) -> str:
    """Cache key for a request: method plus URL with query and fragment dropped."""
    parts = urlsplit(url)
    return f"{method.upper()} {urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))}"


def quote_path(symbol: str) -> str:
    return QUOTES_PATH + quote(symbol, safe="")


class QuoteService:
    """Turns a symbol into a plain-text quote response."""

    def __init__(self, provider: YahooFinanceClient, cache: ResponseCache, settings: Settings):
        self.provider = provider
        self.cache = cache
        self.settings = settings

    async def rewrite_exchange_prefix(self, symbol: str) -> Optional[str]:
        """Return the provider form of an exchange-prefixed symbol when it has a price.

        `BIT:VWCE` becomes `VWCE.MI` if the provider quotes `VWCE.MI`. Probe
        failures count as "no rewrite".
        """
        prefix, sep, base = symbol.partition(":")
        if not sep or not base:
            return None
        suffix = EXCHANGE_SUFFIXES.get(prefix.upper())
        if suffix is None:
            return None
        candidate = f"{base}{suffix}"
        try:
            price = await self.provider.get_price(candidate)
        except QuoteProviderError as e:
            logger.warning(f"Exchange rewrite probe for {candidate} failed: {e}")
            return None
        return candidate if price is not None else None

    async def suggest_symbols(self, symbol: str) -> List[str]:
        try:
            return (await self.provider.search_symbols(symbol, limit=MAX_SUGGESTIONS))[:MAX_SUGGESTIONS]
        except QuoteProviderError as e:
            logger.warning(f"Symbol search for {symbol} failed: {e}")
            return []

    def price_response(self, price: float) -> CachedResponse:
        return CachedResponse.from_parts(
            format_price(price),
            200,
            {
                "Content-Type": "text/plain",
                "Cache-Control": f"public, max-age={self.settings.cache_ttl}",
            },
        )

    async def resolve(
        self, symbol: str, cache_key: str, origin: str, background_tasks: BackgroundTasks
    ) -> Response:
        rewritten = await self.rewrite_exchange_prefix(symbol)
        if rewritten is not None:
            logger.info(f"Redirecting {symbol} to {rewritten}")
            return permanent_redirect(origin.rstrip("/") + quote_path(rewritten))

        cached = await self.cache.lookup(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            response = cached.to_response()
            response.headers["X-Cache"] = "HIT"
            return response
        logger.debug(f"Cache miss for {cache_key}")

        try:
            price = await self.provider.get_price(symbol)
        except QuoteProviderError as e:
            logger.error(f"Error fetching quote for {symbol}: {e}")
            return text_response(f"Error fetching quote: {e}", status_code=500)

        if price is None:
            suggestions = await self.suggest_symbols(symbol)
            if suggestions:
                logger.info(f"No price for {symbol}; suggesting {suggestions}")
                return text_response(f"Symbol not found - similar: {' '.join(suggestions)}")
            return not_found("Price not available")

        snapshot = self.price_response(price)
        # Written after the response is sent; the client never waits on it
        background_tasks.add_task(self.cache.store, cache_key, snapshot)
        response = snapshot.to_response()
        response.headers["X-Cache"] = "MISS"
        return response
