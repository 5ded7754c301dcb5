"""Yahoo Finance client for latest prices and symbol search.

Two endpoints are used:
- chart: `GET {quote_url}/{symbol}`, price at `chart.result[0].meta.regularMarketPrice`
- search: `GET {search_url}?q=...`, candidates at `quotes[*].symbol`

A provider 404 on the chart endpoint means the symbol is unknown and is
reported as "no price". Every other failure (transport error, non-2xx status,
undecodable body) raises `QuoteProviderError`.
"""

import logging
import math
from decimal import Decimal
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from quote_gateway.core.config import DEFAULT_QUOTE_URL, DEFAULT_SEARCH_URL, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class QuoteProviderError(Exception):
    """The quote provider could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def extract_price(payload: Any) -> Optional[float]:
    """Pull `regularMarketPrice` out of a chart payload; None if absent or not numeric."""
    try:
        price = payload["chart"]["result"][0]["meta"]["regularMarketPrice"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    price = float(price)
    if not math.isfinite(price):
        return None
    return price


def format_price(value: float) -> str:
    """Shortest decimal text that round-trips `value` (150.25 -> "150.25", 42.0 -> "42").

    Positional notation is used for 1e-6 <= |value| < 1e21 (0.00001234, not
    1.234e-05); exponent form only outside that range.
    """
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(repr(value)), "f")
    return repr(value)


class YahooFinanceClient:
    """Minimal async client for the Yahoo Finance chart and search endpoints."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        quote_url: Optional[str] = None,
        search_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.quote_url = (quote_url or DEFAULT_QUOTE_URL).rstrip("/")
        self.search_url = search_url or DEFAULT_SEARCH_URL
        self.timeout = timeout

    async def _get(self, url: str, params: dict) -> httpx.Response:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise QuoteProviderError(f"{type(e).__name__}: {e}") from e

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise QuoteProviderError(f"Invalid JSON from quote provider: {e}") from e

    async def get_price(self, symbol: str) -> Optional[float]:
        url = f"{self.quote_url}/{quote(symbol, safe='')}"
        resp = await self._get(url, {"interval": "1d", "range": "1d"})
        if resp.status_code == 404:
            logger.debug(f"Quote provider does not know {symbol}")
            return None
        if not resp.is_success:
            raise QuoteProviderError(
                f"Quote provider returned status {resp.status_code}", status_code=resp.status_code
            )
        return extract_price(self._json(resp))

    async def search_symbols(self, query: str, limit: int = 3) -> List[str]:
        params = {"q": query, "quotesCount": limit, "newsCount": 0}
        resp = await self._get(self.search_url, params)
        if not resp.is_success:
            raise QuoteProviderError(
                f"Symbol search returned status {resp.status_code}", status_code=resp.status_code
            )
        payload = self._json(resp)
        quotes = payload.get("quotes") if isinstance(payload, dict) else None
        symbols = []
        for item in quotes or []:
            sym = item.get("symbol") if isinstance(item, dict) else None
            if isinstance(sym, str) and sym:
                symbols.append(sym)
            if len(symbols) >= limit:
                break
        return symbols
