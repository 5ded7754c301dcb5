"""
Quote Gateway services

- Yahoo Finance client for prices and symbol search
- Response cache backends (in-memory, Redis)
- Quote resolution
"""

from .quote_provider import QuoteProviderError, YahooFinanceClient
from .quote_service import QuoteService
from .response_cache import InMemoryResponseCache, RedisResponseCache, ResponseCache
