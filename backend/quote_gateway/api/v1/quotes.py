from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from quote_gateway.core.config import Settings, get_settings
from quote_gateway.services.quote_provider import YahooFinanceClient
from quote_gateway.services.quote_service import QuoteService, build_cache_key
from quote_gateway.services.response_cache import ResponseCache, get_response_cache

router = APIRouter(tags=["quotes"])


def get_quote_provider(settings: Settings = Depends(get_settings)) -> YahooFinanceClient:
    return YahooFinanceClient(
        user_agent=settings.user_agent,
        quote_url=settings.quote_api_base_url,
        search_url=settings.search_api_base_url,
        timeout=settings.upstream_timeout,
    )


def get_cache(settings: Settings = Depends(get_settings)) -> ResponseCache:
    return get_response_cache(settings)


def get_quote_service(
    settings: Settings = Depends(get_settings),
    provider: YahooFinanceClient = Depends(get_quote_provider),
    cache: ResponseCache = Depends(get_cache),
) -> QuoteService:
    return QuoteService(provider=provider, cache=cache, settings=settings)


@router.get("/{symbol}")
async def get_quote(
    symbol: str,
    request: Request,
    background_tasks: BackgroundTasks,
    service: QuoteService = Depends(get_quote_service),
) -> Response:
    """Latest price for `symbol` as plain text."""
    cache_key = build_cache_key(request.method, str(request.url))
    return await service.resolve(symbol, cache_key, str(request.base_url), background_tasks)
