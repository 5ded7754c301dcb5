import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from quote_gateway.api.v1 import general, quotes
from quote_gateway.core.config import get_settings
from quote_gateway.core.logging_config import configure_logging
from quote_gateway.core.responses import not_found, text_response
from quote_gateway.services.response_cache import close_response_caches

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Quote gateway starting")
    yield
    await close_response_caches()
    logger.info("Quote gateway stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    # Exact path matching: /api/quotes/AAPL/ is not redirected to /api/quotes/AAPL
    app = FastAPI(
        title=settings.app_name,
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and non-GET methods are both plain "Not Found"
        if exc.status_code in (404, 405):
            return not_found()
        return text_response(str(exc.detail), status_code=exc.status_code)

    app.include_router(quotes.router, prefix="/api/quotes")
    app.include_router(general.router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quote_gateway.main:app", host="0.0.0.0", port=8000)
