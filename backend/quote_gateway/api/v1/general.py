from fastapi import APIRouter, Depends, Response

from quote_gateway.core.config import Settings, get_settings
from quote_gateway.core.responses import not_found, permanent_redirect

router = APIRouter()


@router.get("/")
async def root(settings: Settings = Depends(get_settings)) -> Response:
    """Redirect to ROOT_REDIRECT_URL when it is a valid http(s) URL."""
    location = settings.redirect_location
    if location is None:
        return not_found()
    return permanent_redirect(location)
