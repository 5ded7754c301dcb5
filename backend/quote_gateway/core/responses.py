from typing import Dict, Optional

from fastapi import Response
from fastapi.responses import RedirectResponse

TEXT_PLAIN = "text/plain"


def text_response(body: str, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> Response:
    """Plain-text response with a bare `text/plain` content type (no charset)."""
    all_headers = {"Content-Type": TEXT_PLAIN}
    if headers:
        all_headers.update(headers)
    return Response(content=body, status_code=status_code, headers=all_headers)


def not_found(body: str = "Not Found") -> Response:
    return text_response(body, status_code=404)


def permanent_redirect(location: str) -> Response:
    return RedirectResponse(location, status_code=301, headers={"Content-Type": TEXT_PLAIN})
