import re
from typing import Dict, Optional

from fastapi import Response
from pydantic import BaseModel

_MAX_AGE = re.compile(r"max-age\s*=\s*(\d+)", re.IGNORECASE)


class CachedResponse(BaseModel):
    """Snapshot of an HTTP response as stored in the response cache."""

    status_code: int
    headers: Dict[str, str]
    body: str

    @classmethod
    def from_parts(cls, body: str, status_code: int, headers: Dict[str, str]) -> "CachedResponse":
        return cls(status_code=status_code, headers=dict(headers), body=body)

    def to_response(self) -> Response:
        return Response(content=self.body, status_code=self.status_code, headers=dict(self.headers))

    @property
    def max_age(self) -> Optional[int]:
        """`max-age` from the stored Cache-Control header, if any."""
        for name, value in self.headers.items():
            if name.lower() == "cache-control":
                match = _MAX_AGE.search(value)
                if match:
                    return int(match.group(1))
        return None
