"""API-key authentication dependency for FastAPI.

Every non-health route depends on require_api_key. The check itself lives
behind the Authenticator protocol so the shared-secret scheme can be swapped
without touching the routers.
"""

import hmac
from typing import Protocol

from fastapi import Depends, Request

from seo_platform.core.config import Settings, get_settings
from seo_platform.core.errors import UnauthorizedError
from seo_platform.core.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "x-api-key"


class Authenticator(Protocol):
    def authenticate(self, request: Request) -> bool: ...


class ApiKeyAuthenticator:
    """Compares the x-api-key header with the configured shared secret.

    With no key configured every request is rejected.
    """

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    def authenticate(self, request: Request) -> bool:
        provided = request.headers.get(API_KEY_HEADER)
        if not self._api_key or provided is None:
            return False
        return hmac.compare_digest(provided.encode(), self._api_key.encode())


def get_authenticator(settings: Settings = Depends(get_settings)) -> Authenticator:
    return ApiKeyAuthenticator(settings.api_key)


async def require_api_key(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> None:
    """Router-level dependency raising UnauthorizedError on a bad key."""
    if not authenticator.authenticate(request):
        logger.warning(
            "Rejected request with invalid API key",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
            },
        )
        raise UnauthorizedError()
