from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .config import settings

logger = logging.getLogger(__name__)

OPEN_PATHS = {"/healthz"}


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not carry the configured store access key."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        expected = getattr(request.app.state, "api_key", settings.api_key)
        if not expected or request.url.path in OPEN_PATHS:
            return await call_next(request)
        presented = self._extract_key(request)
        if presented is None or not hmac.compare_digest(presented, expected):
            logger.warning("Rejected request to %s: invalid access key", request.url.path)
            return JSONResponse({"detail": "Invalid access key"}, status_code=401)
        return await call_next(request)

    def _extract_key(self, request: Request) -> Optional[str]:
        header = request.headers.get("apikey")
        if header:
            return header.strip()
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
        return None
