"""
Middleware for the current-store context
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging

logger = logging.getLogger(__name__)


class StoreContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that extracts the current store from the X-Store-ID header
    and sets it on request.state for use in endpoint handlers.

    The header is optional: endpoints also accept an explicit store_id
    query parameter, which takes precedence.
    """

    async def dispatch(self, request: Request, call_next):
        store_header = request.headers.get("X-Store-ID")

        if store_header:
            store_id = store_header.strip()
            request.state.store_id = store_id
            logger.debug(f"Request to {request.url.path} with store_id: {store_id}")

        response = await call_next(request)

        if store_header:
            response.headers["X-Store-ID"] = store_header.strip()

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to every response
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
