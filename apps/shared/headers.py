"""Security and caching response headers for the API."""

from fastapi import FastAPI, Request
from fastapi.responses import Response


DEFAULT_CSP = (
    "default-src 'none'; "
    "img-src 'self' data: https:; "
    "frame-ancestors 'none'"
)

# Applied with setdefault, so a route may override any of these
DEFAULT_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Content-Security-Policy": DEFAULT_CSP,
    "Cache-Control": "no-cache, no-store, must-revalidate",
}

# Blobs are never rewritten under the same id
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


def setup_response_headers(app: FastAPI) -> None:
    """Add the default security and Cache-Control headers to every response."""

    @app.middleware("http")
    async def add_default_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in DEFAULT_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
