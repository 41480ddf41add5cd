"""
Admin API Key Authentication

Write endpoints (creating/deleting posts, uploading images) are guarded by a
shared admin key sent in the X-API-Key header.
"""

import os
import hmac
import logging
from typing import Optional

from fastapi import Security
from fastapi.security import APIKeyHeader

from apps.shared.errors import Unauthorized

logger = logging.getLogger(__name__)

# API key header name
API_KEY_HEADER = "X-API-Key"

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def get_api_key(api_key: Optional[str] = Security(api_key_header)) -> Optional[str]:
    """
    Dependency to validate the admin API key from header

    Usage in endpoints:
    @router.post("/protected")
    def protected_endpoint(api_key: str = Depends(get_api_key)):
        ...
    """
    if not ADMIN_API_KEY:
        if ENVIRONMENT == "production":
            raise RuntimeError(
                "ADMIN_API_KEY must be set in production. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        logger.warning(
            "API key authentication disabled - running in development mode. "
            "Set ADMIN_API_KEY environment variable for security."
        )
        return None

    # Use constant-time comparison to prevent timing attacks
    if api_key is None or not hmac.compare_digest(api_key, ADMIN_API_KEY):
        raise Unauthorized("Invalid or missing API key")

    return api_key
