import hmac
import logging
from typing import cast

from fastapi import Request

from src.fault_triage.config import get_settings
from src.fault_triage.middleware.exceptions import (
    InvalidAPIKeyError,
    MissingAPIKeyError,
)

logger = logging.getLogger(__name__)
settings = get_settings()
FASTAPI_API_KEY_HEADER = settings.FASTAPI_API_KEY_HEADER
FASTAPI_API_KEY = settings.FASTAPI_API_KEY


async def validate_api_key(request: Request) -> str:
    """Dependency validating the API key header on incoming requests."""
    api_key = request.headers.get(FASTAPI_API_KEY_HEADER)
    if not api_key:
        logger.warning(f"Missing API key on {request.method} {request.url.path}")
        raise MissingAPIKeyError
    if not hmac.compare_digest(api_key, FASTAPI_API_KEY):
        logger.warning(f"Invalid API key on {request.method} {request.url.path}")
        raise InvalidAPIKeyError(api_key)
    logger.debug("API key validated successfully")
    return cast(str, api_key)
