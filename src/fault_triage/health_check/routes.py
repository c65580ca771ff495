import logging
from http import HTTPStatus

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.fault_triage.database.database import DatabaseManager
from src.fault_triage.redis.redis import redis_manager

logger = logging.getLogger(__name__)

health_router = APIRouter(prefix="/health", tags=["Health Check"])


@health_router.get("")
async def health_check():
    """Report liveness plus the state of the database and Redis connections."""
    logger.debug("Health check requested")
    return JSONResponse(
        status_code=HTTPStatus.OK,
        content={
            "status": "ok",
            "database": "connected" if DatabaseManager.is_connected else "down",
            "redis": "connected" if redis_manager.redis_client else "disabled",
        },
    )
