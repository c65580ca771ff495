import asyncio
import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

import aio_pika
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.fault_triage.config import get_settings
from src.fault_triage.database.database import DatabaseManager
from src.fault_triage.database.seed import seed_reference_data
from src.fault_triage.fault_events.dependencies import get_fault_processor
from src.fault_triage.fault_events.handler import handle_fault_event
from src.fault_triage.fault_events.routes import fault_events_router
from src.fault_triage.health_check.routes import health_router
from src.fault_triage.logging_config import setup_logging
from src.fault_triage.redis.redis import redis_manager

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()
PROJECT_NAME = settings.PROJECT_NAME
FastAPI_API_KEY_HEADER = settings.FASTAPI_API_KEY_HEADER
ALL_CORS_ORIGINS = settings.all_cors_origins
RABBITMQ_HOST = settings.RABBITMQ_HOST
RABBITMQ_PORT = settings.RABBITMQ_PORT
RABBITMQ_USER = settings.RABBITMQ_USER
RABBITMQ_PASSWORD = settings.RABBITMQ_PASSWORD
RABBITMQ_URL = (
    f"amqp://{RABBITMQ_USER}:{RABBITMQ_PASSWORD}@" f"{RABBITMQ_HOST}:{RABBITMQ_PORT}/"
)
FAULT_EXCHANGE = "fault_events_exchange"


# Custom OpenAPI schema to include API key security
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=PROJECT_NAME,
        version="0.1.0",
        description="Triage and deduplication of EV charging fault events",
        routes=app.routes,
    )

    if "components" not in openapi_schema:
        openapi_schema["components"] = {}

    openapi_schema["components"]["securitySchemes"] = {
        "APIKeyHeader": {
            "type": "apiKey",
            "in": "header",
            "name": FastAPI_API_KEY_HEADER,
        }
    }

    for path_name, path in openapi_schema["paths"].items():
        if not path_name.startswith("/api"):
            continue
        for method in path.values():
            method.setdefault("security", []).append({"APIKeyHeader": []})

    app.openapi_schema = openapi_schema
    return app.openapi_schema


async def consume_queue(queue: aio_pika.abc.AbstractQueue, source: str):
    async with queue.iterator() as queue_iter:
        async for message in queue_iter:
            async with message.process():
                try:
                    payload = message.body.decode()
                    if not payload:
                        logger.warning(f"[{queue.name}] Empty message skipped")
                        continue

                    logger.info(f"[{queue.name}] Consume fault event")
                    async with DatabaseManager.session_scope() as db_session:
                        result = await handle_fault_event(
                            db_session, payload, default_source=source
                        )
                    if "error" in result:
                        logger.warning(f"[{queue.name}] {result['error']}")

                except Exception as e:
                    logger.error(
                        f"[{queue.name}] Failed to process message: " f"{str(e)}"
                    )


async def ingest_event():
    connection = await aio_pika.connect_robust(RABBITMQ_URL)
    async with connection:
        channel = await connection.channel()

        # Direct exchange, each feed publishes with its source as routing key
        exchange = await channel.declare_exchange(
            FAULT_EXCHANGE, aio_pika.ExchangeType.DIRECT, durable=True
        )

        tasks = []
        for queue_name, source in settings.fault_queue_sources.items():
            queue = await channel.declare_queue(queue_name, durable=True)
            await queue.bind(exchange, routing_key=source)
            logger.info(f"Consuming {queue_name} for source '{source}'")
            tasks.append(asyncio.create_task(consume_queue(queue, source)))

        # Keep them alive
        await asyncio.gather(*tasks)


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    try:
        await DatabaseManager.connect()
        await DatabaseManager.create_tables()
        if settings.SEED_REFERENCE_DATA:
            async with DatabaseManager.session_scope() as db_session:
                await seed_reference_data(db_session)
        await redis_manager.init_redis()

        # Create background task for RabbitMQ consumer
        app.state.rabbitmq_consumer_task = None
        if settings.FAULT_QUEUE_CONSUMER_ENABLED:
            app.state.rabbitmq_consumer_task = asyncio.create_task(ingest_event())

        logger.info("Startup complete")
        yield

        logger.info("Shutting down...")

        # Cancel the RabbitMQ consumer task
        if app.state.rabbitmq_consumer_task is not None:
            app.state.rabbitmq_consumer_task.cancel()
            try:
                await app.state.rabbitmq_consumer_task
            except asyncio.CancelledError:
                logger.info("RabbitMQ consumer task cancelled.")

        # Let decisions already handed off reach the action executor
        await get_fault_processor().drain(
            timeout=settings.ACTION_EXECUTOR_ACK_TIMEOUT_SECS
        )
        await redis_manager.close_redis()
    except Exception as e:
        logger.error(f"Startup failed: {str(e)}")
        raise
    finally:
        await DatabaseManager.disconnect()
        logger.info("Shutdown complete")


app = FastAPI(title=PROJECT_NAME, version="0.1.0", lifespan=lifespan)
app.openapi = custom_openapi  # type: ignore[method-assign]


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={
            "detail": "Database connection error. Please try again later.",
            "error": str(exc),
        },
    )


# Set all CORS enabled origins
if ALL_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALL_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# API Routes
api_router = APIRouter(prefix="/api")
api_router.include_router(fault_events_router)
app.include_router(api_router)
app.include_router(health_router)
