import logging
from http import HTTPStatus
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Path, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.database.dependencies import verify_database
from src.fault_triage.fault_events.dependencies import (
    get_fault_event_repository,
    get_fault_processor,
)
from src.fault_triage.fault_events.exceptions import (
    FaultEventHTTPException,
    FaultEventNotFoundException,
    StorageConflictException,
)
from src.fault_triage.fault_events.repositories.interface import (
    IFaultEventRepository,
)
from src.fault_triage.fault_events.schemas import (
    FaultEventListParams,
    MAX_DB_INT,
    FaultEventResponse,
    ProcessingResult,
)
from src.fault_triage.fault_events.services import FaultProcessor
from src.fault_triage.fault_events.taxonomy import TicketAction
from src.fault_triage.middleware.auth import validate_api_key

logger = logging.getLogger(__name__)
fault_events_router = APIRouter(prefix="/v1/fault_events", tags=["Fault Events"])


@fault_events_router.post(
    "", response_model=ProcessingResult, status_code=HTTPStatus.CREATED
)
async def ingest_fault_event(
    response: Response,
    payload: Any = Body(..., description="Fault event reported by a monitoring feed"),
    session: AsyncSession = Depends(verify_database),
    processor: FaultProcessor = Depends(get_fault_processor),
    _: str = Depends(validate_api_key),
):
    logger.info(
        f"Fault event received from source "
        f"{payload.get('source') if isinstance(payload, dict) else None}"
    )
    try:
        result = await processor.process(session, payload)
    except SQLAlchemyError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error processing fault event: {e}")
        raise FaultEventHTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR, message=str(e)
        )

    if not result.success:
        status_code = (
            HTTPStatus.CONFLICT
            if result.error_type == StorageConflictException.error_type
            else HTTPStatus.UNPROCESSABLE_ENTITY
        )
        return JSONResponse(
            status_code=status_code, content=result.model_dump(mode="json")
        )

    if result.ticket_action == TicketAction.UPDATE_EXISTING:
        response.status_code = HTTPStatus.OK
    return result


@fault_events_router.get("", response_model=List[FaultEventResponse])
async def list_fault_events(
    response: Response,
    params: FaultEventListParams = Depends(),
    session: AsyncSession = Depends(verify_database),
    repo: IFaultEventRepository = Depends(get_fault_event_repository),
    _: str = Depends(validate_api_key),
):
    tickets, total = await repo.list_fault_events(session, params)
    total_pages = (total + params.page_size - 1) // params.page_size

    # Set pagination headers
    response.headers["X-Total-Count"] = str(total)
    response.headers["X-Total-Pages"] = str(total_pages)
    response.headers["X-Current-Page"] = str(params.page)
    response.headers["X-Page-Size"] = str(params.page_size)

    return [FaultEventResponse.model_validate(ticket) for ticket in tickets]


@fault_events_router.get("/{fault_event_id}", response_model=FaultEventResponse)
async def get_fault_event(
    fault_event_id: int = Path(..., ge=1, le=MAX_DB_INT),
    session: AsyncSession = Depends(verify_database),
    repo: IFaultEventRepository = Depends(get_fault_event_repository),
    _: str = Depends(validate_api_key),
):
    ticket = await repo.get_by_id(session, fault_event_id)
    if ticket is None:
        logger.warning(f"Fault event {fault_event_id} not found")
        raise FaultEventNotFoundException(fault_event_id)
    return FaultEventResponse.model_validate(ticket)
