from http import HTTPStatus
from typing import Optional

from fastapi import HTTPException


class FaultEventException(Exception):
    """Base exception class for fault event processing errors."""

    error_type = "processing_error"
    message = "An error occurred during fault event processing."

    def __init__(
        self, message: str = "An error occurred during fault event processing."
    ):
        self.message = message or self.message
        super().__init__(self.message)


class FaultDecodeException(FaultEventException):
    """Queue message body is not a JSON object."""

    error_type = "decode_error"

    def __init__(self, payload: str, reason: str):
        self.payload = payload
        super().__init__(f"Failed to decode fault payload '{payload}': {reason}")


class FaultValidationException(FaultEventException):
    """A required field is missing or a field cannot be parsed."""

    error_type = "validation_error"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid fault event field '{field}': {reason}")


class InvalidReferenceException(FaultEventException):
    """Customer or asset reference does not resolve, or ownership mismatch."""

    error_type = "invalid_reference"

    def __init__(self, message: str):
        super().__init__(message)

    @classmethod
    def missing_customer(cls, customer_id: int) -> "InvalidReferenceException":
        return cls(f"Invalid customer: customer_id {customer_id} does not exist")

    @classmethod
    def missing_asset(cls, location_asset_id: int) -> "InvalidReferenceException":
        return cls(
            f"Invalid location asset: location_asset_id {location_asset_id} "
            f"does not exist"
        )

    @classmethod
    def ownership_mismatch(
        cls, location_asset_id: int, owner_id: int, customer_id: int
    ) -> "InvalidReferenceException":
        return cls(
            f"Invalid location asset: location_asset_id {location_asset_id} "
            f"belongs to customer {owner_id}, not customer {customer_id}"
        )


class StorageConflictException(FaultEventException):
    """Concurrent write on the same (source, id_from_source) key."""

    error_type = "storage_conflict"

    def __init__(self, source: str, id_from_source: Optional[int], details: str = ""):
        self.source = source
        self.id_from_source = id_from_source
        message = (
            f"Concurrent write conflict for fault event "
            f"source='{source}' id_from_source={id_from_source}"
        )
        if details != "":
            message += f" Details: {details}"
        super().__init__(message)


class FaultEventHTTPException(HTTPException):
    """Base exception class for fault event API errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "An error occurred in fault event processing."

    def __init__(
        self,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = "An error occurred in fault event processing.",
    ):
        self.status_code = status_code
        self.message = message or self.message
        super().__init__(status_code=status_code, detail=self.message)


class FaultEventNotFoundException(FaultEventHTTPException):
    """Exception for when no fault event ticket exists with the given ID."""

    status_code = HTTPStatus.NOT_FOUND
    message = "Fault event does not exist."

    def __init__(self, fault_event_id: int):
        self.fault_event_id = fault_event_id
        message = f"{self.message} Fault event ID: {fault_event_id}"
        super().__init__(status_code=self.status_code, message=message)
