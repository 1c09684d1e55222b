from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from enum import Enum

class ErrorCode(str, Enum):
    """Business error taxonomy for bookings and tickets"""
    PARK_UNAVAILABLE = "park_unavailable"
    INVALID_VISIT_DATE = "invalid_visit_date"
    INVALID_EMAIL = "invalid_email"
    INVALID_PARTY_SIZE = "invalid_party_size"
    INVALID_PRICE_CONFIGURATION = "invalid_price_configuration"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    TICKET_NOT_FOUND = "ticket_not_found"
    ALREADY_USED = "already_used"
    TICKET_CANCELLED = "ticket_cancelled"
    CANNOT_CANCEL_USED_TICKET = "cannot_cancel_used_ticket"
    PERMISSION_DENIED = "permission_denied"
    CONFLICT = "conflict"
    PAYMENT_ALREADY_COMPLETED = "payment_already_completed"
    PAYMENT_AMOUNT_MISMATCH = "payment_amount_mismatch"

class DenialReason(str, Enum):
    """Why the authorization guard refused an action"""
    DIFFERENT_PARK = "different_park"
    ROLE_NOT_PERMITTED = "role_not_permitted"

class BookingError(BaseModel):
    """An expected business failure, returned to the caller instead of raised.

    ``field`` names the offending request field for validation failures,
    ``reason`` is only set for ``PERMISSION_DENIED``.
    """
    code: ErrorCode
    field: Optional[str] = None
    reason: Optional[DenialReason] = None
    context: Dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        parts = [self.code.value]
        if self.field:
            parts.append(f"field={self.field}")
        if self.reason:
            parts.append(f"reason={self.reason.value}")
        return " ".join(parts)

class DataLayerError(Exception):
    """Raised when the persistence layer fails unexpectedly"""
