from typing import Optional

from fastapi import HTTPException, status

from parkpass.bookings.errors import BookingError, DenialReason, ErrorCode

ERROR_STATUS = {
    ErrorCode.PARK_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_VISIT_DATE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PARTY_SIZE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PRICE_CONFIGURATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorCode.TICKET_CANCELLED: status.HTTP_409_CONFLICT,
    ErrorCode.CANNOT_CANCEL_USED_TICKET: status.HTTP_409_CONFLICT,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.PAYMENT_ALREADY_COMPLETED: status.HTTP_409_CONFLICT,
    ErrorCode.PAYMENT_AMOUNT_MISMATCH: status.HTTP_400_BAD_REQUEST,
}

ERROR_MESSAGES = {
    ErrorCode.PARK_UNAVAILABLE: "Park is not available for booking",
    ErrorCode.INVALID_VISIT_DATE: "Visit date cannot be in the past",
    ErrorCode.INVALID_EMAIL: "Please enter a valid email address",
    ErrorCode.INVALID_PARTY_SIZE: "Invalid number of visitors",
    ErrorCode.INVALID_PRICE_CONFIGURATION: "Park pricing is misconfigured",
    ErrorCode.CAPACITY_EXCEEDED: "Not enough capacity left for this date",
    ErrorCode.TICKET_NOT_FOUND: "Ticket not found",
    ErrorCode.ALREADY_USED: "This ticket has already been used",
    ErrorCode.TICKET_CANCELLED: "This ticket has been cancelled",
    ErrorCode.CANNOT_CANCEL_USED_TICKET: "Cannot cancel a used ticket",
    ErrorCode.PERMISSION_DENIED: "Not enough permissions",
    ErrorCode.CONFLICT: "The ticket was changed by another request, please retry",
    ErrorCode.PAYMENT_ALREADY_COMPLETED: "Payment has already been completed",
    ErrorCode.PAYMENT_AMOUNT_MISMATCH: "Payment amount does not match the booking total",
}

DENIAL_MESSAGES = {
    DenialReason.DIFFERENT_PARK: "Ticket belongs to a different park",
    DenialReason.ROLE_NOT_PERMITTED: "Your role cannot perform this action",
}

def error_detail(error: BookingError) -> dict:
    message = ERROR_MESSAGES.get(error.code, error.code.value)
    if error.reason is not None:
        message = DENIAL_MESSAGES.get(error.reason, message)
    return {
        "code": error.code.value,
        "message": message,
        "field": error.field,
        "reason": error.reason.value if error.reason else None,
    }

def raise_for_error(error: Optional[BookingError]) -> None:
    """Translate a returned BookingError into an HTTPException"""
    if error is None:
        return
    raise HTTPException(
        status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error_detail(error)
    )
