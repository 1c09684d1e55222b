"""
Ticket lifecycle rules.

A booking doubles as the visitor's ticket. Its ``status`` starts ``active``
and may move once, to ``used`` (redeemed at the gate) or ``cancelled``.
Both are terminal. Deletion removes the record from any status. Payment is a
separate axis recorded while the ticket is still active.

``plan_transition`` only decides; it never writes. The caller applies the
returned transition as a conditional update guarded by ``from_status`` so
two concurrent redemptions cannot both succeed.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from parkpass.bookings.errors import BookingError, ErrorCode
from parkpass.bookings.schemas import PaymentStatus, TicketStatus

TERMINAL_STATUSES = frozenset({TicketStatus.USED, TicketStatus.CANCELLED})

class TicketEvent(str, Enum):
    MARK_USED = "mark_used"
    CANCEL = "cancel"
    DELETE = "delete"
    RECORD_PAYMENT = "record_payment"

class Transition(BaseModel):
    """A planned, not yet applied, change to a booking"""
    event: TicketEvent
    from_status: TicketStatus
    to_status: Optional[TicketStatus] = None
    changes: Dict[str, Any] = Field(default_factory=dict)
    assign_ticket_no: bool = False
    removes_record: bool = False
    is_noop: bool = False

def _terminal_error(status: TicketStatus) -> BookingError:
    if status == TicketStatus.USED:
        return BookingError(code=ErrorCode.ALREADY_USED, context={"status": status.value})
    return BookingError(code=ErrorCode.TICKET_CANCELLED, context={"status": status.value})

def plan_transition(
    booking: Any,
    event: TicketEvent,
    now: Optional[datetime] = None,
    payment: Any = None
) -> Union[Transition, BookingError]:
    """Decide how ``event`` changes ``booking``, or why it cannot.

    ``payment`` is required for ``RECORD_PAYMENT`` and must expose
    ``payment_status``, ``payment_id``, ``payment_method`` and ``amount``.
    """
    status = TicketStatus(booking.status)

    if event == TicketEvent.DELETE:
        return Transition(event=event, from_status=status, removes_record=True)

    if event == TicketEvent.MARK_USED:
        if status in TERMINAL_STATUSES:
            return _terminal_error(status)
        return Transition(
            event=event,
            from_status=status,
            to_status=TicketStatus.USED,
            changes={"used_at": now or datetime.now(timezone.utc)}
        )

    if event == TicketEvent.CANCEL:
        if status == TicketStatus.USED:
            return BookingError(
                code=ErrorCode.CANNOT_CANCEL_USED_TICKET,
                context={"status": status.value}
            )
        if status == TicketStatus.CANCELLED:
            # Repeated cancel clicks are harmless
            return Transition(
                event=event,
                from_status=status,
                to_status=TicketStatus.CANCELLED,
                is_noop=True
            )
        return Transition(event=event, from_status=status, to_status=TicketStatus.CANCELLED)

    if event == TicketEvent.RECORD_PAYMENT:
        return _plan_payment(booking, status, payment)

    raise ValueError(f"Unknown ticket event: {event}")

def _plan_payment(booking: Any, status: TicketStatus, payment: Any) -> Union[Transition, BookingError]:
    if payment is None:
        raise ValueError("Payment details are required to record a payment")

    if status in TERMINAL_STATUSES:
        return _terminal_error(status)

    if PaymentStatus(booking.payment_status) == PaymentStatus.COMPLETED:
        return BookingError(
            code=ErrorCode.PAYMENT_ALREADY_COMPLETED,
            context={"payment_id": booking.payment_id}
        )

    new_payment_status = PaymentStatus(payment.payment_status)
    changes: Dict[str, Any] = {"payment_status": new_payment_status.value}

    if new_payment_status == PaymentStatus.COMPLETED:
        amount = getattr(payment, "amount", None)
        if amount is not None and Decimal(str(amount)) != Decimal(str(booking.total_amount)):
            return BookingError(
                code=ErrorCode.PAYMENT_AMOUNT_MISMATCH,
                field="amount",
                context={"expected": str(booking.total_amount), "received": str(amount)}
            )
        changes["payment_id"] = payment.payment_id
        changes["payment_method"] = payment.payment_method

    return Transition(
        event=TicketEvent.RECORD_PAYMENT,
        from_status=status,
        to_status=status,
        changes=changes,
        assign_ticket_no=new_payment_status == PaymentStatus.COMPLETED and not booking.ticket_no
    )
