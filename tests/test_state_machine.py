from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from parkpass.bookings.errors import BookingError, ErrorCode
from parkpass.bookings.schemas import PaymentStatus, PaymentUpdateRequest, TicketStatus
from parkpass.bookings.state_machine import TicketEvent, plan_transition

NOW = datetime(2030, 6, 2, 10, 30)

def ticket(status="active", payment_status="pending", ticket_no="AB12CD34", total="290.00"):
    return SimpleNamespace(
        status=status,
        payment_status=payment_status,
        payment_id=None,
        ticket_no=ticket_no,
        total_amount=Decimal(total),
    )

def test_mark_used_sets_used_at():
    transition = plan_transition(ticket(), TicketEvent.MARK_USED, now=NOW)
    assert transition.from_status == TicketStatus.ACTIVE
    assert transition.to_status == TicketStatus.USED
    assert transition.changes == {"used_at": NOW}

@pytest.mark.parametrize("status,code", [
    ("used", ErrorCode.ALREADY_USED),
    ("cancelled", ErrorCode.TICKET_CANCELLED),
])
def test_mark_used_on_terminal_ticket(status, code):
    result = plan_transition(ticket(status=status), TicketEvent.MARK_USED, now=NOW)
    assert isinstance(result, BookingError)
    assert result.code == code

def test_cancel_active_ticket():
    transition = plan_transition(ticket(), TicketEvent.CANCEL)
    assert transition.to_status == TicketStatus.CANCELLED
    assert not transition.is_noop

def test_cancel_is_idempotent():
    transition = plan_transition(ticket(status="cancelled"), TicketEvent.CANCEL)
    assert transition.is_noop

def test_cannot_cancel_used_ticket():
    result = plan_transition(ticket(status="used"), TicketEvent.CANCEL)
    assert result.code == ErrorCode.CANNOT_CANCEL_USED_TICKET

@pytest.mark.parametrize("status", ["active", "used", "cancelled"])
def test_delete_allowed_from_any_status(status):
    transition = plan_transition(ticket(status=status), TicketEvent.DELETE)
    assert transition.removes_record

def test_completed_payment():
    payment = PaymentUpdateRequest(payment_status="completed", payment_id="PAY_1", payment_method="upi")
    transition = plan_transition(ticket(), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert transition.to_status == TicketStatus.ACTIVE
    assert transition.changes == {"payment_status": "completed", "payment_id": "PAY_1", "payment_method": "upi"}
    assert not transition.assign_ticket_no

def test_completed_payment_assigns_missing_ticket_no():
    payment = PaymentUpdateRequest(payment_status="completed")
    transition = plan_transition(ticket(ticket_no=None), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert transition.assign_ticket_no

def test_failed_payment_keeps_ticket_active():
    payment = PaymentUpdateRequest(payment_status="failed")
    transition = plan_transition(ticket(), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert transition.changes == {"payment_status": "failed"}
    assert transition.to_status == TicketStatus.ACTIVE

def test_payment_amount_must_match_total():
    payment = PaymentUpdateRequest(payment_status="completed", amount=Decimal("100"))
    result = plan_transition(ticket(), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert result.code == ErrorCode.PAYMENT_AMOUNT_MISMATCH
    assert result.field == "amount"

def test_payment_cannot_complete_twice():
    payment = PaymentUpdateRequest(payment_status="completed")
    result = plan_transition(ticket(payment_status="completed"), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert result.code == ErrorCode.PAYMENT_ALREADY_COMPLETED

def test_payment_on_cancelled_ticket():
    payment = PaymentUpdateRequest(payment_status="completed")
    result = plan_transition(ticket(status="cancelled"), TicketEvent.RECORD_PAYMENT, payment=payment)
    assert result.code == ErrorCode.TICKET_CANCELLED

def test_pending_is_not_a_payment_outcome():
    with pytest.raises(ValueError):
        PaymentUpdateRequest(payment_status=PaymentStatus.PENDING)

def test_payment_details_required():
    with pytest.raises(ValueError):
        plan_transition(ticket(), TicketEvent.RECORD_PAYMENT)
