from datetime import datetime
from types import SimpleNamespace

from parkpass.auth.schemas import Actor
from parkpass.bookings.errors import DenialReason, ErrorCode
from parkpass.bookings.schemas import TicketStatus

NOW = datetime(2030, 6, 2, 10, 30)

def test_lookup_by_ticket_no_or_id(ticket_service, checker, make_booking):
    booking = make_booking()

    assert ticket_service.get_ticket(booking.ticket_no, checker).id == booking.id
    assert ticket_service.get_ticket(booking.ticket_no.lower(), checker).id == booking.id
    assert ticket_service.get_ticket(str(booking.id), checker).id == booking.id
    assert ticket_service.get_ticket("ZZZZZZZZ", checker).code == ErrorCode.TICKET_NOT_FOUND

def test_mark_used_once(ticket_service, checker, make_booking):
    booking = make_booking()

    used = ticket_service.mark_ticket_used(booking.ticket_no, checker, now=NOW)
    assert used.status == TicketStatus.USED.value
    first_used_at = used.used_at
    assert first_used_at is not None

    again = ticket_service.mark_ticket_used(booking.ticket_no, checker)
    assert again.code == ErrorCode.ALREADY_USED
    assert ticket_service.get_ticket(booking.ticket_no, checker).used_at == first_used_at

def test_used_ticket_cannot_be_cancelled(ticket_service, checker, make_booking):
    booking = make_booking()
    ticket_service.mark_ticket_used(booking.ticket_no, checker)

    assert ticket_service.cancel_ticket(booking.ticket_no, checker).code == ErrorCode.CANNOT_CANCEL_USED_TICKET

def test_cancel_twice_is_a_noop(ticket_service, checker, make_booking):
    booking = make_booking()

    first = ticket_service.cancel_ticket(booking.ticket_no, checker)
    second = ticket_service.cancel_ticket(booking.ticket_no, checker)

    assert first.status == TicketStatus.CANCELLED.value
    assert second.status == TicketStatus.CANCELLED.value
    assert ticket_service.mark_ticket_used(booking.ticket_no, checker).code == ErrorCode.TICKET_CANCELLED

def test_checker_from_another_park_is_denied(ticket_service, other_park, make_booking):
    booking = make_booking()
    outsider = Actor(user_id=9, role="ticket-checker", assigned_parks=frozenset({other_park.id}))

    result = ticket_service.mark_ticket_used(booking.ticket_no, outsider)

    assert result.code == ErrorCode.PERMISSION_DENIED
    assert result.reason == DenialReason.DIFFERENT_PARK
    assert ticket_service.get_ticket(booking.ticket_no, Actor(role="super-admin")).status == "active"

def test_delete_is_final(ticket_service, super_admin, make_booking):
    booking = make_booking()
    ticket_no, booking_id = booking.ticket_no, booking.id
    ticket_service.mark_ticket_used(ticket_no, super_admin)

    snapshot = ticket_service.delete_ticket(ticket_no, super_admin)
    assert snapshot.ticket_no == ticket_no
    assert snapshot.status == TicketStatus.USED

    assert ticket_service.get_ticket(ticket_no, super_admin).code == ErrorCode.TICKET_NOT_FOUND
    assert ticket_service.mark_ticket_used(ticket_no, super_admin).code == ErrorCode.TICKET_NOT_FOUND
    assert ticket_service.cancel_ticket(str(booking_id), super_admin).code == ErrorCode.TICKET_NOT_FOUND
    assert ticket_service.delete_ticket(ticket_no, super_admin).code == ErrorCode.TICKET_NOT_FOUND

def _stale_copy(booking):
    return SimpleNamespace(
        id=booking.id, park_id=booking.park_id, ticket_no=booking.ticket_no,
        status="active", payment_status=booking.payment_status
    )

def test_concurrent_redemption_only_one_wins(monkeypatch, ticket_service, checker, make_booking):
    booking = make_booking()
    stale = _stale_copy(booking)

    assert ticket_service.mark_ticket_used(booking.ticket_no, checker).status == "used"

    # Second gate read the ticket before the first redemption committed
    monkeypatch.setattr(ticket_service.repository, "find_booking", lambda ref: stale)
    result = ticket_service.mark_ticket_used(booking.ticket_no, checker)

    assert result.code == ErrorCode.ALREADY_USED

def test_concurrent_cancel_after_cancel_is_noop(monkeypatch, ticket_service, checker, make_booking):
    booking = make_booking()
    stale = _stale_copy(booking)
    ticket_service.cancel_ticket(booking.ticket_no, checker)

    monkeypatch.setattr(ticket_service.repository, "find_booking", lambda ref: stale)
    result = ticket_service.cancel_ticket(booking.ticket_no, checker)

    assert result.status == "cancelled"

def test_concurrent_cancel_after_redemption(monkeypatch, ticket_service, checker, make_booking):
    booking = make_booking()
    stale = _stale_copy(booking)
    ticket_service.mark_ticket_used(booking.ticket_no, checker)

    monkeypatch.setattr(ticket_service.repository, "find_booking", lambda ref: stale)
    result = ticket_service.cancel_ticket(booking.ticket_no, checker)

    assert result.code == ErrorCode.CANNOT_CANCEL_USED_TICKET

def test_conditional_update_rejects_unexpected_status(ticket_service, make_booking):
    booking = make_booking()
    repository = ticket_service.repository

    assert repository.update_booking_status(booking.id, TicketStatus.USED, TicketStatus.CANCELLED) is None
    assert repository.update_booking_status(booking.id, TicketStatus.ACTIVE, TicketStatus.CANCELLED).status == "cancelled"

def test_qr_code_is_png(ticket_service, make_booking):
    png = ticket_service.generate_qr_code(make_booking(), size=200)
    assert png.startswith(b"\x89PNG")

def test_out_of_range_numeric_ref_is_not_found(ticket_service, super_admin, make_booking):
    make_booking()
    assert ticket_service.get_ticket("99999999999999999999", super_admin).code == ErrorCode.TICKET_NOT_FOUND
