import logging
from datetime import datetime
from io import BytesIO
from typing import Optional, Union

import qrcode
from qrcode import constants
from PIL import Image
from sqlalchemy.orm import Session

from parkpass.auth.schemas import Actor
from parkpass.bookings.errors import BookingError, ErrorCode
from parkpass.bookings.guard import Action, authorize
from parkpass.bookings.repository import BookingRepository
from parkpass.bookings.schemas import Booking as BookingSnapshot
from parkpass.bookings.state_machine import TicketEvent, plan_transition
from parkpass.models import Booking

logger = logging.getLogger(__name__)

EVENT_ACTIONS = {
    TicketEvent.MARK_USED: Action.MARK_USED,
    TicketEvent.CANCEL: Action.CANCEL,
    TicketEvent.DELETE: Action.DELETE,
}

class TicketService:
    """Gate and admin operations on issued tickets.

    Every operation resolves the ticket by ticket number or booking id,
    checks the actor against the ticket's park, and only then plans and
    applies a state transition.
    """

    def __init__(self, db: Session, repository: Optional[BookingRepository] = None):
        self.db = db
        self.repository = repository or BookingRepository(db)

    def get_ticket(self, ref: str, actor: Actor) -> Union[Booking, BookingError]:
        return self._load_authorized(ref, actor, Action.VIEW)

    def mark_ticket_used(self, ref: str, actor: Actor, now: Optional[datetime] = None) -> Union[Booking, BookingError]:
        """Redeem an active ticket at the gate"""
        return self._transition(ref, actor, TicketEvent.MARK_USED, now=now)

    def cancel_ticket(self, ref: str, actor: Actor) -> Union[Booking, BookingError]:
        """Cancel an active ticket; cancelling twice is a no-op"""
        return self._transition(ref, actor, TicketEvent.CANCEL)

    def delete_ticket(self, ref: str, actor: Actor) -> Union[BookingSnapshot, BookingError]:
        """Permanently remove a ticket in any status.

        Returns a snapshot taken before deletion since the row no longer
        exists afterwards.
        """
        booking = self._load_authorized(ref, actor, Action.DELETE)
        if isinstance(booking, BookingError):
            return booking

        snapshot = BookingSnapshot.model_validate(booking)
        transition = plan_transition(booking, TicketEvent.DELETE)

        if not transition.removes_record or not self.repository.delete_booking(booking.id):
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"ref": ref})

        logger.info("Ticket %s (booking %s) deleted by user %s", snapshot.ticket_no, snapshot.id, actor.user_id)
        return snapshot

    def generate_qr_code(self, booking: Booking, size: int = 300) -> bytes:
        """Render a PNG QR code carrying the ticket number for gate scanning"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(booking.ticket_no or str(booking.id))
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")
        qr_image = qr_image.resize((size, size), Image.LANCZOS)

        buffer = BytesIO()
        qr_image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _load_authorized(self, ref: str, actor: Actor, action: Action) -> Union[Booking, BookingError]:
        booking = self.repository.find_booking(ref)
        if booking is None:
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"ref": ref})

        denial = authorize(actor, booking.park_id, action)
        if denial:
            logger.warning(
                "User %s (%s) denied %s on ticket %s: %s",
                actor.user_id, actor.role, action.value, booking.ticket_no, denial.reason.value
            )
            return denial
        return booking

    def _transition(
        self,
        ref: str,
        actor: Actor,
        event: TicketEvent,
        now: Optional[datetime] = None
    ) -> Union[Booking, BookingError]:
        booking = self._load_authorized(ref, actor, EVENT_ACTIONS[event])
        if isinstance(booking, BookingError):
            return booking

        transition = plan_transition(booking, event, now=now)
        if isinstance(transition, BookingError):
            return transition
        if transition.is_noop:
            return booking

        updated = self.repository.update_booking_status(
            booking.id, transition.from_status, transition.to_status, transition.changes
        )
        if updated is None:
            return self._explain_lost_race(booking.id, event)

        logger.info(
            "Ticket %s %s -> %s by user %s",
            updated.ticket_no, transition.from_status.value, transition.to_status.value, actor.user_id
        )
        return updated

    def _explain_lost_race(self, booking_id: int, event: TicketEvent) -> Union[Booking, BookingError]:
        """Re-read a ticket whose conditional update matched no row"""
        current = self.repository.get_booking_by_id(booking_id)
        if current is None:
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"booking_id": booking_id})

        replanned = plan_transition(current, event)
        if isinstance(replanned, BookingError):
            logger.warning("Ticket %s changed concurrently: %s", current.ticket_no, replanned.code.value)
            return replanned
        if replanned.is_noop:
            return current

        logger.warning("Ticket %s update conflicted with a concurrent change", current.ticket_no)
        return BookingError(code=ErrorCode.CONFLICT, context={"status": current.status})

