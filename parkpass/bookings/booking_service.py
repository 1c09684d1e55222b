import logging
import secrets
import string
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from parkpass.auth.schemas import Actor
from parkpass.bookings.errors import BookingError, DataLayerError, ErrorCode
from parkpass.bookings.guard import Action, authorize, visible_park_ids
from parkpass.bookings.pricing import compute_total
from parkpass.bookings.repository import BookingRepository
from parkpass.bookings.schemas import (
    BookingAnalytics, BookingCreateRequest, BookingSearchFilters, ParkBookingStats,
    PaymentStatus, PaymentUpdateRequest, PricePreview, TicketStatus
)
from parkpass.bookings.state_machine import TicketEvent, plan_transition
from parkpass.bookings.validation import park_today, validate_booking_request
from parkpass.config import settings
from parkpass.models import Booking

logger = logging.getLogger(__name__)

TICKET_NO_ALPHABET = string.ascii_uppercase + string.digits
TICKET_NO_LENGTH = 8

def random_ticket_no() -> str:
    return "".join(secrets.choice(TICKET_NO_ALPHABET) for _ in range(TICKET_NO_LENGTH))

class BookingService:
    """Service for visitor bookings: pricing, creation, payment and reporting"""

    def __init__(self, db: Session, repository: Optional[BookingRepository] = None):
        self.db = db
        self.repository = repository or BookingRepository(db)

    def preview_price(self, park_id: int, adults: int, children: int) -> Union[PricePreview, BookingError]:
        """Price a party before booking, using the same rule as create_booking"""
        park = self.repository.get_park(park_id)
        if park is None or not park.is_active:
            return BookingError(code=ErrorCode.PARK_UNAVAILABLE, field="park_id", context={"park_id": park_id})

        total = compute_total(park, adults, children)
        if isinstance(total, BookingError):
            return total

        return PricePreview(
            park_id=park.id,
            adults=adults,
            children=children,
            adult_price=park.adult_price,
            child_price=park.child_price,
            total_amount=total,
            currency=settings.CURRENCY
        )

    def create_booking(self, request: BookingCreateRequest, today: Optional[date] = None) -> Union[Booking, BookingError]:
        """Validate, price and store a new booking.

        The booking starts ``active`` with a ``pending`` payment and already
        carries its ticket number. The total is fixed here and never
        recomputed, even if the park's prices change later.
        """
        park = self.repository.get_park(request.park_id)

        booked_visitors = 0
        if park is not None and isinstance(request.visit_date, date):
            booked_visitors = self.repository.count_active_bookings(park.id, request.visit_date)

        error = validate_booking_request(request, park, booked_visitors, today or park_today())
        if error:
            logger.info("Booking request rejected for park %s: %s", request.park_id, error)
            return error

        total = compute_total(park, request.adults, request.children)
        if isinstance(total, BookingError):
            logger.warning("Park %s has an invalid price configuration: %s", park.id, total)
            return total

        booking = self.repository.create_booking({
            "ticket_no": self.generate_ticket_no(),
            "park_id": park.id,
            "visit_date": request.visit_date,
            "visitor_name": request.visitor_name,
            "visitor_email": request.visitor_email.strip(),
            "visitor_phone": request.visitor_phone,
            "adults": request.adults,
            "children": request.children,
            "total_amount": total,
            "status": TicketStatus.ACTIVE.value,
            "payment_status": PaymentStatus.PENDING.value,
            "is_downloaded": False,
            "is_printed": False
        })

        logger.info(
            "Created booking %s (ticket %s) for park %s on %s, total %s",
            booking.id, booking.ticket_no, park.id, booking.visit_date, booking.total_amount
        )
        return booking

    def get_booking(self, booking_id: int) -> Union[Booking, BookingError]:
        """Visitor-facing lookup by internal booking id"""
        booking = self.repository.get_booking_by_id(booking_id)
        if booking is None:
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"booking_id": booking_id})
        return booking

    def record_payment(self, booking_id: int, payment: PaymentUpdateRequest) -> Union[Booking, BookingError]:
        """Record the outcome of a payment attempt on an active booking"""
        booking = self.repository.get_booking_by_id(booking_id)
        if booking is None:
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"booking_id": booking_id})

        transition = plan_transition(booking, TicketEvent.RECORD_PAYMENT, payment=payment)
        if isinstance(transition, BookingError):
            logger.info("Payment for booking %s rejected: %s", booking_id, transition)
            return transition

        changes = dict(transition.changes)
        if changes.get("payment_status") == PaymentStatus.COMPLETED.value and not changes.get("payment_id"):
            changes["payment_id"] = f"PAY_{secrets.token_hex(8).upper()}"
        if transition.assign_ticket_no:
            changes["ticket_no"] = self.generate_ticket_no()

        updated = self.repository.update_booking_status(
            booking.id,
            transition.from_status,
            transition.to_status,
            changes,
            expected_payment_status=PaymentStatus(booking.payment_status)
        )
        if updated is None:
            logger.warning("Payment for booking %s lost a concurrent update", booking_id)
            return BookingError(code=ErrorCode.CONFLICT, context={"booking_id": booking_id})

        logger.info("Booking %s payment %s (%s)", booking_id, updated.payment_status, updated.payment_id)
        return updated

    def mark_printed(self, booking_id: int) -> Union[Booking, BookingError]:
        return self._raise_flag(booking_id, is_printed=True)

    def mark_downloaded(self, booking_id: int) -> Union[Booking, BookingError]:
        return self._raise_flag(booking_id, is_downloaded=True)

    def search_bookings(
        self,
        actor: Actor,
        filters: BookingSearchFilters,
        skip: int = 0,
        limit: int = 50
    ) -> Union[Tuple[List[Booking], int], BookingError]:
        """List bookings visible to the actor"""
        denial = authorize(actor, filters.park_id, Action.SEARCH)
        if denial:
            return denial
        return self.repository.search_bookings(filters, visible_park_ids(actor), skip=skip, limit=limit)

    def get_booking_analytics(
        self,
        actor: Actor,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> Union[BookingAnalytics, BookingError]:
        """Booking, visitor and revenue totals per park.

        Revenue counts completed payments on tickets that were not cancelled.
        """
        denial = authorize(actor, None, Action.ANALYTICS)
        if denial:
            return denial

        rows = self.repository.booking_totals(visible_park_ids(actor), date_from, date_to)

        status_counts = defaultdict(int)
        per_park = {}
        for park_id, park_name, status, payment_status, bookings, visitors, amount in rows:
            status_counts[status] += bookings
            stats = per_park.setdefault(park_id, {
                "park_id": park_id, "park_name": park_name,
                "bookings": 0, "visitors": 0, "revenue": Decimal("0")
            })
            stats["bookings"] += bookings
            if status != TicketStatus.CANCELLED.value:
                stats["visitors"] += int(visitors)
                if payment_status == PaymentStatus.COMPLETED.value:
                    stats["revenue"] += Decimal(str(amount))

        parks = [ParkBookingStats(**stats) for stats in sorted(per_park.values(), key=lambda s: s["revenue"], reverse=True)]
        total_revenue = sum((p.revenue for p in parks), Decimal("0"))
        paid_bookings = sum(
            bookings for _, _, status, payment_status, bookings, _, _ in rows
            if status != TicketStatus.CANCELLED.value and payment_status == PaymentStatus.COMPLETED.value
        )
        average = (total_revenue / paid_bookings).quantize(Decimal("0.01")) if paid_bookings else Decimal("0.00")

        return BookingAnalytics(
            total_bookings=sum(status_counts.values()),
            active_bookings=status_counts[TicketStatus.ACTIVE.value],
            used_bookings=status_counts[TicketStatus.USED.value],
            cancelled_bookings=status_counts[TicketStatus.CANCELLED.value],
            total_visitors=sum(p.visitors for p in parks),
            total_revenue=total_revenue,
            average_booking_value=average,
            currency=settings.CURRENCY,
            parks=parks
        )

    def generate_ticket_no(self) -> str:
        """Draw an unused 8-character ticket number"""
        for _ in range(settings.TICKET_NO_MAX_ATTEMPTS):
            candidate = random_ticket_no()
            if not self.repository.ticket_no_exists(candidate):
                return candidate
        raise DataLayerError("Could not allocate a unique ticket number")

    def _raise_flag(self, booking_id: int, **flags: bool) -> Union[Booking, BookingError]:
        booking = self.repository.set_flags(booking_id, **flags)
        if booking is None:
            return BookingError(code=ErrorCode.TICKET_NOT_FOUND, context={"booking_id": booking_id})
        return booking
