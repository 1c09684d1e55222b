import logging
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from parkpass.bookings.errors import DataLayerError
from parkpass.bookings.schemas import BookingSearchFilters, PaymentStatus, TicketStatus
from parkpass.models import Booking, Park

logger = logging.getLogger(__name__)

TICKET_NO_PATTERN = re.compile(r"^[A-Z0-9]{8}$")
MAX_BOOKING_ID = 2 ** 63 - 1

class BookingRepository:
    """Persistence operations the booking rules depend on.

    Every status change goes through ``update_booking_status``, a single
    conditional UPDATE that only matches while the row still has the expected
    status. Database failures are rolled back and re-raised as
    ``DataLayerError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, error: Exception) -> DataLayerError:
        self.db.rollback()
        logger.exception("Booking data layer failure during %s", operation)
        return DataLayerError(f"{operation} failed: {error}")

    def get_park(self, park_id: int) -> Optional[Park]:
        try:
            return self.db.query(Park).filter(Park.id == park_id).first()
        except SQLAlchemyError as e:
            raise self._fail("get_park", e)

    def count_active_bookings(self, park_id: int, visit_date: date) -> int:
        """Visitors already holding active tickets for a park and date"""
        try:
            total = self.db.query(
                func.coalesce(func.sum(Booking.adults + Booking.children), 0)
            ).filter(
                Booking.park_id == park_id,
                Booking.visit_date == visit_date,
                Booking.status == TicketStatus.ACTIVE.value,
                Booking.payment_status != PaymentStatus.FAILED.value
            ).scalar()
        except SQLAlchemyError as e:
            raise self._fail("count_active_bookings", e)
        return int(total or 0)

    def ticket_no_exists(self, ticket_no: str) -> bool:
        try:
            return self.db.query(Booking.id).filter(Booking.ticket_no == ticket_no).first() is not None
        except SQLAlchemyError as e:
            raise self._fail("ticket_no_exists", e)

    def create_booking(self, record: Dict[str, Any]) -> Booking:
        booking = Booking(**record)
        try:
            self.db.add(booking)
            self.db.commit()
            self.db.refresh(booking)
        except SQLAlchemyError as e:
            raise self._fail("create_booking", e)
        return booking

    def get_booking_by_id(self, booking_id: int) -> Optional[Booking]:
        try:
            return self.db.query(Booking).options(joinedload(Booking.park)).filter(
                Booking.id == booking_id
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("get_booking_by_id", e)

    def find_booking(self, id_or_ticket_no: Union[int, str]) -> Optional[Booking]:
        """Resolve a booking by ticket number first, then by internal id"""
        ref = str(id_or_ticket_no).strip().upper()
        try:
            query = self.db.query(Booking).options(joinedload(Booking.park))
            if TICKET_NO_PATTERN.match(ref):
                booking = query.filter(Booking.ticket_no == ref).first()
                if booking:
                    return booking
            if ref.isdigit() and int(ref) <= MAX_BOOKING_ID:
                return query.filter(Booking.id == int(ref)).first()
        except SQLAlchemyError as e:
            raise self._fail("find_booking", e)
        return None

    def update_booking_status(
        self,
        booking_id: int,
        expected_status: TicketStatus,
        new_status: TicketStatus,
        extra_fields: Optional[Dict[str, Any]] = None,
        expected_payment_status: Optional[PaymentStatus] = None
    ) -> Optional[Booking]:
        """Compare-and-set on ``status``; returns None when the row moved on"""
        values = dict(extra_fields or {})
        values["status"] = new_status.value

        try:
            query = self.db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.status == expected_status.value
            )
            if expected_payment_status is not None:
                query = query.filter(Booking.payment_status == expected_payment_status.value)

            updated = query.update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update_booking_status", e)

        if updated == 0:
            return None
        return self.get_booking_by_id(booking_id)

    def set_flags(self, booking_id: int, **flags: bool) -> Optional[Booking]:
        """Raise print/download flags; they are never cleared"""
        values = {name: True for name, raised in flags.items() if raised}
        try:
            if values:
                self.db.query(Booking).filter(Booking.id == booking_id).update(
                    values, synchronize_session=False
                )
                self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("set_flags", e)
        return self.get_booking_by_id(booking_id)

    def delete_booking(self, booking_id: int) -> bool:
        try:
            deleted = self.db.query(Booking).filter(Booking.id == booking_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete_booking", e)
        return deleted > 0

    def search_bookings(
        self,
        filters: BookingSearchFilters,
        park_ids: Optional[Iterable[int]] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Booking], int]:
        """Filtered, newest-first booking list; ``park_ids`` limits the parks"""
        query = self.db.query(Booking).options(joinedload(Booking.park))

        if park_ids is not None:
            query = query.filter(Booking.park_id.in_(list(park_ids)))
        if filters.park_id:
            query = query.filter(Booking.park_id == filters.park_id)
        if filters.status:
            query = query.filter(Booking.status == filters.status.value)
        if filters.payment_status:
            query = query.filter(Booking.payment_status == filters.payment_status.value)
        if filters.visit_date_from:
            query = query.filter(Booking.visit_date >= filters.visit_date_from)
        if filters.visit_date_to:
            query = query.filter(Booking.visit_date <= filters.visit_date_to)
        if filters.ticket_no:
            query = query.filter(Booking.ticket_no.ilike(f"%{filters.ticket_no}%"))
        if filters.visitor_email:
            query = query.filter(Booking.visitor_email.ilike(f"%{filters.visitor_email}%"))

        try:
            total = query.count()
            bookings = query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            raise self._fail("search_bookings", e)
        return bookings, total

    def booking_totals(
        self,
        park_ids: Optional[Iterable[int]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Tuple]:
        """Rows of (park_id, park_name, status, payment_status, bookings, visitors, amount)"""
        query = self.db.query(
            Booking.park_id,
            Park.name,
            Booking.status,
            Booking.payment_status,
            func.count(Booking.id),
            func.coalesce(func.sum(Booking.adults + Booking.children), 0),
            func.coalesce(func.sum(Booking.total_amount), 0)
        ).join(Park, Park.id == Booking.park_id)

        if park_ids is not None:
            query = query.filter(Booking.park_id.in_(list(park_ids)))
        if date_from:
            query = query.filter(Booking.visit_date >= date_from)
        if date_to:
            query = query.filter(Booking.visit_date <= date_to)

        try:
            return query.group_by(
                Booking.park_id, Park.name, Booking.status, Booking.payment_status
            ).all()
        except SQLAlchemyError as e:
            raise self._fail("booking_totals", e)
