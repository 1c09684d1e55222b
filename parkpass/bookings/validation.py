from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from email_validator import EmailNotValidError, validate_email

from parkpass.bookings.errors import BookingError, ErrorCode
from parkpass.bookings.pricing import check_party_size
from parkpass.config import settings

def park_today(timezone: Optional[str] = None) -> date:
    """Current calendar date at the parks"""
    return datetime.now(ZoneInfo(timezone or settings.PARK_TIMEZONE)).date()

def is_valid_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True

def validate_booking_request(
    request: Any,
    park: Any,
    booked_visitors: int,
    today: date
) -> Optional[BookingError]:
    """Check a booking request against the park it targets.

    Checks run in a fixed order and the first failure is returned:
    park availability, visit date, e-mail, party size, then capacity for the
    visit date. ``booked_visitors`` is the number of visitors already holding
    active tickets for that park and date. Returns None when the request can
    be booked.
    """
    if park is None or not park.is_active:
        return BookingError(
            code=ErrorCode.PARK_UNAVAILABLE,
            field="park_id",
            context={"park_id": getattr(request, "park_id", None)}
        )

    visit_date = getattr(request, "visit_date", None)
    # datetime is a date subclass; a timestamp is not a calendar date
    if not isinstance(visit_date, date) or isinstance(visit_date, datetime):
        return BookingError(code=ErrorCode.INVALID_VISIT_DATE, field="visit_date")
    if visit_date < today:
        return BookingError(
            code=ErrorCode.INVALID_VISIT_DATE,
            field="visit_date",
            context={"earliest_date": today.isoformat()}
        )

    if not is_valid_email(getattr(request, "visitor_email", None)):
        return BookingError(code=ErrorCode.INVALID_EMAIL, field="visitor_email")

    adults = getattr(request, "adults", None)
    children = getattr(request, "children", None)
    party_error = check_party_size(adults, children)
    if party_error:
        return party_error

    remaining = park.capacity - booked_visitors
    if adults + children > remaining:
        return BookingError(
            code=ErrorCode.CAPACITY_EXCEEDED,
            field="adults",
            context={
                "capacity": park.capacity,
                "remaining": max(remaining, 0),
                "requested": adults + children
            }
        )

    return None
