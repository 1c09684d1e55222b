from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from parkpass.bookings.errors import BookingError, ErrorCode

CENT = Decimal("0.01")

def _is_count(value: Any) -> bool:
    # bool is an int subclass; "True adults" is not a party size
    return isinstance(value, int) and not isinstance(value, bool)

def _to_price(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price < 0:
        return None
    return price

def check_party_size(adults: Any, children: Any) -> Optional[BookingError]:
    """Validate head counts: non-negative integers adding up to at least one visitor"""
    if not _is_count(adults) or adults < 0:
        return BookingError(code=ErrorCode.INVALID_PARTY_SIZE, field="adults")
    if not _is_count(children) or children < 0:
        return BookingError(code=ErrorCode.INVALID_PARTY_SIZE, field="children")
    if adults + children < 1:
        return BookingError(
            code=ErrorCode.INVALID_PARTY_SIZE,
            field="adults",
            context={"minimum_visitors": 1}
        )
    return None

def compute_total(park: Any, adults: Any, children: Any) -> Union[Decimal, BookingError]:
    """Compute the ticket total for a party at a park.

    ``total = adults * adult_price + children * child_price``, evaluated in
    Decimal and rounded half-up to the minor currency unit. The same function
    backs the price preview and the amount stored on the booking, so both
    always agree.
    """
    party_error = check_party_size(adults, children)
    if party_error:
        return party_error

    adult_price = _to_price(getattr(park, "adult_price", None))
    if adult_price is None:
        return BookingError(code=ErrorCode.INVALID_PRICE_CONFIGURATION, field="adult_price")

    child_price = _to_price(getattr(park, "child_price", None))
    if child_price is None:
        return BookingError(code=ErrorCode.INVALID_PRICE_CONFIGURATION, field="child_price")

    total = adult_price * adults + child_price * children
    return total.quantize(CENT, rounding=ROUND_HALF_UP)
