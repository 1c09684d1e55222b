from decimal import Decimal
from types import SimpleNamespace

import pytest

from parkpass.bookings.errors import BookingError, ErrorCode
from parkpass.bookings.pricing import check_party_size, compute_total

def park_with(adult_price="120.00", child_price="50.00"):
    return SimpleNamespace(
        adult_price=Decimal(adult_price) if isinstance(adult_price, str) else adult_price,
        child_price=Decimal(child_price) if isinstance(child_price, str) else child_price,
    )

def test_adults_and_children_priced_separately():
    assert compute_total(park_with(), 2, 1) == Decimal("290.00")

def test_children_only_party():
    assert compute_total(park_with(), 0, 3) == Decimal("150.00")

def test_free_entry_is_allowed():
    assert compute_total(park_with("0", "0"), 4, 2) == Decimal("0.00")

def test_total_rounds_half_up_to_cents():
    total = compute_total(park_with("10.005", "0"), 1, 0)
    assert total == Decimal("10.01")

def test_decimal_prices_do_not_drift():
    assert compute_total(park_with("0.10", "0.20"), 3, 0) == Decimal("0.30")

@pytest.mark.parametrize("adults,children,field", [
    (0, 0, "adults"),
    (-1, 2, "adults"),
    (1, -1, "children"),
    (True, 0, "adults"),
    (1.5, 0, "adults"),
    ("2", 0, "adults"),
    (1, None, "children"),
])
def test_invalid_party_size(adults, children, field):
    result = compute_total(park_with(), adults, children)
    assert isinstance(result, BookingError)
    assert result.code == ErrorCode.INVALID_PARTY_SIZE
    assert result.field == field

@pytest.mark.parametrize("adult_price,child_price,field", [
    (Decimal("-1"), Decimal("10"), "adult_price"),
    (None, Decimal("10"), "adult_price"),
    (Decimal("10"), Decimal("NaN"), "child_price"),
    (Decimal("10"), "not-a-price", "child_price"),
])
def test_invalid_price_configuration(adult_price, child_price, field):
    park = SimpleNamespace(adult_price=adult_price, child_price=child_price)
    result = compute_total(park, 1, 1)
    assert isinstance(result, BookingError)
    assert result.code == ErrorCode.INVALID_PRICE_CONFIGURATION
    assert result.field == field

def test_party_size_checked_before_prices():
    park = SimpleNamespace(adult_price=None, child_price=None)
    assert compute_total(park, 0, 0).code == ErrorCode.INVALID_PARTY_SIZE

def test_single_visitor_is_enough():
    assert check_party_size(1, 0) is None
    assert check_party_size(0, 1) is None
