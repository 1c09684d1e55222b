"""
Park Booking & Ticketing Module

Visitor bookings for park visits and the lifecycle of the tickets they carry.

Key Components:
- pricing.py: total price for a party of adults and children
- validation.py: fail-fast checks on a booking request
- state_machine.py: allowed ticket transitions (active -> used | cancelled)
- guard.py: role and park-assignment checks for admin actions
- repository.py: persistence, including the conditional status update
- booking_service.py: booking creation, payment, analytics
- ticket_service.py: gate redemption, cancellation, deletion and QR codes
- router.py: FastAPI endpoints

Business failures are returned as ``BookingError`` values; the router turns
them into HTTP responses.
"""

from .booking_service import BookingService
from .ticket_service import TicketService
from .errors import BookingError, DataLayerError, ErrorCode, DenialReason
from .schemas import Booking, BookingCreateRequest, PaymentStatus, TicketStatus

__all__ = [
    "BookingService",
    "TicketService",
    "BookingError",
    "DataLayerError",
    "ErrorCode",
    "DenialReason",
    "Booking",
    "BookingCreateRequest",
    "PaymentStatus",
    "TicketStatus"
]
