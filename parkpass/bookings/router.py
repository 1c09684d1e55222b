import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.orm import Session

from parkpass.auth.dependencies import get_current_actor
from parkpass.auth.schemas import Actor
from parkpass.bookings.booking_service import BookingService
from parkpass.bookings.errors import BookingError, DataLayerError
from parkpass.bookings.http import raise_for_error
from parkpass.bookings.repository import MAX_BOOKING_ID
from parkpass.bookings.schemas import (
    Booking, BookingAnalytics, BookingCreateRequest, BookingList, BookingSearchFilters,
    PaymentStatus, PaymentUpdateRequest, PricePreview, TicketActionResponse, TicketStatus
)
from parkpass.bookings.ticket_service import TicketService
from parkpass.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

BookingId = Annotated[int, Path(ge=1, le=MAX_BOOKING_ID, description="Booking ID")]

def _unwrap(result):
    if isinstance(result, BookingError):
        raise_for_error(result)
    return result

def _server_error(action: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )

# Visitor Endpoints
@router.get("/price-preview", response_model=PricePreview)
def preview_price(
    park_id: int = Query(..., description="Park to visit"),
    adults: int = Query(1, description="Number of adults"),
    children: int = Query(0, description="Number of children"),
    db: Session = Depends(get_db)
):
    """Price a party before booking"""
    try:
        return _unwrap(BookingService(db).preview_price(park_id, adults, children))
    except DataLayerError as e:
        raise _server_error("preview price", e)

@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(request: BookingCreateRequest, db: Session = Depends(get_db)):
    """Book a park visit; payment is recorded separately"""
    try:
        return _unwrap(BookingService(db).create_booking(request))
    except DataLayerError as e:
        raise _server_error("create booking", e)

# Admin Endpoints
@router.get("", response_model=BookingList)
def search_bookings(
    park_id: Optional[int] = Query(None, description="Filter by park"),
    ticket_status: Optional[TicketStatus] = Query(None, alias="status", description="Filter by ticket status"),
    payment_status: Optional[PaymentStatus] = Query(None, description="Filter by payment status"),
    visit_date_from: Optional[date] = Query(None, description="Earliest visit date"),
    visit_date_to: Optional[date] = Query(None, description="Latest visit date"),
    ticket_no: Optional[str] = Query(None, description="Ticket number contains"),
    visitor_email: Optional[str] = Query(None, description="Visitor email contains"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """List bookings for the parks the caller can see"""
    filters = BookingSearchFilters(
        park_id=park_id,
        status=ticket_status,
        payment_status=payment_status,
        visit_date_from=visit_date_from,
        visit_date_to=visit_date_to,
        ticket_no=ticket_no,
        visitor_email=visitor_email
    )
    try:
        bookings, total = _unwrap(BookingService(db).search_bookings(actor, filters, skip=skip, limit=limit))
    except DataLayerError as e:
        raise _server_error("search bookings", e)
    return BookingList(bookings=bookings, total=total, skip=skip, limit=limit)

@router.get("/analytics", response_model=BookingAnalytics)
def get_booking_analytics(
    date_from: Optional[date] = Query(None, description="Earliest visit date"),
    date_to: Optional[date] = Query(None, description="Latest visit date"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """Booking, visitor and revenue totals"""
    try:
        return _unwrap(BookingService(db).get_booking_analytics(actor, date_from, date_to))
    except DataLayerError as e:
        raise _server_error("get booking analytics", e)

@router.get("/ticket/{ref}", response_model=Booking)
def get_ticket(ref: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Look up a ticket by ticket number or booking ID"""
    try:
        return _unwrap(TicketService(db).get_ticket(ref, actor))
    except DataLayerError as e:
        raise _server_error("get ticket", e)

@router.put("/ticket/{ref}/use", response_model=TicketActionResponse)
def mark_ticket_used(ref: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Redeem a ticket at the park gate"""
    try:
        ticket = _unwrap(TicketService(db).mark_ticket_used(ref, actor))
    except DataLayerError as e:
        raise _server_error("mark ticket used", e)
    return TicketActionResponse(message="Ticket marked as used", ticket=ticket)

@router.put("/ticket/{ref}/cancel", response_model=TicketActionResponse)
def cancel_ticket(ref: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    try:
        ticket = _unwrap(TicketService(db).cancel_ticket(ref, actor))
    except DataLayerError as e:
        raise _server_error("cancel ticket", e)
    return TicketActionResponse(message="Ticket cancelled", ticket=ticket)

@router.delete("/ticket/{ref}", response_model=TicketActionResponse)
def delete_ticket(ref: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Permanently delete a ticket"""
    try:
        snapshot = _unwrap(TicketService(db).delete_ticket(ref, actor))
    except DataLayerError as e:
        raise _server_error("delete ticket", e)
    return TicketActionResponse(message="Ticket deleted", ticket=snapshot)

# Booking lookups by ID come last so the static paths above win
@router.get("/{booking_id}", response_model=Booking)
def get_booking(booking_id: BookingId, db: Session = Depends(get_db)):
    """Booking confirmation details"""
    try:
        return _unwrap(BookingService(db).get_booking(booking_id))
    except DataLayerError as e:
        raise _server_error("get booking", e)

@router.put("/{booking_id}/payment", response_model=Booking)
def record_payment(booking_id: BookingId, payment: PaymentUpdateRequest, db: Session = Depends(get_db)):
    """Record the result of a payment attempt"""
    try:
        return _unwrap(BookingService(db).record_payment(booking_id, payment))
    except DataLayerError as e:
        raise _server_error("record payment", e)

@router.put("/{booking_id}/print", response_model=Booking)
def mark_printed(booking_id: BookingId, db: Session = Depends(get_db)):
    try:
        return _unwrap(BookingService(db).mark_printed(booking_id))
    except DataLayerError as e:
        raise _server_error("mark ticket printed", e)

@router.put("/{booking_id}/download", response_model=Booking)
def mark_downloaded(booking_id: BookingId, db: Session = Depends(get_db)):
    try:
        return _unwrap(BookingService(db).mark_downloaded(booking_id))
    except DataLayerError as e:
        raise _server_error("mark ticket downloaded", e)

@router.get("/{booking_id}/qr")
def get_ticket_qr(
    booking_id: BookingId,
    size: int = Query(300, ge=100, le=1000, description="Image size in pixels"),
    db: Session = Depends(get_db)
):
    """QR code image for the ticket"""
    try:
        booking = _unwrap(BookingService(db).get_booking(booking_id))
        png = TicketService(db).generate_qr_code(booking, size=size)
    except DataLayerError as e:
        raise _server_error("generate QR code", e)
    return Response(content=png, media_type="image/png")
