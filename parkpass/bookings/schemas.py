from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

class TicketStatus(str, Enum):
    """Ticket status enumeration"""
    ACTIVE = "active"
    USED = "used"
    CANCELLED = "cancelled"

class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

# Booking Request Models
class BookingCreateRequest(BaseModel):
    """Visitor request to book a park visit"""
    park_id: int
    visit_date: date
    visitor_name: str = Field(..., min_length=1, max_length=255)
    visitor_email: str = Field(..., max_length=255)
    visitor_phone: Optional[str] = Field(None, max_length=50)
    adults: int = 1
    children: int = 0

    @validator('visitor_name')
    def strip_visitor_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Visitor name is required')
        return v

class PaymentUpdateRequest(BaseModel):
    """Outcome of a payment attempt reported by the payment page"""
    payment_status: PaymentStatus
    payment_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)
    amount: Optional[Decimal] = None

    @validator('payment_status')
    def validate_payment_status(cls, v):
        if v == PaymentStatus.PENDING:
            raise ValueError('Payment status must be completed or failed')
        return v

class BookingSearchFilters(BaseModel):
    """Filters for the admin booking list"""
    park_id: Optional[int] = None
    status: Optional[TicketStatus] = None
    payment_status: Optional[PaymentStatus] = None
    visit_date_from: Optional[date] = None
    visit_date_to: Optional[date] = None
    ticket_no: Optional[str] = None
    visitor_email: Optional[str] = None

# Response Models
class PricePreview(BaseModel):
    """Price a party would pay at a park"""
    park_id: int
    adults: int
    children: int
    adult_price: Decimal
    child_price: Decimal
    total_amount: Decimal
    currency: str

class ParkSummary(BaseModel):
    id: int
    name: str
    district_id: int
    opening_hours: Optional[str] = None

    class Config:
        from_attributes = True

class Booking(BaseModel):
    """Booking / ticket details"""
    id: int
    ticket_no: Optional[str] = None
    park_id: int
    visit_date: date
    visitor_name: str
    visitor_email: str
    visitor_phone: Optional[str] = None
    adults: int
    children: int
    total_amount: Decimal
    status: TicketStatus
    payment_status: PaymentStatus
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None
    used_at: Optional[datetime] = None
    is_downloaded: bool
    is_printed: bool
    created_at: Optional[datetime] = None
    park: Optional[ParkSummary] = None

    class Config:
        from_attributes = True

class TicketActionResponse(BaseModel):
    """Result of a gate or admin action on a ticket"""
    message: str
    ticket: Optional[Booking] = None

class ParkBookingStats(BaseModel):
    park_id: int
    park_name: str
    bookings: int
    visitors: int
    revenue: Decimal

class BookingAnalytics(BaseModel):
    """Booking figures for the parks an admin can see"""
    total_bookings: int
    active_bookings: int
    used_bookings: int
    cancelled_bookings: int
    total_visitors: int
    total_revenue: Decimal
    average_booking_value: Decimal
    currency: str
    parks: List[ParkBookingStats] = []

class BookingList(BaseModel):
    """One page of admin booking search results"""
    bookings: List[Booking]
    total: int
    skip: int
    limit: int
