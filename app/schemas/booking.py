from typing import Annotated, Optional, List
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import datetime

from app.core.config import settings
from app.models.booking import BookingStatus
from app.models.theater import SeatType, Section
from app.schemas.user import UserSummary


class SeatRequest(BaseModel):
    row: str = Field(min_length=1, max_length=20)
    seat_number: int = Field(gt=0)
    section: Section = Section.MAIN


# Booking: Create (POST /bookings)
class BookingCreate(BaseModel):
    event_id: UUID4
    selected_seats: Annotated[
        List[SeatRequest], Field(max_length=settings.BOOKING_MAX_SEATS)
    ] = []
    number_of_tickets: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_quantity(self):
        if self.selected_seats and self.number_of_tickets not in (None, len(self.selected_seats)):
            raise ValueError("number_of_tickets must match the number of selected seats")
        return self


class BookingSeatResponse(BaseModel):
    row: str
    seat_number: int
    section: Section
    seat_type: SeatType
    price: Decimal

    class Config:
        from_attributes = True


class BookingEventSummary(BaseModel):
    id: UUID4
    title: str
    date: datetime
    location: str

    class Config:
        from_attributes = True


# Booking: Full response (POST /bookings, GET /bookings/{id})
class Booking(BaseModel):
    id: UUID4
    booking_number: str
    user_id: UUID4
    event_id: UUID4
    number_of_tickets: int
    total_price: Decimal
    status: BookingStatus
    has_theater_seating: bool
    selected_seats: List[BookingSeatResponse] = []
    event: Optional[BookingEventSummary] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Booking: Admin view (GET /admin/bookings)
class AdminBooking(Booking):
    user: Optional[UserSummary] = None


# Booking: Cancel response (PATCH /bookings/{id}/cancel)
class BookingCancelResponse(BaseModel):
    id: UUID4
    booking_number: str
    status: BookingStatus
    released_tickets: int
    cancelled_at: Optional[datetime] = None
