from typing import Annotated, Dict, Optional, List
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import datetime

from app.models.event import EventStatus
from app.models.theater import SeatType, Section
from app.schemas.layout import SeatConfig, TheaterLayout
from app.schemas.theater import TheaterSummary

Price = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


# Event: Create (POST /events)
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str
    date: datetime
    location: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    image_url: Optional[str] = None
    ticket_price: Price = Decimal("0")
    total_tickets: Optional[int] = Field(None, ge=0)

    has_theater_seating: bool = False
    theater_id: Optional[UUID4] = None
    seat_pricing: Dict[SeatType, Price] = {}
    # Per-event overrides merged over the theater's seat config
    seat_config: List[SeatConfig] = []

    @model_validator(mode="after")
    def check_seating(self):
        if self.has_theater_seating:
            if self.theater_id is None:
                raise ValueError("theater_id is required for events with theater seating")
            if not self.seat_pricing:
                raise ValueError("seat_pricing is required for events with theater seating")
        elif self.total_tickets is None:
            raise ValueError("total_tickets is required for events without theater seating")
        return self


# Event: Partial update (PATCH /events/{id})
class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = None
    ticket_price: Optional[Price] = None
    total_tickets: Optional[int] = Field(None, ge=0)
    seat_pricing: Optional[Dict[SeatType, Price]] = None
    seat_config: Optional[List[SeatConfig]] = None
    # Version the client last read; rejected with 409 when stale
    version: Optional[int] = None


# Admin: approve / decline (PATCH /admin/events/{id}/status)
class EventStatusUpdate(BaseModel):
    status: EventStatus


# Event: list item (GET /events, GET /events/mine, GET /admin/events)
class EventListItem(BaseModel):
    id: UUID4
    organizer_id: UUID4
    title: str
    date: datetime
    location: str
    category: str
    image_url: Optional[str] = None
    ticket_price: Decimal
    total_tickets: int
    remaining_tickets: int
    status: EventStatus
    has_theater_seating: bool
    theater_id: Optional[UUID4] = None

    class Config:
        from_attributes = True


# Event: full response
class Event(EventListItem):
    description: str
    seat_pricing: Dict[SeatType, Decimal] = {}
    layout: Optional[TheaterLayout] = None
    seat_config: List[SeatConfig] = []
    total_seats: int
    vip_seats: int
    premium_seats: int
    version: int
    theater: Optional[TheaterSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Seat map (GET /events/{id}/seats)
class SeatStatus(BaseModel):
    row: str
    seat_number: int
    section: Section
    seat_type: SeatType
    is_active: bool
    is_booked: bool
    price: Decimal


class SeatMapResponse(BaseModel):
    event_id: UUID4
    layout: TheaterLayout
    seats: List[SeatStatus]
    booked_count: int
    available_count: int
    remaining_tickets: int
