from typing import Annotated, Dict, Optional, List
from pydantic import BaseModel, Field, UUID4, computed_field
from decimal import Decimal
from datetime import datetime

from app.models.theater import SeatType, Section
from app.schemas.layout import SeatConfig, TheaterLayout, TheaterLayoutUpdate


# Theater: base fields
class TheaterBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = None


class TheaterCreate(TheaterBase):
    layout: TheaterLayout
    seat_config: List[SeatConfig] = []


class TheaterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    layout: Optional[TheaterLayoutUpdate] = None
    seat_config: Optional[List[SeatConfig]] = None


# Bulk seat configuration merge (PUT /theaters/{id}/seats)
class SeatConfigUpdate(BaseModel):
    seat_config: Annotated[List[SeatConfig], Field(min_length=1)]


class Theater(TheaterBase):
    id: UUID4
    created_by: UUID4
    layout: TheaterLayout
    seat_config: List[SeatConfig] = []
    total_seats: int
    vip_seats: int
    premium_seats: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def formatted_capacity(self) -> str:
        parts = [f"{self.total_seats} total"]
        if self.vip_seats:
            parts.append(f"{self.vip_seats} VIP")
        if self.premium_seats:
            parts.append(f"{self.premium_seats} Premium")
        return ", ".join(parts)

    class Config:
        from_attributes = True


# Compact theater for nested responses (event detail)
class TheaterSummary(BaseModel):
    id: UUID4
    name: str
    total_seats: int

    class Config:
        from_attributes = True


class BookedSeat(BaseModel):
    row: str
    seat_number: int
    section: Section
    booking_id: UUID4

    class Config:
        from_attributes = True


# Theater layout together with an event's bookings (GET /theaters/{id}/events/{event_id})
class TheaterEventView(BaseModel):
    theater: Theater
    booked_seats: List[BookedSeat]
    seat_pricing: Dict[SeatType, Decimal]
