"""Domain objects exchanged between the allocator and its persistence store.

These are plain frozen values with no ORM session attached, so the allocator
can reason about a consistent snapshot of an event.
ORM models are in app/models (persistence layer).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from app.models.booking import BookingStatus
from app.models.theater import SeatType, Section
from app.schemas.layout import SeatConfig, TheaterLayout

SeatIdentity = Tuple[str, str, int]  # (section, row, seat_number)


def seat_key(row: str, seat_number: int) -> str:
    """Seat key shared by theater, event and booking records, e.g. ``"C12"``."""
    return f"{row}{seat_number}"


def seat_identity(section, row: str, seat_number: int) -> SeatIdentity:
    return (Section(section).value, row, seat_number)


@dataclass(frozen=True)
class SeatRef:
    """Address of a seat inside a theater layout."""

    row: str
    seat_number: int
    section: Section = Section.MAIN

    @property
    def key(self) -> str:
        return seat_key(self.row, self.seat_number)

    @property
    def identity(self) -> SeatIdentity:
        return seat_identity(self.section, self.row, self.seat_number)


@dataclass(frozen=True)
class Seat:
    """An enumerated seat with its resolved category."""

    ref: SeatRef
    seat_type: SeatType = SeatType.STANDARD
    is_active: bool = True


@dataclass(frozen=True)
class Capacity:
    total_seats: int
    vip_seats: int
    premium_seats: int


@dataclass(frozen=True)
class BookedSeat:
    """A seat claimed on an event by a booking."""

    row: str
    seat_number: int
    section: Section
    booking_id: UUID

    @property
    def key(self) -> str:
        return seat_key(self.row, self.seat_number)

    @property
    def identity(self) -> SeatIdentity:
        return seat_identity(self.section, self.row, self.seat_number)


@dataclass(frozen=True)
class SelectedSeat:
    """A purchased seat, priced at allocation time."""

    row: str
    seat_number: int
    section: Section
    seat_type: SeatType
    price: Decimal

    @property
    def key(self) -> str:
        return seat_key(self.row, self.seat_number)


@dataclass(frozen=True)
class EventState:
    """Snapshot of the booking-relevant part of an event."""

    id: UUID
    has_theater_seating: bool
    ticket_price: Decimal
    remaining_tickets: int
    version: int
    layout: Optional[TheaterLayout] = None
    seat_config: Tuple[SeatConfig, ...] = ()
    seat_pricing: dict = field(default_factory=dict)  # {SeatType: Decimal}
    booked_seats: Tuple[BookedSeat, ...] = ()


@dataclass(frozen=True)
class BookingState:
    id: UUID
    event_id: UUID
    user_id: UUID
    status: BookingStatus
    number_of_tickets: int
    has_theater_seating: bool


@dataclass(frozen=True)
class NewBooking:
    """Booking record to be created together with its seat claims."""

    id: UUID
    event_id: UUID
    user_id: UUID
    number_of_tickets: int
    total_price: Decimal
    has_theater_seating: bool
    selected_seats: Tuple[SelectedSeat, ...] = ()


@dataclass(frozen=True)
class Allocation:
    """Result of a successful allocation."""

    booking_id: UUID
    event_id: UUID
    number_of_tickets: int
    total_price: Decimal
    remaining_tickets: int
    selected_seats: Tuple[SelectedSeat, ...] = ()
