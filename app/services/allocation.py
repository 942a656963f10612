"""Booking seat allocator.

Claims seats (or plain tickets) on an event for a booking and releases them on
cancellation. Every commit is a conditional write against the event version
observed in the snapshot the checks ran on; when the store reports that the
event moved on, the whole check runs again from a fresh read. Writes are never
replayed blindly.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from app.core.config import settings
from app.domain.errors import (
    AllocationConflictError,
    DuplicateSeatRequestError,
    EventNotFoundError,
    InvalidBookingRequestError,
    NotSeatedEventError,
    SeatAlreadyBookedError,
    SeatNotFoundError,
    SoldOutError,
)
from app.domain.models import (
    Allocation,
    EventState,
    NewBooking,
    SeatRef,
    SelectedSeat,
)
from app.models.booking import BookingStatus
from app.models.theater import SeatType
from app.stores.interfaces import EventStore
from app.utils.layout import build_seat_index

logger = logging.getLogger(__name__)


def seat_price(event: EventState, seat_type: SeatType) -> Decimal:
    """Price for a seat type, falling back to the event's base ticket price."""
    price = event.seat_pricing.get(SeatType(seat_type))
    if price is None:
        price = event.ticket_price
    return Decimal(price)


def plan_seats(event: EventState, requested: Sequence[SeatRef]) -> List[SelectedSeat]:
    """
    Check a seat request against one event snapshot and price it.

    Checks run in this order: every seat exists and is bookable, none is
    already booked, no seat is requested twice, enough tickets remain.
    """
    if not event.has_theater_seating or event.layout is None:
        raise NotSeatedEventError(str(event.id))

    seats = build_seat_index(event.layout, event.seat_config)

    for ref in requested:
        seat = seats.get(ref.identity)
        if seat is None or not seat.is_active:
            raise SeatNotFoundError(ref.key, ref.identity[0])

    booked = {b.identity for b in event.booked_seats}
    for ref in requested:
        if ref.identity in booked:
            raise SeatAlreadyBookedError(ref.key, ref.identity[0])

    seen = set()
    for ref in requested:
        if ref.identity in seen:
            raise DuplicateSeatRequestError(ref.key, ref.identity[0])
        seen.add(ref.identity)

    if event.remaining_tickets - len(requested) < 0:
        raise SoldOutError(len(requested), event.remaining_tickets)

    selected = []
    for ref in requested:
        seat = seats[ref.identity]
        selected.append(SelectedSeat(
            row=ref.row,
            seat_number=ref.seat_number,
            section=seat.ref.section,
            seat_type=seat.seat_type,
            price=seat_price(event, seat.seat_type),
        ))
    return selected


class SeatAllocator:
    """Service for claiming and releasing event capacity."""

    def __init__(self, store: EventStore, max_attempts: Optional[int] = None) -> None:
        self._store = store
        self._max_attempts = max_attempts or settings.ALLOCATION_MAX_ATTEMPTS

    def _load(self, event_id: UUID) -> EventState:
        event = self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def allocate(
        self,
        event_id: UUID,
        requested_seats: Iterable[SeatRef],
        booking_id: UUID,
        user_id: UUID,
    ) -> Allocation:
        """
        Claim the requested seats for a new booking.

        Raises:
            InvalidBookingRequestError: If no seats were requested.
            EventNotFoundError: If the event does not exist.
            NotSeatedEventError: If the event has no theater seating.
            SeatNotFoundError: If a seat is not an enumerable, bookable seat.
            SeatAlreadyBookedError: If a seat is claimed by another booking.
            DuplicateSeatRequestError: If a seat is requested twice.
            SoldOutError: If not enough tickets remain.
            AllocationConflictError: If concurrent writes won every attempt.
        """
        requested = list(requested_seats)
        if not requested:
            raise InvalidBookingRequestError("At least one seat must be selected")

        for attempt in range(1, self._max_attempts + 1):
            event = self._load(event_id)
            selected = plan_seats(event, requested)
            total = sum((s.price for s in selected), Decimal("0"))
            remaining = event.remaining_tickets - len(selected)

            booking = NewBooking(
                id=booking_id,
                event_id=event_id,
                user_id=user_id,
                number_of_tickets=len(selected),
                total_price=total,
                has_theater_seating=True,
                selected_seats=tuple(selected),
            )
            if self._store.commit_allocation(event_id, event.version, booking, remaining):
                logger.info(
                    "Booking %s claimed %d seat(s) on event %s: %s",
                    booking_id, len(selected), event_id,
                    ", ".join(s.key for s in selected),
                )
                return Allocation(
                    booking_id=booking_id,
                    event_id=event_id,
                    number_of_tickets=len(selected),
                    total_price=total,
                    remaining_tickets=remaining,
                    selected_seats=tuple(selected),
                )

            logger.warning(
                "Event %s changed during allocation (attempt %d/%d), re-reading.",
                event_id, attempt, self._max_attempts,
            )

        raise AllocationConflictError(str(event_id), self._max_attempts)

    def allocate_tickets(
        self,
        event_id: UUID,
        quantity: int,
        booking_id: UUID,
        user_id: UUID,
    ) -> Allocation:
        """Counter-only booking for events without theater seating."""
        if quantity < 1:
            raise InvalidBookingRequestError("Number of tickets must be at least 1")

        for attempt in range(1, self._max_attempts + 1):
            event = self._load(event_id)
            if event.has_theater_seating:
                raise InvalidBookingRequestError("Seats must be selected for this event")
            if event.remaining_tickets - quantity < 0:
                raise SoldOutError(quantity, event.remaining_tickets)

            total = Decimal(event.ticket_price) * quantity
            remaining = event.remaining_tickets - quantity
            booking = NewBooking(
                id=booking_id,
                event_id=event_id,
                user_id=user_id,
                number_of_tickets=quantity,
                total_price=total,
                has_theater_seating=False,
            )
            if self._store.commit_allocation(event_id, event.version, booking, remaining):
                logger.info(
                    "Booking %s took %d ticket(s) on event %s.", booking_id, quantity, event_id
                )
                return Allocation(
                    booking_id=booking_id,
                    event_id=event_id,
                    number_of_tickets=quantity,
                    total_price=total,
                    remaining_tickets=remaining,
                )

            logger.warning(
                "Event %s changed during ticket booking (attempt %d/%d), re-reading.",
                event_id, attempt, self._max_attempts,
            )

        raise AllocationConflictError(str(event_id), self._max_attempts)

    def release(self, event_id: UUID, booking_id: UUID) -> int:
        """
        Release everything a booking holds on the event and cancel it.

        Returns the number of tickets returned to the event; 0 when the
        booking is unknown or already cancelled.
        """
        for attempt in range(1, self._max_attempts + 1):
            # Event before booking: every release bumps the event version
            event = self._load(event_id)
            booking = self._store.get_booking(booking_id)
            if booking is None or booking.status != BookingStatus.CONFIRMED:
                return 0
            if booking.event_id != event_id:
                return 0

            if booking.has_theater_seating:
                count = sum(1 for b in event.booked_seats if b.booking_id == booking_id)
            else:
                count = booking.number_of_tickets

            if self._store.commit_release(
                event_id, event.version, booking_id, event.remaining_tickets + count
            ):
                logger.info(
                    "Booking %s released %d ticket(s) on event %s.", booking_id, count, event_id
                )
                return count

            logger.warning(
                "Event %s changed during release (attempt %d/%d), re-reading.",
                event_id, attempt, self._max_attempts,
            )

        raise AllocationConflictError(str(event_id), self._max_attempts)
