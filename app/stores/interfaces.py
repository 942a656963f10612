"""Store interfaces (repository pattern).

The allocator depends only on this contract. Stores return domain snapshots
and perform conditional writes; they never decide booking rules.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.domain.models import BookingState, EventState, NewBooking


class EventStore(ABC):
    """Interface for event seat/ticket persistence operations."""

    @abstractmethod
    def get_event(self, event_id: UUID) -> Optional[EventState]:
        """Return a consistent snapshot of the event, or None if not found."""
        ...

    @abstractmethod
    def get_booking(self, booking_id: UUID) -> Optional[BookingState]:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def commit_allocation(
        self,
        event_id: UUID,
        expected_version: int,
        booking: NewBooking,
        remaining_tickets: int,
    ) -> bool:
        """
        Atomically create the booking with its selected seats, claim those
        seats on the event and set remaining_tickets, only if the event is
        still at expected_version. Return False, having written nothing, when
        the precondition no longer holds.
        """
        ...

    @abstractmethod
    def commit_release(
        self,
        event_id: UUID,
        expected_version: int,
        booking_id: UUID,
        remaining_tickets: int,
    ) -> bool:
        """
        Atomically drop every seat claimed by the booking, mark it cancelled
        and set remaining_tickets, only if the event is still at
        expected_version. Return False, having written nothing, otherwise.
        """
        ...
