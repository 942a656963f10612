"""SQLAlchemy implementation of the EventStore."""

import functools
import logging
import random
import string
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.models import BookedSeat, BookingState, EventState, NewBooking
from app.models.booking import Booking, BookingSeat, BookingStatus
from app.models.event import Event, EventBookedSeat
from app.models.theater import Section
from app.stores.interfaces import EventStore
from app.utils.documents import load_layout, load_pricing, load_seat_config

logger = logging.getLogger(__name__)


def generate_booking_number(db: Session) -> str:
    """Generate a unique 'TIX-XXXXXXXX' booking reference."""
    chars = string.ascii_uppercase + string.digits
    while True:
        number = "TIX-" + "".join(random.choices(chars, k=8))
        if not db.query(Booking.id).filter(Booking.booking_number == number).first():
            return number


def _retry_read_once(method):
    """Reads are idempotent: retry once on a dropped/timed-out connection."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OperationalError:
            logger.warning("%s failed, retrying once.", method.__name__, exc_info=True)
            self.db.rollback()
            return method(self, *args, **kwargs)

    return wrapper


class SqlEventStore(EventStore):
    """PostgreSQL-backed event store using the SQLAlchemy ORM session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @_retry_read_once
    def get_event(self, event_id: UUID) -> Optional[EventState]:
        event = (
            self.db.query(Event)
            .populate_existing()
            .filter(Event.id == event_id)
            .first()
        )
        if not event:
            return None

        booked = (
            self.db.query(
                EventBookedSeat.row,
                EventBookedSeat.seat_number,
                EventBookedSeat.section,
                EventBookedSeat.booking_id,
            )
            .filter(EventBookedSeat.event_id == event_id)
            .order_by(EventBookedSeat.id)
            .all()
        )

        return EventState(
            id=event.id,
            has_theater_seating=event.has_theater_seating,
            ticket_price=event.ticket_price,
            remaining_tickets=event.remaining_tickets,
            version=event.version,
            layout=load_layout(event.layout),
            seat_config=tuple(load_seat_config(event.seat_config)),
            seat_pricing=load_pricing(event.seat_pricing),
            booked_seats=tuple(
                BookedSeat(
                    row=row,
                    seat_number=seat_number,
                    section=Section(section),
                    booking_id=booking_id,
                )
                for row, seat_number, section, booking_id in booked
            ),
        )

    @_retry_read_once
    def get_booking(self, booking_id: UUID) -> Optional[BookingState]:
        booking = (
            self.db.query(Booking)
            .populate_existing()
            .filter(Booking.id == booking_id)
            .first()
        )
        if not booking:
            return None
        return BookingState(
            id=booking.id,
            event_id=booking.event_id,
            user_id=booking.user_id,
            status=booking.status,
            number_of_tickets=booking.number_of_tickets,
            has_theater_seating=booking.has_theater_seating,
        )

    # ------------------------------------------------------------------
    # Conditional writes
    # ------------------------------------------------------------------

    def _bump_version(self, event_id: UUID, expected_version: int, remaining_tickets: int) -> bool:
        # Row-level lock on PostgreSQL until commit; a concurrent writer at
        # the same version re-checks the WHERE clause and matches nothing.
        updated = (
            self.db.query(Event)
            .filter(Event.id == event_id, Event.version == expected_version)
            .update(
                {
                    Event.remaining_tickets: remaining_tickets,
                    Event.version: Event.version + 1,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    def commit_allocation(
        self,
        event_id: UUID,
        expected_version: int,
        booking: NewBooking,
        remaining_tickets: int,
    ) -> bool:
        try:
            if not self._bump_version(event_id, expected_version, remaining_tickets):
                self.db.rollback()
                return False

            self.db.add(Booking(
                id=booking.id,
                booking_number=generate_booking_number(self.db),
                user_id=booking.user_id,
                event_id=event_id,
                number_of_tickets=booking.number_of_tickets,
                total_price=booking.total_price,
                status=BookingStatus.CONFIRMED,
                has_theater_seating=booking.has_theater_seating,
                selected_seats=[
                    BookingSeat(
                        position=position,
                        row=seat.row,
                        seat_number=seat.seat_number,
                        section=Section(seat.section).value,
                        seat_type=seat.seat_type.value,
                        price=seat.price,
                    )
                    for position, seat in enumerate(booking.selected_seats)
                ],
            ))
            self.db.flush()  # booking row must exist before seats reference it

            for seat in booking.selected_seats:
                self.db.add(EventBookedSeat(
                    event_id=event_id,
                    booking_id=booking.id,
                    row=seat.row,
                    seat_number=seat.seat_number,
                    section=Section(seat.section).value,
                ))

            self.db.commit()
        except IntegrityError:
            # Another booking claimed one of the seats first
            self.db.rollback()
            logger.warning("Seat claim for event %s hit the unique constraint.", event_id)
            return False
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    def commit_release(
        self,
        event_id: UUID,
        expected_version: int,
        booking_id: UUID,
        remaining_tickets: int,
    ) -> bool:
        try:
            if not self._bump_version(event_id, expected_version, remaining_tickets):
                self.db.rollback()
                return False

            self.db.query(EventBookedSeat).filter(
                EventBookedSeat.event_id == event_id,
                EventBookedSeat.booking_id == booking_id,
            ).delete(synchronize_session=False)

            self.db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.status == BookingStatus.CONFIRMED,
            ).update(
                {
                    Booking.status: BookingStatus.CANCELLED,
                    Booking.cancelled_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )

            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True
