import logging
import uuid
from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from app.db.session import get_db
from app.api.deps import get_current_standard_user, get_current_user
from app.domain.errors import BookingNotFoundError, EventNotFoundError
from app.domain.models import SeatRef
from app.models.user import User, UserRole
from app.models.booking import Booking, BookingStatus
from app.schemas.booking import (
    BookingCreate,
    Booking as BookingSchema,
    BookingCancelResponse,
)
from app.schemas.common import PaginatedResponse, paginate
from app.services.allocation import SeatAllocator
from app.stores.sql_store import SqlEventStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_booking(booking_id: UUID, current_user: User, db: Session) -> Booking:
    """Load a booking with seats and event; admins can see any booking."""
    query = (
        db.query(Booking)
        .options(selectinload(Booking.selected_seats), joinedload(Booking.event))
        .filter(Booking.id == booking_id)
    )
    if current_user.role != UserRole.ADMIN:
        query = query.filter(Booking.user_id == current_user.id)
    booking = query.first()
    if not booking:
        raise BookingNotFoundError(str(booking_id))
    return booking


# ---------------------------------------------------------------------------
# POST /bookings: book seats or general admission tickets
# ---------------------------------------------------------------------------


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_standard_user),
):
    """
    Two flows:

    **Seated events**: provide `selected_seats`. Each seat is checked against
    the event's layout and existing bookings and priced by its seat type.

    **General admission**: provide `number_of_tickets` (default 1).
    Total = ticket price × quantity.
    """
    store = SqlEventStore(db)
    event = store.get_event(data.event_id)
    if event is None:
        raise EventNotFoundError(str(data.event_id))

    allocator = SeatAllocator(store)
    booking_id = uuid.uuid4()
    if event.has_theater_seating or data.selected_seats:
        allocator.allocate(
            data.event_id,
            [
                SeatRef(row=s.row, seat_number=s.seat_number, section=s.section)
                for s in data.selected_seats
            ],
            booking_id,
            current_user.id,
        )
    else:
        allocator.allocate_tickets(
            data.event_id, data.number_of_tickets or 1, booking_id, current_user.id
        )

    return _load_booking(booking_id, current_user, db)


# ---------------------------------------------------------------------------
# GET /bookings: list current user's bookings
# ---------------------------------------------------------------------------


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_my_bookings(
    status: Optional[BookingStatus] = Query(None, description="Filter by status: confirmed, cancelled"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the authenticated user's bookings, newest first."""
    query = db.query(Booking).filter(Booking.user_id == current_user.id)
    if status:
        query = query.filter(Booking.status == status)

    total = query.count()
    bookings = (
        query.options(selectinload(Booking.selected_seats), joinedload(Booking.event))
        .order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(bookings, total, page, limit)


# ---------------------------------------------------------------------------
# GET /bookings/{id}: single booking detail
# ---------------------------------------------------------------------------


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return a single booking. Only the owner or an admin can access it."""
    return _load_booking(booking_id, current_user, db)


# ---------------------------------------------------------------------------
# PATCH /bookings/{id}/cancel
# ---------------------------------------------------------------------------


@router.patch("/{booking_id}/cancel", response_model=BookingCancelResponse)
def cancel_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Cancel a booking and return its seats (or tickets) to the event.
    Cancelling an already cancelled booking is a no-op returning the
    current state with `released_tickets` = 0.
    """
    booking = _load_booking(booking_id, current_user, db)
    event_id = booking.event_id

    released = SeatAllocator(SqlEventStore(db)).release(event_id, booking_id)

    booking = _load_booking(booking_id, current_user, db)
    return BookingCancelResponse(
        id=booking.id,
        booking_number=booking.booking_number,
        status=booking.status,
        released_tickets=released,
        cancelled_at=booking.cancelled_at,
    )
