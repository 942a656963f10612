import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.db.session import get_db
from app.api.deps import ensure_owner_or_admin, get_current_organizer
from app.domain.errors import EventNotFoundError, NotSeatedEventError, TheaterNotFoundError
from app.models.user import User
from app.models.theater import Theater
from app.models.event import Event, EventStatus
from app.models.booking import Booking, BookingStatus
from app.schemas.event import (
    EventCreate,
    EventUpdate,
    Event as EventSchema,
    EventListItem,
    SeatStatus,
    SeatMapResponse,
)
from app.schemas.common import PaginatedResponse, paginate
from app.services.allocation import seat_price
from app.stores.sql_store import SqlEventStore
from app.utils.capacity import apply_capacity, compute_capacity
from app.utils.documents import (
    dump_layout,
    dump_pricing,
    dump_seat_config,
    load_layout,
    load_seat_config,
)
from app.utils.layout import build_seat_index, merge_seat_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_event(db: Session, event_id: UUID) -> Event:
    event = (
        db.query(Event)
        .options(joinedload(Event.theater))
        .filter(Event.id == event_id)
        .first()
    )
    if not event:
        raise EventNotFoundError(str(event_id))
    return event


def _page(query, page: int, limit: int):
    total = query.with_entities(func.count(Event.id)).scalar()
    events = (
        query.order_by(Event.date, Event.created_at)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(events, total, page, limit)


# ---------------------------------------------------------------------------
# POST /events: create an event, optionally seated in a theater
# ---------------------------------------------------------------------------


@router.post("/", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    """
    Seated events copy the theater's layout and seat configuration (merged with
    the per-event overrides). The copy evolves independently of the theater.
    `total_tickets` defaults to the number of bookable seats.
    """
    event = Event(
        organizer_id=current_user.id,
        title=data.title,
        description=data.description,
        date=data.date,
        location=data.location,
        category=data.category,
        image_url=data.image_url,
        ticket_price=data.ticket_price,
        status=EventStatus.PENDING,
        has_theater_seating=data.has_theater_seating,
        seat_pricing=dump_pricing(data.seat_pricing),
    )

    if data.has_theater_seating:
        theater = (
            db.query(Theater)
            .filter(Theater.id == data.theater_id, Theater.is_active == True)
            .first()
        )
        if not theater:
            raise TheaterNotFoundError(str(data.theater_id))

        layout = load_layout(theater.layout)
        seat_config = merge_seat_config(load_seat_config(theater.seat_config), data.seat_config)
        capacity = compute_capacity(layout, seat_config)

        total_tickets = data.total_tickets
        if total_tickets is None:
            total_tickets = capacity.total_seats
        elif total_tickets > capacity.total_seats:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"total_tickets cannot exceed the theater's {capacity.total_seats} seat(s)",
            )

        event.theater_id = theater.id
        event.layout = dump_layout(layout)
        event.seat_config = dump_seat_config(seat_config)
        apply_capacity(event, layout, seat_config)
    else:
        total_tickets = data.total_tickets
        event.seat_config = []

    event.total_tickets = total_tickets
    event.remaining_tickets = total_tickets

    db.add(event)
    db.commit()
    logger.info(
        "Event %s created by %s (%d ticket(s), seated=%s).",
        event.id, current_user.id, total_tickets, event.has_theater_seating,
    )
    return _get_event(db, event.id)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@router.get("/", response_model=PaginatedResponse[EventListItem])
def list_events(
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Public browse: approved events only."""
    query = db.query(Event).filter(Event.status == EventStatus.APPROVED)
    if category:
        query = query.filter(Event.category == category)
    return _page(query, page, limit)


@router.get("/mine", response_model=PaginatedResponse[EventListItem])
def list_my_events(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    query = db.query(Event).filter(Event.organizer_id == current_user.id)
    return _page(query, page, limit)


@router.get("/{id}", response_model=EventSchema)
def get_event(id: UUID, db: Session = Depends(get_db)):
    return _get_event(db, id)


# ---------------------------------------------------------------------------
# PATCH /events/{id}
# ---------------------------------------------------------------------------


@router.patch("/{id}", response_model=EventSchema)
def update_event(
    id: UUID,
    data: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    """
    Partial update. Changing `total_tickets` moves `remaining_tickets` by the
    same delta; tickets already sold cannot be taken back. Seated events never
    carry more tickets than bookable seats, so a seat config change that
    removes seats also trims the unsold tickets. The write is
    conditional on the event version, so it fails with 409 when a booking
    (or another update) landed in between.
    """
    event = _get_event(db, id)
    ensure_owner_or_admin(event.organizer_id, current_user, "events")

    if data.version is not None and data.version != event.version:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Event was modified by someone else, reload and retry",
        )

    for field, value in data.model_dump(
        exclude_unset=True,
        exclude={"seat_pricing", "seat_config", "total_tickets", "version"},
    ).items():
        if value is not None:
            setattr(event, field, value)

    if data.seat_pricing is not None:
        if event.has_theater_seating and not data.seat_pricing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="seat_pricing is required for events with theater seating",
            )
        event.seat_pricing = dump_pricing(data.seat_pricing)

    sold = event.total_tickets - event.remaining_tickets
    total_tickets = event.total_tickets

    if data.seat_config is not None:
        if not event.has_theater_seating or event.layout is None:
            raise NotSeatedEventError(str(event.id))
        layout = load_layout(event.layout)
        seat_config = merge_seat_config(load_seat_config(event.seat_config), data.seat_config)
        event.seat_config = dump_seat_config(seat_config)
        capacity = apply_capacity(event, layout, seat_config)
        # Fewer bookable seats shrink the unsold tickets; sold ones stay
        total_tickets = min(total_tickets, max(capacity.total_seats, sold))

    if data.total_tickets is not None:
        if data.total_tickets < sold:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{sold} ticket(s) are already sold",
            )
        if event.has_theater_seating and data.total_tickets > event.total_seats:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"total_tickets cannot exceed the theater's {event.total_seats} seat(s)",
            )
        total_tickets = data.total_tickets

    if total_tickets != event.total_tickets:
        event.total_tickets = total_tickets
        event.remaining_tickets = total_tickets - sold

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent modification of event %s rejected.", id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Event was modified by someone else, reload and retry",
        )
    return _get_event(db, id)


# ---------------------------------------------------------------------------
# GET /events/{id}/seats: seat map
# ---------------------------------------------------------------------------


@router.get("/{id}/seats", response_model=SeatMapResponse)
def get_seat_map(id: UUID, db: Session = Depends(get_db)):
    """
    Every enumerated seat of the event in layout order, with its resolved
    category, bookable flag, booked flag and price.
    """
    event = SqlEventStore(db).get_event(id)
    if event is None:
        raise EventNotFoundError(str(id))
    if not event.has_theater_seating or event.layout is None:
        raise NotSeatedEventError(str(id))

    booked = {b.identity for b in event.booked_seats}
    seats = []
    for identity, seat in build_seat_index(event.layout, event.seat_config).items():
        seats.append(SeatStatus(
            row=seat.ref.row,
            seat_number=seat.ref.seat_number,
            section=seat.ref.section,
            seat_type=seat.seat_type,
            is_active=seat.is_active,
            is_booked=identity in booked,
            price=seat_price(event, seat.seat_type),
        ))

    return SeatMapResponse(
        event_id=event.id,
        layout=event.layout,
        seats=seats,
        booked_count=sum(1 for s in seats if s.is_booked),
        available_count=sum(1 for s in seats if s.is_active and not s.is_booked),
        remaining_tickets=event.remaining_tickets,
    )


# ---------------------------------------------------------------------------
# DELETE /events/{id}
# ---------------------------------------------------------------------------


@router.delete("/{id}", status_code=status.HTTP_200_OK)
def delete_event(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    event = _get_event(db, id)
    ensure_owner_or_admin(event.organizer_id, current_user, "events")

    confirmed = (
        db.query(func.count(Booking.id))
        .filter(Booking.event_id == id, Booking.status == BookingStatus.CONFIRMED)
        .scalar()
    )
    if confirmed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event has {confirmed} confirmed booking(s) and cannot be deleted",
        )

    # Cancelled bookings and their seat snapshots go with the event
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted by %s.", id, current_user.id)
    return {"id": str(id), "deleted": True}
