import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import ensure_owner_or_admin, get_current_organizer, get_current_user
from app.domain.errors import EventNotFoundError, TheaterNotFoundError
from app.models.user import User
from app.models.theater import Theater
from app.models.event import Event, EventBookedSeat
from app.schemas.theater import (
    TheaterCreate,
    TheaterUpdate,
    SeatConfigUpdate,
    Theater as TheaterSchema,
    BookedSeat as BookedSeatSchema,
    TheaterEventView,
)
from app.schemas.common import PaginatedResponse, paginate
from app.utils.capacity import apply_capacity
from app.utils.documents import (
    dump_layout,
    dump_seat_config,
    load_layout,
    load_pricing,
    load_seat_config,
)
from app.utils.layout import (
    apply_layout_update,
    merge_seat_config,
    validate_layout,
    with_default_row_labels,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/theaters", tags=["Theaters"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_theater(db: Session, theater_id: UUID) -> Theater:
    theater = db.query(Theater).filter(Theater.id == theater_id).first()
    if not theater:
        raise TheaterNotFoundError(str(theater_id))
    return theater


def _store_layout(theater: Theater, layout, seat_config) -> None:
    """Write layout + seat config documents and refresh the seat aggregates."""
    theater.layout = dump_layout(layout)
    theater.seat_config = dump_seat_config(seat_config)
    apply_capacity(theater, layout, seat_config)


# ---------------------------------------------------------------------------
# Theater CRUD
# ---------------------------------------------------------------------------


@router.post("/", response_model=TheaterSchema, status_code=status.HTTP_201_CREATED)
def create_theater(
    data: TheaterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    validate_layout(data.layout)
    layout = with_default_row_labels(data.layout)
    seat_config = merge_seat_config([], data.seat_config)

    theater = Theater(
        name=data.name,
        description=data.description,
        image_url=data.image_url,
        created_by=current_user.id,
    )
    _store_layout(theater, layout, seat_config)

    db.add(theater)
    db.commit()
    db.refresh(theater)
    logger.info(
        "Theater %s created by %s with %d seat(s).",
        theater.id, current_user.id, theater.total_seats,
    )
    return theater


@router.get("/", response_model=PaginatedResponse[TheaterSchema])
def list_theaters(
    active: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Theater).filter(Theater.is_active == active)
    total = db.query(func.count(Theater.id)).filter(Theater.is_active == active).scalar()
    theaters = (
        query.order_by(Theater.created_at.desc(), Theater.name)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(theaters, total, page, limit)


@router.get("/{id}", response_model=TheaterSchema)
def get_theater(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_theater(db, id)


@router.put("/{id}", response_model=TheaterSchema)
def update_theater(
    id: UUID,
    data: TheaterUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    """
    Partial update. Stage and floor geometry are merged into the stored
    layout; designer collections and seat_config are replaced when given.
    Aggregates are recomputed from the result.
    """
    theater = _get_theater(db, id)
    ensure_owner_or_admin(theater.created_by, current_user, "theaters")

    layout = load_layout(theater.layout)
    seat_config = load_seat_config(theater.seat_config)
    if data.layout is not None:
        layout = apply_layout_update(layout, data.layout)
    if data.seat_config is not None:
        seat_config = merge_seat_config([], data.seat_config)
    validate_layout(layout)

    for field, value in data.model_dump(
        exclude_unset=True, exclude={"layout", "seat_config"}
    ).items():
        if value is not None:
            setattr(theater, field, value)
    _store_layout(theater, layout, seat_config)

    db.commit()
    db.refresh(theater)
    return theater


@router.put("/{id}/seats", response_model=TheaterSchema)
def update_seat_config(
    id: UUID,
    data: SeatConfigUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    """Merge seat configuration entries by (section, row, seat_number)."""
    theater = _get_theater(db, id)
    ensure_owner_or_admin(theater.created_by, current_user, "theaters")

    layout = load_layout(theater.layout)
    seat_config = merge_seat_config(load_seat_config(theater.seat_config), data.seat_config)
    _store_layout(theater, layout, seat_config)

    db.commit()
    db.refresh(theater)
    return theater


@router.delete("/{id}", status_code=status.HTTP_200_OK)
def delete_theater(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_organizer),
):
    theater = _get_theater(db, id)
    ensure_owner_or_admin(theater.created_by, current_user, "theaters")
    if not theater.is_active:
        raise HTTPException(status_code=404, detail="Theater not found")

    # Soft delete: events keep their own copy of the layout
    theater.is_active = False
    db.commit()
    return {"id": str(id), "is_active": False}


# ---------------------------------------------------------------------------
# Theater + event bookings (seat picker)
# ---------------------------------------------------------------------------


@router.get("/{theater_id}/events/{event_id}", response_model=TheaterEventView)
def get_theater_for_event(
    theater_id: UUID,
    event_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    theater = _get_theater(db, theater_id)
    event = (
        db.query(Event)
        .filter(Event.id == event_id, Event.theater_id == theater_id)
        .first()
    )
    if not event:
        raise EventNotFoundError(str(event_id))

    booked = (
        db.query(EventBookedSeat)
        .filter(EventBookedSeat.event_id == event_id)
        .order_by(EventBookedSeat.id)
        .all()
    )
    return TheaterEventView(
        theater=TheaterSchema.model_validate(theater),
        booked_seats=[BookedSeatSchema.model_validate(b) for b in booked],
        seat_pricing=load_pricing(event.seat_pricing),
    )
