import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.db.session import get_db
from app.api.deps import get_current_admin_user
from app.domain.errors import EventNotFoundError
from app.models.user import User
from app.models.event import Event, EventStatus
from app.schemas.event import EventListItem, EventStatusUpdate, Event as EventSchema
from app.schemas.common import PaginatedResponse, paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/events", tags=["Admin - Events"])


@router.get("/", response_model=PaginatedResponse[EventListItem])
def list_all_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    query = db.query(Event)
    if status_filter:
        query = query.filter(Event.status == status_filter)

    total = query.with_entities(func.count(Event.id)).scalar()
    events = (
        query.order_by(Event.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(events, total, page, limit)


@router.patch("/{id}/status", response_model=EventSchema)
def update_event_status(
    id: UUID,
    data: EventStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    event = db.query(Event).filter(Event.id == id).first()
    if not event:
        raise EventNotFoundError(str(id))

    event.status = data.status
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Event was modified by someone else, retry",
        )
    db.refresh(event)
    logger.info("Event %s marked %s by admin %s.", id, data.status.value, current_user.id)
    return event
