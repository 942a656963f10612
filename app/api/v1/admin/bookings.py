from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from app.db.session import get_db
from app.api.deps import get_current_admin_user
from app.models.user import User
from app.models.booking import Booking, BookingStatus
from app.schemas.booking import AdminBooking
from app.schemas.common import PaginatedResponse, paginate

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[AdminBooking])
def list_all_bookings(
    # --- Filters ---
    event_id: Optional[UUID] = Query(None, description="Filter by event"),
    status: Optional[BookingStatus] = Query(None, description="Filter by booking status (confirmed, cancelled)"),
    # --- Pagination ---
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Return all bookings across every event, newest first."""
    query = db.query(Booking)
    if event_id:
        query = query.filter(Booking.event_id == event_id)
    if status:
        query = query.filter(Booking.status == status)

    total = query.count()
    bookings = (
        query.options(
            joinedload(Booking.user),
            joinedload(Booking.event),
            selectinload(Booking.selected_seats),
        )
        .order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(bookings, total, page, limit)
