import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user
from app.models.user import User, UserRole
from app.schemas.user import AdminUser, UserRoleUpdate
from app.schemas.common import PaginatedResponse, paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Admin - Users"])


def _get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _ensure_not_self(user: User, current_user: User, action: str) -> None:
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Admins cannot {action} their own account",
        )


@router.get("/", response_model=PaginatedResponse[AdminUser])
def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role: standard, organizer, admin"),
    active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if active is not None:
        query = query.filter(User.is_active == active)

    total = query.with_entities(func.count(User.id)).scalar()
    users = (
        query.order_by(User.created_at.desc(), User.email)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return paginate(users, total, page, limit)


@router.get("/{id}", response_model=AdminUser)
def get_user(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _get_user(db, id)


@router.put("/{id}/role", response_model=AdminUser)
def update_user_role(
    id: UUID,
    data: UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    user = _get_user(db, id)
    _ensure_not_self(user, current_user, "change the role of")

    user.role = data.role
    db.commit()
    db.refresh(user)
    logger.info("User %s is now %s (admin %s).", id, data.role.value, current_user.id)
    return user


@router.delete("/{id}", response_model=AdminUser)
def deactivate_user(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """
    Soft delete: the account stays for its bookings and events but can no
    longer authenticate.
    """
    user = _get_user(db, id)
    _ensure_not_self(user, current_user, "deactivate")

    user.is_active = False
    db.commit()
    db.refresh(user)
    logger.info("User %s deactivated by admin %s.", id, current_user.id)
    return user
