from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import get_db
from app.models.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    subject = decode_token(credentials.credentials)
    if not subject:
        raise unauthorized
    try:
        user_id = UUID(subject)
    except ValueError:
        raise unauthorized

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise unauthorized
    return user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user


def get_current_organizer(current_user: User = Depends(get_current_user)) -> User:
    """Organizers design theaters and run events; admins may do the same."""
    if current_user.role not in (UserRole.ORGANIZER, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Organizer access required"
        )
    return current_user


def get_current_standard_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.STANDARD:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only standard users can book tickets",
        )
    return current_user


def ensure_owner_or_admin(owner_id: UUID, current_user: User, what: str) -> None:
    if current_user.role != UserRole.ADMIN and owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only modify your own {what}",
        )
