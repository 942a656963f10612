from datetime import datetime
from typing import Optional

from pydantic import BaseModel, UUID4

from app.models.user import UserRole


# Compact user for nested responses (theater creator, admin booking view)
class UserSummary(BaseModel):
    id: UUID4
    full_name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


# Admin user management (GET /admin/users, GET /admin/users/{id})
class AdminUser(UserSummary):
    is_active: bool
    created_at: Optional[datetime] = None


# Role change (PUT /admin/users/{id}/role)
class UserRoleUpdate(BaseModel):
    role: UserRole
