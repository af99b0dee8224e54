from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_admin_credentials
from westudy.core.credentials import Credentials
from westudy.schemas.common import PaginatedResponse
from westudy.schemas.user import AdminUserUpdate, User as UserSchema
from westudy.services import admin as admin_service
from westudy.utils.pagination import page_response

router = APIRouter(prefix="/admin/users", tags=["Admin - Users"])


@router.get("/", response_model=PaginatedResponse[UserSchema])
def list_users(
    search: Optional[str] = Query(None, description="Matches name or e-mail"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    users, total = admin_service.list_users(db, credentials, search, page, limit)
    return page_response(users, total, page, limit, schema=UserSchema)


@router.patch("/{user_id}", response_model=UserSchema)
def update_user(
    user_id: UUID,
    data: AdminUserUpdate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    """Activate/deactivate an account or grant/revoke administrator rights."""
    return admin_service.update_user(db, credentials, user_id, data)
