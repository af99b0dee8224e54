from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_credentials, get_current_user
from westudy.core.credentials import Credentials
from westudy.models.user import User
from westudy.schemas.user import User as UserSchema, UserUpdate
from westudy.services import auth as auth_service

router = APIRouter(prefix="/me", tags=["Me"])


@router.get("", response_model=UserSchema)
def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.patch("", response_model=UserSchema)
def update_me(
    data: UserUpdate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """Update the authenticated user's profile (name, avatar_url)."""
    return auth_service.update_profile(db, credentials, data)
