from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from westudy.core.config import settings
from westudy.core.credentials import Credentials
from westudy.db.session import get_db
from westudy.models.user import User
from westudy.services import auth as auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token", auto_error=False)


def get_credentials(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> Credentials:
    """Resolve the bearer token; AuthError (401) when it is missing or no longer valid."""
    return auth_service.resolve_credentials(db, token)


def get_admin_credentials(credentials: Credentials = Depends(get_credentials)) -> Credentials:
    return credentials.require_admin()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
) -> User:
    return auth_service.get_profile(db, credentials)
