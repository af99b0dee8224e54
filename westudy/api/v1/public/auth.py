from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_credentials
from westudy.core.credentials import Credentials
from westudy.schemas.common import MessageResponse
from westudy.schemas.user import (
    AdminCreate,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    Token,
    UserCreate,
)
from westudy.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, db: Session = Depends(get_db)):
    return auth_service.register(db, body)


@router.post("/admin/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def admin_register(body: AdminCreate, db: Session = Depends(get_db)):
    return auth_service.register_admin(db, body, body.admin_secret)


@router.post("/login", response_model=Token)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, body.email, body.password)


@router.post("/admin/login", response_model=Token)
def admin_login(body: LoginRequest, db: Session = Depends(get_db)):
    """Same as /login, but only administrators get a session."""
    return auth_service.admin_login(db, body.email, body.password)


@router.post("/token", response_model=Token, include_in_schema=False)
def login_form(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """OAuth2 password flow used by the interactive docs; username is the e-mail."""
    return auth_service.login(db, form_data.username, form_data.password)


@router.post("/logout", response_model=MessageResponse)
def logout(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """Revoke the access token used for this request."""
    auth_service.logout(db, credentials)
    return MessageResponse(message="Successfully logged out")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    return MessageResponse(message=auth_service.forgot_password(db, body.email))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, body.token, body.new_password)
    return MessageResponse(message="Password has been reset")
