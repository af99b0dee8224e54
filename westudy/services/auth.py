"""Registration, login/logout, password reset and bearer-token resolution."""

import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from westudy.core.config import settings
from westudy.core.credentials import Credentials
from westudy.core.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from westudy.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from westudy.models.auth_token import PasswordResetToken, RevokedToken
from westudy.models.user import User
from westudy.schemas.user import Token, User as UserSchema, UserCreate, UserUpdate
from westudy.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account exists for this e-mail, a reset link has been sent."


def build_token_response(user: User) -> Token:
    return Token(
        access_token=create_access_token(subject=str(user.id)),
        refresh_token=create_refresh_token(subject=str(user.id)),
        token_type="bearer",
        user=UserSchema.model_validate(user),
    )


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _create_user(db: Session, data: UserCreate, is_admin: bool) -> User:
    email = _normalize_email(data.email)
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")
    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=get_password_hash(data.password),
        avatar_url=data.avatar_url,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register(db: Session, data: UserCreate) -> Token:
    user = _create_user(db, data, is_admin=False)
    logger.info("User %s registered", user.id)
    return build_token_response(user)


def register_admin(db: Session, data: UserCreate, admin_secret: str) -> Token:
    if not hmac.compare_digest(admin_secret.encode(), settings.ADMIN_SECRET_KEY.encode()):
        raise ForbiddenError("Invalid admin secret")
    user = _create_user(db, data, is_admin=True)
    logger.info("Administrator %s registered", user.id)
    return build_token_response(user)


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Incorrect email or password")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")
    return user


def login(db: Session, email: str, password: str) -> Token:
    return build_token_response(authenticate(db, email, password))


def admin_login(db: Session, email: str, password: str) -> Token:
    user = authenticate(db, email, password)
    if not user.is_admin:
        raise ForbiddenError("Administrator access required.")
    return build_token_response(user)


def logout(db: Session, credentials: Credentials) -> None:
    """Revoke the access token the caller authenticated with."""
    if not credentials.token_jti:
        return
    if not db.get(RevokedToken, credentials.token_jti):
        db.add(
            RevokedToken(
                jti=credentials.token_jti,
                user_id=credentials.user_id,
                expires_at=credentials.token_expires_at,
            )
        )
        db.commit()
    logger.info("User %s logged out", credentials.user_id)


def resolve_credentials(db: Session, token: Optional[str]) -> Credentials:
    """
    Turn a bearer token into Credentials.

    Raises AuthError for missing, malformed, expired, refresh or revoked
    tokens and for unknown users; ForbiddenError for deactivated accounts.
    """
    if not token:
        raise AuthError()
    claims = decode_token(token)
    if not claims or claims.get("type") != "access":
        raise AuthError("Could not validate credentials")

    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthError("Could not validate credentials")

    jti = claims.get("jti")
    if jti and db.get(RevokedToken, jti):
        raise AuthError("Session has been revoked")

    user = db.get(User, user_id)
    if not user:
        raise AuthError("Could not validate credentials")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    expires_at = None
    if claims.get("exp"):
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
    return Credentials(user_id=user.id, is_admin=user.is_admin, token_jti=jti, token_expires_at=expires_at)


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


def forgot_password(db: Session, email: str) -> str:
    """
    Issue a single-use reset token for the account, if there is one.

    The answer is the same whether or not the e-mail is registered. The
    reset link is logged instead of mailed.
    """
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if not user or not user.is_active:
        return FORGOT_PASSWORD_MESSAGE

    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token_hash=hash_reset_token(token),
            expires_at=utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES),
        )
    )
    db.commit()

    reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    logger.info("Password reset requested for %s: %s", user.id, reset_url)
    return FORGOT_PASSWORD_MESSAGE


def reset_password(db: Session, token: str, new_password: str) -> None:
    if len(new_password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    row = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.token_hash == hash_reset_token(token))
        .first()
    )
    if not row or row.used_at is not None or as_utc(row.expires_at) < utcnow():
        raise ValidationError("Invalid or expired token")

    user = db.get(User, row.user_id)
    if not user or not user.is_active:
        raise ValidationError("Invalid or expired token")

    user.password_hash = get_password_hash(new_password)
    row.used_at = utcnow()
    db.commit()
    logger.info("Password reset completed for %s", user.id)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


def get_profile(db: Session, credentials: Credentials) -> User:
    user = db.get(User, credentials.user_id)
    if not user:
        raise AuthError("Could not validate credentials")
    return user


def update_profile(db: Session, credentials: Credentials, data: UserUpdate) -> User:
    user = get_profile(db, credentials)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "name":
            if value is None:
                continue
            value = value.strip()
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user
