import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from westudy.core.errors import ForbiddenError


@dataclass(frozen=True)
class Credentials:
    """Authenticated caller, handed explicitly to every service call."""

    user_id: uuid.UUID
    is_admin: bool = False
    token_jti: Optional[str] = None
    token_expires_at: Optional[datetime] = None

    def require_admin(self) -> "Credentials":
        if not self.is_admin:
            raise ForbiddenError("Administrator access required.")
        return self
