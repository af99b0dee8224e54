"""Client-side authentication session."""

import asyncio
import logging
from typing import Optional

from westudy.client.actions import AsyncAction
from westudy.client.api import WeStudyClient
from westudy.core.errors import WeStudyError
from westudy.schemas.user import Token, User

logger = logging.getLogger(__name__)


class AuthSession:
    """
    Holds the signed-in user and token for a WeStudyClient.

    Each transition (login, admin login, registration, logout) runs through its own
    AsyncAction, so a login that is still pending cannot be fired again.
    """

    def __init__(self, client: WeStudyClient):
        self.client = client
        self.user: Optional[User] = None
        self.token: Optional[Token] = None
        self.login_action = AsyncAction("login")
        self.admin_login_action = AsyncAction("admin_login")
        self.register_action = AsyncAction("register")
        self.logout_action = AsyncAction("logout")

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    def _start(self, token: Token) -> User:
        self.token = token
        self.user = token.user
        self.client.set_token(token.access_token)
        return token.user

    def _clear(self) -> None:
        self.token = None
        self.user = None
        self.client.set_token(None)

    async def login(self, email: str, password: str) -> User:
        async def operation():
            token = await asyncio.to_thread(self.client.login, email, password)
            return self._start(token)

        return await self.login_action.run(operation)

    async def admin_login(self, email: str, password: str) -> User:
        """Sign in through the admin gate; non-admin accounts get ForbiddenError and no session."""

        async def operation():
            token = await asyncio.to_thread(self.client.admin_login, email, password)
            return self._start(token)

        return await self.admin_login_action.run(operation)

    async def register(self, name: str, email: str, password: str) -> User:
        async def operation():
            token = await asyncio.to_thread(self.client.register, name, email, password)
            return self._start(token)

        return await self.register_action.run(operation)

    async def forgot_password(self, email: str) -> str:
        return await asyncio.to_thread(self.client.forgot_password, email)

    async def logout(self) -> None:
        await self.logout_action.run(self._revoke)

    async def _revoke(self) -> None:
        if self.token is None:
            return
        try:
            await asyncio.to_thread(self.client.logout)
        except WeStudyError as exc:
            # The token may already be expired or revoked; the local session ends regardless
            logger.warning("Server-side logout failed: %s", exc)
        finally:
            self._clear()
