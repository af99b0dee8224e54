"""Blocking HTTP client for the WeStudy API."""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from westudy.core.errors import UnexpectedError, error_for_status
from westudy.schemas.booking import Booking, UnlockResponse
from westudy.schemas.listing import ListingDetail, ListingFilters, ListingSummary
from westudy.schemas.message import ChatConversation, ChatMessage
from westudy.schemas.user import Token, User

logger = logging.getLogger(__name__)

BASE_URL = "http://127.0.0.1:8000/api/v1"
DEFAULT_TIMEOUT = 15


def filter_params(filters: Optional[ListingFilters]) -> Dict[str, Any]:
    """Query string for GET /listings; unset filters are left out."""
    if filters is None:
        return {}
    params = {
        "searchTerm": filters.search_term,
        "category": filters.category,
        "university": filters.university,
        "minPrice": filters.min_price,
        "maxPrice": filters.max_price,
    }
    return {k: str(v) for k, v in params.items() if v is not None}


class WeStudyClient:
    """
    Thin wrapper over `requests.Session`.

    Error responses are raised as the matching WeStudyError subclass, so
    callers handle a 409 from the server exactly like a ConflictError
    raised in-process.
    """

    def __init__(self, base_url: str = BASE_URL, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self.session.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise UnexpectedError("Could not reach the WeStudy server.") from exc

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise error_for_status(response.status_code, body.get("message"), body.get("error"))
        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, name: str, email: str, password: str) -> Token:
        data = self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        return Token.model_validate(data)

    def login(self, email: str, password: str) -> Token:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return Token.model_validate(data)

    def admin_login(self, email: str, password: str) -> Token:
        data = self._request("POST", "/auth/admin/login", json={"email": email, "password": password})
        return Token.model_validate(data)

    def logout(self) -> None:
        self._request("POST", "/auth/logout")

    def forgot_password(self, email: str) -> str:
        return self._request("POST", "/auth/forgot-password", json={"email": email})["message"]

    def me(self) -> User:
        return User.model_validate(self._request("GET", "/me"))

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def list_listings(self, filters: Optional[ListingFilters], page: int, limit: int) -> List[ListingSummary]:
        params = filter_params(filters)
        params.update(page=page, limit=limit)
        data = self._request("GET", "/listings/", params=params)
        return [ListingSummary.model_validate(item) for item in data["data"]]

    def get_listing(self, listing_id: uuid.UUID) -> ListingDetail:
        return ListingDetail.model_validate(self._request("GET", f"/listings/{listing_id}"))

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def book(self, listing_id: uuid.UUID, check_in: date, check_out: date, guests: int = 1) -> Booking:
        payload = {
            "listing_id": str(listing_id),
            "check_in_date": check_in.isoformat(),
            "check_out_date": check_out.isoformat(),
            "guests": guests,
        }
        return Booking.model_validate(self._request("POST", "/bookings/", json=payload))

    def list_bookings(self) -> List[Booking]:
        return [Booking.model_validate(b) for b in self._request("GET", "/bookings/")]

    def cancel_booking(self, booking_id: uuid.UUID) -> Booking:
        return Booking.model_validate(self._request("PATCH", f"/bookings/{booking_id}/cancel"))

    def unlock(self, booking_id: uuid.UUID) -> UnlockResponse:
        return UnlockResponse.model_validate(self._request("POST", f"/bookings/{booking_id}/unlock"))

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def list_conversations(self) -> List[ChatConversation]:
        return [ChatConversation.model_validate(c) for c in self._request("GET", "/messages/conversations")]

    def start_conversation(
        self, participant_ids: List[uuid.UUID], listing_id: Optional[uuid.UUID] = None
    ) -> ChatConversation:
        payload = {
            "participant_ids": [str(p) for p in participant_ids],
            "listing_id": str(listing_id) if listing_id else None,
        }
        return ChatConversation.model_validate(self._request("POST", "/messages/conversations", json=payload))

    def list_messages(self, conversation_id: uuid.UUID) -> List[ChatMessage]:
        data = self._request("GET", f"/messages/conversations/{conversation_id}")
        return [ChatMessage.model_validate(m) for m in data]

    def send_message(self, conversation_id: uuid.UUID, content: str) -> ChatMessage:
        data = self._request("POST", f"/messages/conversations/{conversation_id}", json={"content": content})
        return ChatMessage.model_validate(data)
