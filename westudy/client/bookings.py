"""Booking and door-unlock flows on the client."""

import asyncio
import uuid
from datetime import date

from westudy.client.actions import AsyncAction
from westudy.client.api import WeStudyClient
from westudy.schemas.booking import Booking, UnlockResponse


class BookingFlow:
    """Reservation, cancellation and door unlock for the signed-in user, one AsyncAction each."""

    def __init__(self, client: WeStudyClient):
        self.client = client
        self.book_action = AsyncAction("book")
        self.cancel_action = AsyncAction("cancel")
        self.unlock_action = AsyncAction("unlock")

    async def book(self, listing_id: uuid.UUID, check_in: date, check_out: date, guests: int = 1) -> Booking:
        async def operation():
            return await asyncio.to_thread(self.client.book, listing_id, check_in, check_out, guests)

        return await self.book_action.run(operation)

    async def cancel(self, booking_id: uuid.UUID) -> Booking:
        async def operation():
            return await asyncio.to_thread(self.client.cancel_booking, booking_id)

        return await self.cancel_action.run(operation)

    async def unlock(self, booking_id: uuid.UUID) -> UnlockResponse:
        async def operation():
            return await asyncio.to_thread(self.client.unlock, booking_id)

        return await self.unlock_action.run(operation)
