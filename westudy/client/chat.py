"""Chat thread with optimistic send and a best-effort local copy of sent messages."""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from westudy.client.api import WeStudyClient
from westudy.core.errors import ValidationError
from westudy.schemas.message import ChatMessage
from westudy.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class LocalMessageStore:
    """One JSON file per conversation, holding the messages sent from this device."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, conversation_id: uuid.UUID) -> Path:
        return self.directory / f"messages_{conversation_id}.json"

    def load(self, conversation_id: uuid.UUID) -> List[ChatMessage]:
        path = self.path_for(conversation_id)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return [ChatMessage.model_validate(item) for item in raw]
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable message cache %s: %s", path, exc)
            return []

    def append(self, message: ChatMessage) -> bool:
        """Add `message` to its conversation file. Returns False if the write failed."""
        stored = {m.id: m for m in self.load(message.conversation_id)}
        stored[message.id] = message
        path = self.path_for(message.conversation_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps([m.model_dump(mode="json") for m in stored.values()]),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("Could not save message %s locally: %s", message.id, exc)
            return False
        return True


def merge_messages(*sources: List[ChatMessage]) -> List[ChatMessage]:
    """Union by message id, later sources winning, in chronological order."""
    merged: Dict[uuid.UUID, ChatMessage] = {}
    for source in sources:
        for message in source:
            merged[message.id] = message
    return sorted(merged.values(), key=lambda m: as_utc(m.timestamp))


class ChatThread:
    """
    Messages of one conversation as shown to `user_id`.

    `send()` shows the message immediately, swaps in the server's copy
    once it is accepted and removes it again if the send fails.
    """

    def __init__(
        self,
        client: WeStudyClient,
        conversation_id: uuid.UUID,
        user_id: uuid.UUID,
        store: Optional[LocalMessageStore] = None,
    ):
        self.client = client
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.store = store
        self.messages: List[ChatMessage] = []
        self.pending_ids = set()

    async def load(self) -> List[ChatMessage]:
        remote = await asyncio.to_thread(self.client.list_messages, self.conversation_id)
        local = self.store.load(self.conversation_id) if self.store else []
        provisional = [m for m in self.messages if m.id in self.pending_ids]
        self.messages = merge_messages(local, remote) + provisional
        return self.messages

    async def send(self, text: str) -> ChatMessage:
        content = (text or "").strip()
        if not content:
            raise ValidationError("Message content must not be empty")

        provisional = ChatMessage(
            id=uuid.uuid4(),
            conversation_id=self.conversation_id,
            sender_id=self.user_id,
            text=content,
            timestamp=utcnow(),
        )
        self.messages.append(provisional)
        self.pending_ids.add(provisional.id)

        try:
            sent = await asyncio.to_thread(self.client.send_message, self.conversation_id, content)
        except Exception:
            self._drop(provisional.id)
            raise
        finally:
            self.pending_ids.discard(provisional.id)

        self.messages = [sent if m.id == provisional.id else m for m in self.messages]
        if self.store:
            self.store.append(sent)
        return sent

    def _drop(self, message_id: uuid.UUID) -> None:
        self.messages = [m for m in self.messages if m.id != message_id]
