"""Conversations and messages between users."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from westudy.core.credentials import Credentials
from westudy.core.errors import ForbiddenError, NotFoundError, ValidationError
from westudy.models.listing import Listing
from westudy.models.message import Conversation, ConversationParticipant, Message
from westudy.models.user import User
from westudy.schemas.message import ChatConversation, ChatMessage
from westudy.schemas.user import UserSummary
from westudy.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

NEVER = datetime.min.replace(tzinfo=timezone.utc)

MAX_MESSAGE_LENGTH = 5000


def serialize_message(message: Message) -> ChatMessage:
    return ChatMessage(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        text=message.content,
        timestamp=as_utc(message.created_at),
    )


def _last_messages(db: Session, conversation_ids: List[uuid.UUID]) -> Dict[uuid.UUID, Message]:
    """Latest message per conversation, derived at read time."""
    if not conversation_ids:
        return {}
    latest = (
        db.query(Message.conversation_id, func.max(Message.created_at).label("created_at"))
        .filter(Message.conversation_id.in_(conversation_ids))
        .group_by(Message.conversation_id)
        .subquery()
    )
    rows = (
        db.query(Message)
        .join(
            latest,
            (Message.conversation_id == latest.c.conversation_id)
            & (Message.created_at == latest.c.created_at),
        )
        .all()
    )
    return {m.conversation_id: m for m in rows}


def _unread_count(db: Session, participant: ConversationParticipant) -> int:
    query = db.query(func.count(Message.id)).filter(
        Message.conversation_id == participant.conversation_id,
        Message.sender_id != participant.user_id,
    )
    if participant.last_read_at is not None:
        query = query.filter(Message.created_at > participant.last_read_at)
    return query.scalar() or 0


def _require_participant(db: Session, credentials: Credentials, conversation_id: uuid.UUID) -> ConversationParticipant:
    if not db.get(Conversation, conversation_id):
        raise NotFoundError("Conversation not found")
    participant = db.get(ConversationParticipant, (conversation_id, credentials.user_id))
    if not participant:
        raise ForbiddenError("Access denied to this conversation")
    return participant


def _serialize_conversation(
    conversation: Conversation,
    credentials: Credentials,
    last_message: Optional[Message],
    unread_count: int,
) -> ChatConversation:
    participants = [UserSummary.model_validate(p.user) for p in conversation.participants]
    other = next((p for p in participants if p.id != credentials.user_id), None)
    return ChatConversation(
        id=conversation.id,
        listing_id=conversation.listing_id,
        created_at=as_utc(conversation.created_at),
        participants=participants,
        other_participant=other,
        last_message=serialize_message(last_message) if last_message else None,
        unread_count=unread_count,
    )


def list_conversations(db: Session, credentials: Credentials) -> List[ChatConversation]:
    """
    The caller's conversations, most recently active first.

    Conversations without any message sort last, oldest created first.
    """
    memberships = (
        db.query(ConversationParticipant)
        .options(
            selectinload(ConversationParticipant.conversation)
            .selectinload(Conversation.participants)
            .selectinload(ConversationParticipant.user)
        )
        .filter(ConversationParticipant.user_id == credentials.user_id)
        .all()
    )
    last = _last_messages(db, [m.conversation_id for m in memberships])

    result = [
        _serialize_conversation(
            m.conversation, credentials, last.get(m.conversation_id), _unread_count(db, m)
        )
        for m in memberships
    ]
    active = sorted(
        (c for c in result if c.last_message),
        key=lambda c: as_utc(c.last_message.timestamp),
        reverse=True,
    )
    silent = sorted(
        (c for c in result if not c.last_message),
        key=lambda c: as_utc(c.created_at) if c.created_at else NEVER,
    )
    return active + silent


def list_messages(db: Session, credentials: Credentials, conversation_id: uuid.UUID) -> List[ChatMessage]:
    """Messages of one conversation in chronological order; opening it resets the unread counter."""
    participant = _require_participant(db, credentials, conversation_id)
    messages = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.id)
        .all()
    )
    participant.last_read_at = utcnow()
    db.commit()
    return [serialize_message(m) for m in messages]


def send_message(
    db: Session, credentials: Credentials, conversation_id: uuid.UUID, content: str
) -> ChatMessage:
    """Append a message. Blank content is rejected before anything is written."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Message content must not be empty")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message content must be at most {MAX_MESSAGE_LENGTH} characters")

    participant = _require_participant(db, credentials, conversation_id)

    message = Message(conversation_id=conversation_id, sender_id=credentials.user_id, content=text)
    db.add(message)
    # The sender has obviously seen everything up to their own message
    participant.last_read_at = message.created_at = utcnow()
    db.commit()
    db.refresh(message)
    return serialize_message(message)


def start_conversation(
    db: Session,
    credentials: Credentials,
    participant_ids: List[uuid.UUID],
    listing_id: Optional[uuid.UUID] = None,
) -> ChatConversation:
    """
    Open a conversation between the caller and `participant_ids`.

    The participant set is fixed at creation. When the same set already
    has a conversation about the same listing, that one is returned.
    """
    members = set(participant_ids) | {credentials.user_id}
    if len(members) < 2:
        raise ValidationError("A conversation needs at least one other participant")

    found = db.query(User.id).filter(User.id.in_(members), User.is_active == True).all()  # noqa: E712
    missing = members - {row.id for row in found}
    if missing:
        raise NotFoundError("One or more participants do not exist")
    if listing_id is not None and not db.get(Listing, listing_id):
        raise NotFoundError("Listing not found")

    candidates = (
        db.query(Conversation)
        .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
        .options(selectinload(Conversation.participants).selectinload(ConversationParticipant.user))
        .filter(ConversationParticipant.user_id == credentials.user_id)
        .filter(Conversation.listing_id == listing_id if listing_id else Conversation.listing_id.is_(None))
        .all()
    )
    for conversation in candidates:
        if {p.user_id for p in conversation.participants} == members:
            participant = next(p for p in conversation.participants if p.user_id == credentials.user_id)
            last = _last_messages(db, [conversation.id]).get(conversation.id)
            return _serialize_conversation(conversation, credentials, last, _unread_count(db, participant))

    conversation = Conversation(listing_id=listing_id)
    conversation.participants = [ConversationParticipant(user_id=user_id) for user_id in members]
    db.add(conversation)
    db.commit()
    logger.info("Conversation %s started by %s", conversation.id, credentials.user_id)

    conversation = (
        db.query(Conversation)
        .options(selectinload(Conversation.participants).selectinload(ConversationParticipant.user))
        .filter(Conversation.id == conversation.id)
        .one()
    )
    return _serialize_conversation(conversation, credentials, None, 0)
