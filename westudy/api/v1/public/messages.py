from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_credentials
from westudy.core.credentials import Credentials
from westudy.schemas.message import ChatConversation, ChatMessage, ConversationCreate, MessageCreate
from westudy.services import messaging as messaging_service

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("/conversations", response_model=List[ChatConversation])
def list_conversations(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return messaging_service.list_conversations(db, credentials)


@router.post("/conversations", response_model=ChatConversation, status_code=status.HTTP_201_CREATED)
def start_conversation(
    data: ConversationCreate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return messaging_service.start_conversation(db, credentials, data.participant_ids, data.listing_id)


@router.get("/conversations/{conversation_id}", response_model=List[ChatMessage])
def list_messages(
    conversation_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """Messages in chronological order. Marks the conversation as read."""
    return messaging_service.list_messages(db, credentials, conversation_id)


@router.post(
    "/conversations/{conversation_id}",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    conversation_id: UUID,
    data: MessageCreate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return messaging_service.send_message(db, credentials, conversation_id, data.content)
