"""Tests for conversations and messages."""

from datetime import timedelta

import pytest

from westudy.core.errors import ForbiddenError, ValidationError
from westudy.models.message import Conversation, ConversationParticipant, Message
from westudy.services import messaging as messaging_service
from westudy.utils.dates import utcnow

CONVERSATIONS_URL = "/api/v1/messages/conversations"


@pytest.fixture
def make_conversation(db):
    def _make(*participants, messages=(), listing=None, days_ago=1):
        conversation = Conversation(
            listing_id=listing.id if listing else None,
            created_at=utcnow() - timedelta(days=days_ago),
        )
        conversation.participants = [ConversationParticipant(user_id=p.id) for p in participants]
        conversation.messages = [
            Message(sender_id=sender.id, content=text, created_at=utcnow() - timedelta(minutes=ago))
            for sender, text, ago in messages
        ]
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    return _make


@pytest.mark.integration
def test_list_conversations_sorted_by_last_message(client, user, other_user, make_user, make_conversation, auth_headers):
    carlos = make_user(name="Carlos Souza")
    older = make_conversation(user, other_user, messages=[(other_user, "Olá! Tudo bem com o quarto?", 120)])
    newer = make_conversation(user, carlos, messages=[(carlos, "E aí, tudo pronto para a mudança?", 5)])
    silent = make_conversation(user, make_user(name="Sem Mensagens"))

    response = client.get(CONVERSATIONS_URL, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert [c["id"] for c in body] == [str(newer.id), str(older.id), str(silent.id)]
    assert body[0]["other_participant"]["name"] == "Carlos Souza"
    assert body[0]["last_message"]["text"] == "E aí, tudo pronto para a mudança?"
    assert body[0]["unread_count"] == 1
    assert body[2]["last_message"] is None


@pytest.mark.integration
def test_silent_conversations_sort_oldest_first(client, user, make_user, make_conversation, auth_headers):
    newer = make_conversation(user, make_user(name="Recente"), days_ago=1)
    older = make_conversation(user, make_user(name="Antiga"), days_ago=5)
    talking = make_conversation(user, make_user(name="Ativa"), messages=[(user, "Oi!", 30)], days_ago=3)

    body = client.get(CONVERSATIONS_URL, headers=auth_headers).json()

    assert [c["id"] for c in body] == [str(talking.id), str(older.id), str(newer.id)]


@pytest.mark.integration
def test_conversations_of_others_are_not_listed(client, user, other_user, make_user, make_conversation, auth_headers):
    make_conversation(other_user, make_user(name="Carlos Souza"))

    assert client.get(CONVERSATIONS_URL, headers=auth_headers).json() == []


@pytest.mark.integration
def test_opening_a_conversation_resets_unread_count(client, user, other_user, make_conversation, auth_headers):
    conversation = make_conversation(
        user,
        other_user,
        messages=[
            (other_user, "Olá! Tudo bem com o quarto?", 10),
            (user, "Oi Ana! Tudo ótimo, e com você?", 8),
            (other_user, "Só queria confirmar se o Wi-Fi está funcionando bem.", 6),
        ],
    )
    assert client.get(CONVERSATIONS_URL, headers=auth_headers).json()[0]["unread_count"] == 2

    response = client.get(f"{CONVERSATIONS_URL}/{conversation.id}", headers=auth_headers)

    assert response.status_code == 200
    assert [m["text"] for m in response.json()] == [
        "Olá! Tudo bem com o quarto?",
        "Oi Ana! Tudo ótimo, e com você?",
        "Só queria confirmar se o Wi-Fi está funcionando bem.",
    ]
    assert client.get(CONVERSATIONS_URL, headers=auth_headers).json()[0]["unread_count"] == 0


@pytest.mark.integration
def test_non_participant_cannot_read(client, user, other_user, make_user, make_conversation, headers_for):
    conversation = make_conversation(user, other_user)
    outsider = make_user(name="Intruso")

    response = client.get(f"{CONVERSATIONS_URL}/{conversation.id}", headers=headers_for(outsider))

    assert response.status_code == 403


@pytest.mark.integration
def test_unknown_conversation_returns_404(client, db, auth_headers):
    response = client.get(f"{CONVERSATIONS_URL}/6f1c1c1e-8b8a-4d55-9a43-5e4d7b0c2f10", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.integration
def test_messages_require_authentication(client, db):
    assert client.get(CONVERSATIONS_URL).status_code == 401


@pytest.mark.integration
def test_send_message_trims_content(client, db, user, other_user, make_conversation, auth_headers):
    conversation = make_conversation(user, other_user)

    response = client.post(
        f"{CONVERSATIONS_URL}/{conversation.id}",
        json={"content": "  Sim, está perfeito!  "},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["text"] == "Sim, está perfeito!"
    assert body["sender_id"] == str(user.id)
    assert db.query(Message).count() == 1


@pytest.mark.integration
def test_blank_message_is_rejected_without_writing(client, db, user, other_user, make_conversation, auth_headers):
    conversation = make_conversation(user, other_user)

    response = client.post(f"{CONVERSATIONS_URL}/{conversation.id}", json={"content": "   "}, headers=auth_headers)

    assert response.status_code == 400
    assert db.query(Message).count() == 0


@pytest.mark.unit
def test_service_rejects_blank_content_before_membership_check(db, user, other_user, make_user, make_conversation, credentials_for):
    conversation = make_conversation(user, other_user)
    outsider = make_user(name="Intruso")

    with pytest.raises(ValidationError):
        messaging_service.send_message(db, credentials_for(outsider), conversation.id, "\n\t ")
    with pytest.raises(ForbiddenError):
        messaging_service.send_message(db, credentials_for(outsider), conversation.id, "oi")
    assert db.query(Message).count() == 0


@pytest.mark.integration
def test_start_conversation(client, db, user, other_user, listing, auth_headers):
    payload = {"participant_ids": [str(other_user.id)], "listing_id": str(listing.id)}

    response = client.post(CONVERSATIONS_URL, json=payload, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert {p["id"] for p in body["participants"]} == {str(user.id), str(other_user.id)}
    assert body["other_participant"]["id"] == str(other_user.id)
    assert body["listing_id"] == str(listing.id)

    again = client.post(CONVERSATIONS_URL, json=payload, headers=auth_headers)
    assert again.json()["id"] == body["id"]
    assert db.query(Conversation).count() == 1


@pytest.mark.integration
def test_start_conversation_with_unknown_user(client, db, user, auth_headers):
    payload = {"participant_ids": ["6f1c1c1e-8b8a-4d55-9a43-5e4d7b0c2f10"]}

    response = client.post(CONVERSATIONS_URL, json=payload, headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.integration
def test_start_conversation_with_only_yourself(client, db, user, auth_headers):
    response = client.post(CONVERSATIONS_URL, json={"participant_ids": [str(user.id)]}, headers=auth_headers)

    assert response.status_code == 400
