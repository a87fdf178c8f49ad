# chirp/services/messaging.py
"""Direct messages: send, inbox, conversations and read state."""

from typing import List

from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import ForbiddenError, NotFoundError, SelfReferenceError, ValidationError
from chirp.logging.setup import get_logger
from chirp.models import NotificationType
from chirp.repositories import messages as messages_repo
from chirp.repositories import notifications as notifications_repo
from chirp.repositories import social as social_repo
from chirp.repositories import users as users_repo

logger = get_logger(__name__)


def _to_messages(rows) -> List[schemas.Message]:
    return [schemas.Message.model_validate(m) for m in rows]


def send_message(db: Session, sender_id: str, receiver_id: str, text: str) -> schemas.Message:
    """
    Send a direct message.

    A block in either direction stops the message. The check runs before
    anything is written, so a refused send never leaves a row behind.

    Raises:
        SelfReferenceError: sender and receiver are the same user
        ValidationError: empty text
        NotFoundError: the sender or the receiver does not exist
        ForbiddenError: one of the two has blocked the other
    """
    if sender_id == receiver_id:
        raise SelfReferenceError("you cannot message yourself")
    text = text.strip()
    if not text:
        raise ValidationError("message cannot be empty")
    for user_id in (sender_id, receiver_id):
        if users_repo.get_by_id(db, user_id) is None:
            raise NotFoundError(f"user {user_id} not found")
    if social_repo.is_blocked(db, receiver_id, sender_id) or social_repo.is_blocked(db, sender_id, receiver_id):
        raise ForbiddenError("you cannot send messages to this user")

    message = messages_repo.create(db, sender_id, receiver_id, text)
    notifications_repo.create(db, receiver_id, sender_id, NotificationType.message, message.id)
    db.commit()
    logger.info("message_sent", message_id=message.id, sender_id=sender_id, receiver_id=receiver_id)
    return schemas.Message.model_validate(message)


def get_inbox(db: Session, user_id: str, limit: int = 20) -> List[schemas.Message]:
    return _to_messages(messages_repo.get_inbox(db, user_id, limit))


def get_unread_messages(db: Session, user_id: str) -> List[schemas.Message]:
    return _to_messages(messages_repo.get_unread(db, user_id))


def count_unread_messages(db: Session, user_id: str) -> int:
    return messages_repo.count_unread(db, user_id)


def get_conversation(db: Session, user_a: str, user_b: str, limit: int = 50) -> List[schemas.Message]:
    """All messages between two users in either direction, oldest first."""
    return _to_messages(messages_repo.get_conversation(db, user_a, user_b, limit))


def get_conversations(db: Session, user_id: str) -> List[schemas.Conversation]:
    """
    One entry per counterpart with the latest message and the number of
    unread messages from that counterpart, most recent conversation first.
    """
    return [
        schemas.Conversation(
            other_user_id=other_id,
            other_username=username,
            last_message=text,
            last_message_at=last_at,
            unread_count=unread,
        )
        for other_id, username, text, last_at, unread in messages_repo.get_conversation_summaries(db, user_id)
    ]


def mark_conversation_read(db: Session, receiver_id: str, sender_id: str) -> int:
    """Mark messages from sender_id to receiver_id as read. Only that direction changes."""
    updated = messages_repo.mark_read(db, receiver_id, sender_id)
    db.commit()
    return updated


def delete_message(db: Session, message_id: str, requester_id: str) -> None:
    """
    Delete a message sent by requester_id.

    Raises:
        NotFoundError: no such message, or the requester did not send it
    """
    if not messages_repo.delete(db, message_id, requester_id):
        raise NotFoundError("message not found or you don't own it")
    db.commit()


def search_messages(db: Session, user_id: str, query: str, limit: int = 50) -> List[schemas.Message]:
    query = query.strip()
    if not query:
        raise ValidationError("search query cannot be empty")
    return _to_messages(messages_repo.search(db, user_id, query, limit))
