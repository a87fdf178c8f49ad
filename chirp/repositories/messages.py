"""Direct message rows."""
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.orm import Session, joinedload

from chirp.models import Message, User


def _with_users(query):
    return query.options(joinedload(Message.sender), joinedload(Message.receiver))


def _between(user_a: str, user_b: str):
    return or_(
        and_(Message.sender_id == user_a, Message.receiver_id == user_b),
        and_(Message.sender_id == user_b, Message.receiver_id == user_a),
    )


def create(db: Session, sender_id: str, receiver_id: str, text: str) -> Message:
    message = Message(sender_id=sender_id, receiver_id=receiver_id, text=text, read=False)
    db.add(message)
    db.flush()
    return message


def get_inbox(db: Session, user_id: str, limit: int) -> List[Message]:
    return (
        _with_users(db.query(Message))
        .filter(Message.receiver_id == user_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )


def get_unread(db: Session, user_id: str) -> List[Message]:
    return (
        _with_users(db.query(Message))
        .filter(Message.receiver_id == user_id, Message.read.is_(False))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )


def get_conversation(db: Session, user_a: str, user_b: str, limit: int) -> List[Message]:
    return (
        _with_users(db.query(Message))
        .filter(_between(user_a, user_b))
        .order_by(Message.created_at.asc(), Message.id.asc())
        .limit(limit)
        .all()
    )


def get_conversation_summaries(db: Session, user_id: str) -> List[Tuple[str, str, str, datetime, int]]:
    """
    One row per counterpart of user_id: (other_id, other_username,
    last_text, last_at, unread_count), most recent conversation first.

    A window over the messages partitioned by counterpart picks the latest
    message and sums unread incoming messages in the same pass.
    """
    other_id = case((Message.sender_id == user_id, Message.receiver_id), else_=Message.sender_id)
    unread = case((and_(Message.receiver_id == user_id, Message.read.is_(False)), 1), else_=0)
    ranked = (
        select(
            other_id.label("other_id"),
            Message.id.label("message_id"),
            Message.text.label("text"),
            Message.created_at.label("created_at"),
            func.row_number()
            .over(partition_by=other_id, order_by=[Message.created_at.desc(), Message.id.desc()])
            .label("position"),
            func.sum(unread).over(partition_by=other_id).label("unread"),
        )
        .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .subquery("ranked")
    )
    rows = (
        db.query(ranked.c.other_id, User.username, ranked.c.text, ranked.c.created_at, ranked.c.unread)
        .join(User, User.id == ranked.c.other_id)
        .filter(ranked.c.position == 1)
        .order_by(ranked.c.created_at.desc(), ranked.c.message_id.desc())
        .all()
    )
    return [(other, username, text, at, int(count or 0)) for other, username, text, at, count in rows]


def mark_read(db: Session, receiver_id: str, sender_id: str) -> int:
    return (
        db.query(Message)
        .filter(Message.receiver_id == receiver_id, Message.sender_id == sender_id, Message.read.is_(False))
        .update({Message.read: True}, synchronize_session="fetch")
    )


def count_unread(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Message.id))
        .filter(Message.receiver_id == user_id, Message.read.is_(False))
        .scalar()
    )


def delete(db: Session, message_id: str, sender_id: str) -> bool:
    deleted = (
        db.query(Message)
        .filter(Message.id == message_id, Message.sender_id == sender_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def search(db: Session, user_id: str, text: str, limit: int) -> List[Message]:
    return (
        _with_users(db.query(Message))
        .filter(
            or_(Message.sender_id == user_id, Message.receiver_id == user_id),
            func.lower(Message.text).contains(text.lower(), autoescape=True),
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )
