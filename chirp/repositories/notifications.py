"""Notification rows."""
from typing import List, Optional, Tuple

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from chirp.models import POST_NOTIFICATION_TYPES, Message, Notification, NotificationType, Post, User


def create(
    db: Session,
    user_id: str,
    actor_id: str,
    kind: NotificationType,
    target_id: Optional[str] = None,
) -> Optional[Notification]:
    """Insert a notification. Self-notifications are dropped and return None."""
    if user_id == actor_id:
        return None
    notification = Notification(user_id=user_id, actor_id=actor_id, type=kind, target_id=target_id, read=False)
    db.add(notification)
    db.flush()
    return notification


def get_for_user(
    db: Session, user_id: str, unread_only: bool, limit: int
) -> List[Tuple[Notification, str, Optional[str]]]:
    """
    Notifications for a recipient, newest first.

    Each row carries the actor's username and the text of the referenced
    post or message; the text is None when the target no longer exists.
    """
    target_text = case(
        (Notification.type.in_(POST_NOTIFICATION_TYPES), Post.text),
        (Notification.type == NotificationType.message, Message.text),
        else_=None,
    )
    query = (
        db.query(Notification, User.username, target_text)
        .join(User, User.id == Notification.actor_id)
        .outerjoin(Post, and_(Post.id == Notification.target_id, Notification.type.in_(POST_NOTIFICATION_TYPES)))
        .outerjoin(Message, and_(Message.id == Notification.target_id, Notification.type == NotificationType.message))
        .filter(Notification.user_id == user_id)
    )
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    rows = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
    return [(notification, actor, text) for notification, actor, text in rows]


def mark_all_read(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session="fetch")
    )


def count_unread(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .scalar()
    )


def delete(db: Session, notification_id: str, user_id: str) -> bool:
    deleted = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def delete_all_read(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(True))
        .delete(synchronize_session="fetch")
    )
