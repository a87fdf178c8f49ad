# chirp/services/notifications.py
"""
Notification reads and read-state changes.

Notifications are written by the post, social and messaging services at the
moment of the triggering action; this module only reads and tidies them.
"""
from typing import List

from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import NotFoundError, ValidationError
from chirp.repositories import notifications as notifications_repo


def get_notifications(
    db: Session, user_id: str, unread_only: bool = False, limit: int = 20
) -> List[schemas.Notification]:
    """
    Notifications for a user, newest first.

    Each one carries the actor's username and, for post and message
    notifications, the target's text (None if the target was deleted).
    """
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    return [
        schemas.Notification(
            id=n.id,
            user_id=n.user_id,
            actor_id=n.actor_id,
            actor_username=actor,
            type=n.type,
            target_id=n.target_id,
            target_text=target_text,
            created_at=n.created_at,
            read=n.read,
        )
        for n, actor, target_text in notifications_repo.get_for_user(db, user_id, unread_only, limit)
    ]


def count_unread(db: Session, user_id: str) -> int:
    return notifications_repo.count_unread(db, user_id)


def mark_all_read(db: Session, user_id: str) -> int:
    updated = notifications_repo.mark_all_read(db, user_id)
    db.commit()
    return updated


def delete_all_read(db: Session, user_id: str) -> int:
    deleted = notifications_repo.delete_all_read(db, user_id)
    db.commit()
    return deleted


def delete_notification(db: Session, notification_id: str, user_id: str) -> None:
    if not notifications_repo.delete(db, notification_id, user_id):
        raise NotFoundError("notification not found")
    db.commit()
