# chirp/services/users.py
"""User accounts and per-user counters."""

from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import ConflictError, NotFoundError
from chirp.logging.setup import get_logger
from chirp.repositories import messages as messages_repo
from chirp.repositories import notifications as notifications_repo
from chirp.repositories import posts as posts_repo
from chirp.repositories import social as social_repo
from chirp.repositories import users as users_repo
from chirp.services.text import sanitize_username, validate_username

logger = get_logger(__name__)


def create_user(db: Session, username: str) -> schemas.User:
    """
    Register a username (trimmed and lowercased).

    Raises:
        ValidationError: bad length or characters
        ConflictError: the username is taken
    """
    username = validate_username(username)
    if users_repo.get_by_username(db, username) is not None:
        raise ConflictError(f"user @{username} already exists")
    try:
        user = users_repo.create(db, username)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"user @{username} already exists") from exc
    logger.info("user_created", user_id=user.id, username=username)
    return schemas.User.model_validate(user)


def get_user(db: Session, username: str) -> schemas.User:
    username = sanitize_username(username)
    user = users_repo.get_by_username(db, username)
    if user is None:
        raise NotFoundError(f"user @{username} not found")
    return schemas.User.model_validate(user)


def get_user_by_id(db: Session, user_id: str) -> schemas.User:
    user = users_repo.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError(f"user {user_id} not found")
    return schemas.User.model_validate(user)


def list_users(db: Session, limit: int = 100) -> List[schemas.User]:
    return [schemas.User.model_validate(u) for u in users_repo.list_all(db, limit)]


def get_user_stats(db: Session, user_id: str) -> schemas.UserStats:
    get_user_by_id(db, user_id)
    return schemas.UserStats(
        post_count=posts_repo.count_by_author(db, user_id),
        following_count=social_repo.count_following(db, user_id),
        follower_count=social_repo.count_followers(db, user_id),
        unread_notifications=notifications_repo.count_unread(db, user_id),
        unread_messages=messages_repo.count_unread(db, user_id),
    )
