# chirp/services/social.py
"""
Follow, like and block relationships.

Follow and like are countable relationships: a duplicate insert is a
ConflictError and removing a missing edge is a NotFoundError. Block records
intent, so repeating it is silently absorbed.
"""
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import ConflictError, NotFoundError, SelfReferenceError
from chirp.logging.setup import get_logger
from chirp.models import NotificationType
from chirp.repositories import notifications as notifications_repo
from chirp.repositories import posts as posts_repo
from chirp.repositories import social as social_repo
from chirp.repositories import users as users_repo

logger = get_logger(__name__)


def _require_user(db: Session, user_id: str) -> None:
    if users_repo.get_by_id(db, user_id) is None:
        raise NotFoundError(f"user {user_id} not found")


def _users(rows) -> List[schemas.User]:
    return [schemas.User.model_validate(u) for u in rows]


def follow(db: Session, follower_id: str, followee_id: str) -> None:
    """
    Follow a user and notify them.

    Raises:
        SelfReferenceError: follower and followee are the same user
        NotFoundError: either user does not exist
        ConflictError: already following
    """
    if follower_id == followee_id:
        raise SelfReferenceError("cannot follow yourself")
    _require_user(db, follower_id)
    _require_user(db, followee_id)
    if social_repo.follow_exists(db, follower_id, followee_id):
        raise ConflictError("already following this user")

    try:
        social_repo.insert_follow(db, follower_id, followee_id)
        notifications_repo.create(db, followee_id, follower_id, NotificationType.follow)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if social_repo.follow_exists(db, follower_id, followee_id):
            raise ConflictError("already following this user") from exc
        raise
    logger.info("user_followed", follower_id=follower_id, followee_id=followee_id)


def unfollow(db: Session, follower_id: str, followee_id: str) -> None:
    if not social_repo.delete_follow(db, follower_id, followee_id):
        raise NotFoundError("not following this user")
    db.commit()


def is_following(db: Session, follower_id: str, followee_id: str) -> bool:
    return social_repo.follow_exists(db, follower_id, followee_id)


def get_following(db: Session, user_id: str) -> List[schemas.User]:
    _require_user(db, user_id)
    return _users(social_repo.get_following(db, user_id))


def get_followers(db: Session, user_id: str) -> List[schemas.User]:
    _require_user(db, user_id)
    return _users(social_repo.get_followers(db, user_id))


def like(db: Session, user_id: str, post_id: str) -> None:
    """
    Like a post and notify its author (never for a self-like).

    Raises:
        NotFoundError: the user or the post does not exist
        ConflictError: already liked
    """
    _require_user(db, user_id)
    author = posts_repo.author_of(db, post_id)
    if author is None:
        raise NotFoundError(f"post {post_id} not found")
    if social_repo.like_exists(db, user_id, post_id):
        raise ConflictError("already liked this post")

    try:
        social_repo.insert_like(db, user_id, post_id)
        notifications_repo.create(db, author.id, user_id, NotificationType.like, post_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if social_repo.like_exists(db, user_id, post_id):
            raise ConflictError("already liked this post") from exc
        raise
    logger.info("post_liked", post_id=post_id, user_id=user_id)


def unlike(db: Session, user_id: str, post_id: str) -> None:
    if not social_repo.delete_like(db, user_id, post_id):
        raise NotFoundError("you have not liked this post")
    db.commit()


def get_likers(db: Session, post_id: str) -> List[schemas.User]:
    if posts_repo.get_by_id(db, post_id) is None:
        raise NotFoundError(f"post {post_id} not found")
    return _users(social_repo.get_likers(db, post_id))


def block(db: Session, blocker_id: str, blocked_id: str) -> None:
    """
    Block a user. Blocking someone already blocked is not an error.

    Raises:
        SelfReferenceError: blocker and blocked are the same user
        NotFoundError: either user does not exist
    """
    if blocker_id == blocked_id:
        raise SelfReferenceError("you cannot block yourself")
    _require_user(db, blocker_id)
    _require_user(db, blocked_id)
    social_repo.insert_block(db, blocker_id, blocked_id)
    db.commit()
    logger.info("user_blocked", blocker_id=blocker_id, blocked_id=blocked_id)


def unblock(db: Session, blocker_id: str, blocked_id: str) -> None:
    if not social_repo.delete_block(db, blocker_id, blocked_id):
        raise NotFoundError("user was not blocked")
    db.commit()


def is_blocked(db: Session, blocker_id: str, blocked_id: str) -> bool:
    return social_repo.is_blocked(db, blocker_id, blocked_id)


def get_blocked(db: Session, blocker_id: str) -> List[schemas.User]:
    return _users(social_repo.get_blocked(db, blocker_id))
