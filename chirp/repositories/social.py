"""Follow, like and block edges."""
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from chirp.models import Block, Follow, Like, User
from chirp.repositories.base import exists, insert_ignore


# Follows

def follow_exists(db: Session, follower_id: str, followee_id: str) -> bool:
    return exists(db, Follow, Follow.follower_id == follower_id, Follow.followee_id == followee_id)


def insert_follow(db: Session, follower_id: str, followee_id: str) -> Follow:
    edge = Follow(follower_id=follower_id, followee_id=followee_id)
    db.add(edge)
    db.flush()
    return edge


def delete_follow(db: Session, follower_id: str, followee_id: str) -> bool:
    deleted = (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.followee_id == followee_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def get_following(db: Session, user_id: str) -> List[User]:
    return (
        db.query(User)
        .join(Follow, Follow.followee_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(User.username)
        .all()
    )


def get_followers(db: Session, user_id: str) -> List[User]:
    return (
        db.query(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.followee_id == user_id)
        .order_by(User.username)
        .all()
    )


def count_following(db: Session, user_id: str) -> int:
    return db.query(func.count()).select_from(Follow).filter(Follow.follower_id == user_id).scalar()


def count_followers(db: Session, user_id: str) -> int:
    return db.query(func.count()).select_from(Follow).filter(Follow.followee_id == user_id).scalar()


# Likes

def like_exists(db: Session, user_id: str, post_id: str) -> bool:
    return exists(db, Like, Like.user_id == user_id, Like.post_id == post_id)


def insert_like(db: Session, user_id: str, post_id: str) -> Like:
    edge = Like(user_id=user_id, post_id=post_id)
    db.add(edge)
    db.flush()
    return edge


def delete_like(db: Session, user_id: str, post_id: str) -> bool:
    deleted = (
        db.query(Like)
        .filter(Like.user_id == user_id, Like.post_id == post_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def get_likers(db: Session, post_id: str) -> List[User]:
    return (
        db.query(User)
        .join(Like, Like.user_id == User.id)
        .filter(Like.post_id == post_id)
        .order_by(Like.created_at.desc(), User.username)
        .all()
    )


def count_likes(db: Session, post_id: str) -> int:
    return db.query(func.count()).select_from(Like).filter(Like.post_id == post_id).scalar()


# Blocks

def insert_block(db: Session, blocker_id: str, blocked_id: str) -> None:
    """Insert a block edge; an existing edge is left untouched."""
    insert_ignore(db, Block, blocker_id=blocker_id, blocked_id=blocked_id)


def delete_block(db: Session, blocker_id: str, blocked_id: str) -> bool:
    deleted = (
        db.query(Block)
        .filter(Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def is_blocked(db: Session, blocker_id: str, blocked_id: str) -> bool:
    return exists(db, Block, Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)


def get_blocked(db: Session, blocker_id: str) -> List[User]:
    return (
        db.query(User)
        .join(Block, Block.blocked_id == User.id)
        .filter(Block.blocker_id == blocker_id)
        .order_by(User.username)
        .all()
    )
