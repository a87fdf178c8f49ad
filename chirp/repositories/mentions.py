"""Mention edges."""
from typing import List

from sqlalchemy.orm import Session, joinedload

from chirp.models import Mention, Post
from chirp.repositories.base import insert_ignore


def create(db: Session, post_id: str, user_id: str) -> None:
    insert_ignore(db, Mention, post_id=post_id, mentioned_user_id=user_id)


def get_posts_mentioning(db: Session, user_id: str, limit: int) -> List[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .join(Mention, Mention.post_id == Post.id)
        .filter(Mention.mentioned_user_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )
