"""Hashtag rows and post links."""
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from chirp.models import Hashtag, Post, PostHashtag
from chirp.repositories.base import insert_ignore


def get_or_create(db: Session, tag: str) -> Hashtag:
    hashtag = db.query(Hashtag).filter(Hashtag.tag == tag).first()
    if hashtag is None:
        hashtag = Hashtag(tag=tag)
        db.add(hashtag)
        db.flush()
    return hashtag


def link(db: Session, post_id: str, hashtag_id: int) -> None:
    insert_ignore(db, PostHashtag, post_id=post_id, hashtag_id=hashtag_id)


def get_tags_for_post(db: Session, post_id: str) -> List[str]:
    return [
        tag
        for (tag,) in db.query(Hashtag.tag)
        .join(PostHashtag, PostHashtag.hashtag_id == Hashtag.id)
        .filter(PostHashtag.post_id == post_id)
        .order_by(Hashtag.tag)
        .all()
    ]


def get_posts(db: Session, tag: str, limit: int) -> List[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .join(PostHashtag, PostHashtag.post_id == Post.id)
        .join(Hashtag, Hashtag.id == PostHashtag.hashtag_id)
        .filter(Hashtag.tag == tag)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )


def trending(db: Session, since: datetime, limit: int) -> List[Tuple[str, int]]:
    """
    Count distinct posts per hashtag among posts created after ``since``.

    Returns:
        (tag, count) pairs, count descending, ties broken by tag ascending
    """
    post_count = func.count(func.distinct(PostHashtag.post_id)).label("post_count")
    rows = (
        db.query(Hashtag.tag, post_count)
        .join(PostHashtag, PostHashtag.hashtag_id == Hashtag.id)
        .join(Post, Post.id == PostHashtag.post_id)
        .filter(Post.created_at > since)
        .group_by(Hashtag.id, Hashtag.tag)
        .order_by(post_count.desc(), Hashtag.tag.asc())
        .limit(limit)
        .all()
    )
    return [(tag, count) for tag, count in rows]
