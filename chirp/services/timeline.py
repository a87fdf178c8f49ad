# chirp/services/timeline.py
"""Read paths: feed, thread view, search, hashtag and mention feeds, trending."""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import NotFoundError, ValidationError
from chirp.repositories import hashtags as hashtags_repo
from chirp.repositories import mentions as mentions_repo
from chirp.repositories import posts as posts_repo
from chirp.models import utcnow
from chirp.repositories import users as users_repo

DEFAULT_TRENDING_WINDOW = timedelta(hours=24)


def _check_page(limit: int, offset: int = 0) -> None:
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    if offset < 0:
        raise ValidationError("offset cannot be negative")


def _to_posts(rows) -> List[schemas.Post]:
    return [schemas.Post.model_validate(p) for p in rows]


def get_feed(db: Session, user_id: str, limit: int = 20, offset: int = 0) -> List[schemas.Post]:
    """
    Posts by the user and everyone they follow, newest first.

    Pages are offset based; posts written between two page requests can
    shift the boundary.
    """
    _check_page(limit, offset)
    return _to_posts(posts_repo.get_feed(db, user_id, limit, offset))


def get_thread(db: Session, post_id: str) -> List[schemas.ThreadPost]:
    """
    Immediate context of a post: its ancestor chain, itself, and its direct
    replies (one level only).

    Returns:
        ThreadPost list ordered by level (ancestors negative, the post 0,
        replies 1), then by creation time

    Raises:
        NotFoundError: the post does not exist
    """
    rows = posts_repo.get_thread(db, post_id)
    if not rows:
        raise NotFoundError(f"post {post_id} not found")
    return [
        schemas.ThreadPost(**schemas.Post.model_validate(post).model_dump(), level=level)
        for post, level in rows
    ]


def search(db: Session, query: str, limit: int = 50) -> List[schemas.Post]:
    """Case-insensitive substring search over post text, newest first."""
    query = query.strip()
    if not query:
        raise ValidationError("search query cannot be empty")
    _check_page(limit)
    return _to_posts(posts_repo.search(db, query, limit))


def get_posts_by_hashtag(db: Session, tag: str, limit: int = 50) -> List[schemas.Post]:
    _check_page(limit)
    tag = tag.strip().lstrip("#").lower()
    if not tag:
        raise ValidationError("hashtag cannot be empty")
    return _to_posts(hashtags_repo.get_posts(db, tag, limit))


def get_mentions(db: Session, user_id: str, limit: int = 50) -> List[schemas.Post]:
    """Posts that mention the user, newest first."""
    _check_page(limit)
    if users_repo.get_by_id(db, user_id) is None:
        raise NotFoundError(f"user {user_id} not found")
    return _to_posts(mentions_repo.get_posts_mentioning(db, user_id, limit))


def get_trending_hashtags(
    db: Session, limit: int = 10, since: Optional[datetime] = None
) -> List[schemas.TrendingHashtag]:
    """
    Most used hashtags among posts created after ``since``.

    Args:
        db: Database session
        limit: Maximum number of hashtags
        since: Lower bound (exclusive), defaults to 24 hours ago

    Returns:
        TrendingHashtag list, count descending, ties alphabetical
    """
    _check_page(limit)
    if since is None:
        since = utcnow() - DEFAULT_TRENDING_WINDOW
    return [
        schemas.TrendingHashtag(tag=tag, count=count)
        for tag, count in hashtags_repo.trending(db, since, limit)
    ]
