"""Post rows and the feed/thread/search queries over them."""
from typing import List, Optional, Tuple

from sqlalchemy import func, literal, select, union_all
from sqlalchemy.orm import Session, aliased, joinedload

from chirp.models import Follow, Post, User


def _with_author(query):
    return query.options(joinedload(Post.author))


def _newest_first(query):
    return query.order_by(Post.created_at.desc(), Post.id.desc())


def create(
    db: Session,
    author_id: str,
    text: str,
    parent_post_id: Optional[str] = None,
) -> Post:
    post = Post(author_id=author_id, text=text, is_retweet=False, parent_post_id=parent_post_id)
    db.add(post)
    db.flush()
    return post


def create_retweet(db: Session, author_id: str, original: Post) -> Post:
    # Text is copied at creation time; posts are immutable afterwards
    post = Post(author_id=author_id, text=original.text, is_retweet=True, original_post_id=original.id)
    db.add(post)
    db.flush()
    return post


def get_by_id(db: Session, post_id: str) -> Optional[Post]:
    return _with_author(db.query(Post)).filter(Post.id == post_id).first()


def get_by_author(db: Session, author_id: str, limit: int = 50) -> List[Post]:
    query = _with_author(db.query(Post)).filter(Post.author_id == author_id)
    return _newest_first(query).limit(limit).all()


def delete(db: Session, post_id: str, author_id: str) -> bool:
    """Delete a post owned by author_id. Returns False when nothing matched."""
    post = db.query(Post).filter(Post.id == post_id, Post.author_id == author_id).first()
    if post is None:
        return False
    db.delete(post)
    db.flush()
    return True


def has_retweeted(db: Session, user_id: str, original_post_id: str) -> bool:
    return db.query(
        db.query(Post)
        .filter(Post.author_id == user_id, Post.original_post_id == original_post_id, Post.is_retweet.is_(True))
        .exists()
    ).scalar()


def count_retweets(db: Session, post_id: str) -> int:
    return (
        db.query(func.count(Post.id))
        .filter(Post.original_post_id == post_id, Post.is_retweet.is_(True))
        .scalar()
    )


def count_replies(db: Session, post_id: str) -> int:
    return db.query(func.count(Post.id)).filter(Post.parent_post_id == post_id).scalar()


def count_by_author(db: Session, author_id: str) -> int:
    return db.query(func.count(Post.id)).filter(Post.author_id == author_id).scalar()


def get_feed(db: Session, user_id: str, limit: int, offset: int) -> List[Post]:
    """Posts by user_id or anyone user_id follows, newest first."""
    followees = select(Follow.followee_id).where(Follow.follower_id == user_id)
    query = _with_author(db.query(Post)).filter(
        (Post.author_id == user_id) | Post.author_id.in_(followees)
    )
    return _newest_first(query).offset(offset).limit(limit).all()


def get_thread(db: Session, post_id: str) -> List[Tuple[Post, int]]:
    """
    Ancestors of post_id, the post itself and its direct replies.

    Ancestors are found with a recursive CTE walking parent_post_id upward;
    each row carries its level relative to post_id (negative for ancestors,
    0 for the post, 1 for direct replies).

    Returns:
        (post, level) pairs ordered by level, then creation time
    """
    anchor = select(Post.id.label("id"), Post.parent_post_id.label("parent_id"), literal(0).label("level")).where(
        Post.id == post_id
    )
    ancestors = anchor.cte("ancestors", recursive=True)
    previous = ancestors.alias("previous")
    parent = aliased(Post)
    ancestors = ancestors.union_all(
        select(parent.id, parent.parent_post_id, previous.c.level - 1).where(parent.id == previous.c.parent_id)
    )
    children = select(Post.id.label("id"), literal(1).label("level")).where(Post.parent_post_id == post_id)
    levels = union_all(select(ancestors.c.id, ancestors.c.level), children).subquery("levels")

    rows = (
        _with_author(db.query(Post, levels.c.level))
        .join(levels, levels.c.id == Post.id)
        .order_by(levels.c.level.asc(), Post.created_at.asc(), Post.id.asc())
        .all()
    )
    return [(post, level) for post, level in rows]


def search(db: Session, text: str, limit: int) -> List[Post]:
    """Case-insensitive substring match over post text, newest first."""
    query = _with_author(db.query(Post)).filter(
        func.lower(Post.text).contains(text.lower(), autoescape=True)
    )
    return _newest_first(query).limit(limit).all()


def author_of(db: Session, post_id: str) -> Optional[User]:
    return db.query(User).join(Post, Post.author_id == User.id).filter(Post.id == post_id).first()
