# chirp/services/posts.py
"""
Post publication, retweets and deletion.

Publishing is strict before the post row is committed (text, attachments,
parent) and lenient afterwards: media, hashtag links, mention edges and
notifications each run as their own best-effort unit and only surface as
warnings.
"""
import os
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chirp import schemas
from chirp.errors import ConflictError, NotFoundError, SelfReferenceError
from chirp.logging.setup import get_logger
from chirp.models import NotificationType
from chirp.repositories import hashtags as hashtags_repo
from chirp.repositories import media as media_repo
from chirp.repositories import mentions as mentions_repo
from chirp.repositories import notifications as notifications_repo
from chirp.repositories import posts as posts_repo
from chirp.repositories import social as social_repo
from chirp.repositories import users as users_repo
from chirp.services import media as media_store
from chirp.services.effects import best_effort
from chirp.services.text import extract_hashtags, extract_mentions, validate_post_text

logger = get_logger(__name__)


@dataclass
class PublishResult:
    """Outcome of publish_post."""
    post: schemas.Post
    hashtags: List[str] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    media: List[schemas.Media] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _require_user(db: Session, user_id: str):
    user = users_repo.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError(f"user {user_id} not found")
    return user


def _require_post(db: Session, post_id: str):
    post = posts_repo.get_by_id(db, post_id)
    if post is None:
        raise NotFoundError(f"post {post_id} not found")
    return post


def publish_post(
    db: Session,
    author_id: str,
    raw_text: str,
    images: Optional[Sequence[str]] = None,
    parent_post_id: Optional[str] = None,
) -> PublishResult:
    """
    Create an original post or a reply.

    Args:
        db: Database session
        author_id: Posting user
        raw_text: Post body; trimmed before validation
        images: Up to four image paths to attach
        parent_post_id: Post being replied to, if any

    Returns:
        PublishResult with the stored post, derived hashtags and mentions,
        attached media and any side-effect warnings

    Raises:
        ValidationError: empty or over-long text
        InvalidAttachmentError: too many images or an invalid image
        NotFoundError: unknown author or parent post
    """
    text = validate_post_text(raw_text)
    attachments = media_store.validate_images(list(images or []))
    _require_user(db, author_id)

    parent_author_id = None
    if parent_post_id is not None:
        parent_author_id = _require_post(db, parent_post_id).author_id

    post = posts_repo.create(db, author_id, text, parent_post_id=parent_post_id)
    post_id = post.id
    db.commit()
    log = logger.bind(post_id=post_id, author_id=author_id)
    log.info("post_published", reply_to=parent_post_id, images=len(attachments))

    warnings: List[str] = []

    for position, info in enumerate(attachments):
        with best_effort(db, warnings, f"attach image {info.path}", post_id=post_id):
            dest_path, file_name = media_store.store_image(info.path, post_id, position)
            media_repo.create(
                db,
                post_id=post_id,
                file_path=dest_path,
                file_name=file_name,
                file_type=info.file_type,
                file_size=info.file_size,
                position=position,
                width=info.width,
                height=info.height,
            )

    hashtags = extract_hashtags(text)
    if hashtags:
        with best_effort(db, warnings, "link hashtags", post_id=post_id):
            for tag in hashtags:
                hashtag = hashtags_repo.get_or_create(db, tag)
                hashtags_repo.link(db, post_id, hashtag.id)

    mentioned: Dict[str, str] = {}
    tokens = extract_mentions(text)
    if tokens:
        with best_effort(db, warnings, "link mentions", post_id=post_id):
            by_name = {user.username.lower(): user.id for user in users_repo.get_by_usernames(db, tokens)}
            resolved = {name: by_name[name] for name in tokens if name in by_name}
            for user_id in resolved.values():
                mentions_repo.create(db, post_id, user_id)
            mentioned = resolved

    notified = set()
    for username, user_id in mentioned.items():
        if user_id == author_id:
            continue
        with best_effort(db, warnings, f"notify @{username}", post_id=post_id):
            notifications_repo.create(db, user_id, author_id, NotificationType.mention, post_id)
            notified.add(user_id)

    if parent_author_id is not None and parent_author_id != author_id and parent_author_id not in notified:
        with best_effort(db, warnings, "notify reply", post_id=post_id):
            notifications_repo.create(db, parent_author_id, author_id, NotificationType.reply, post_id)

    stored = posts_repo.get_by_id(db, post_id)
    return PublishResult(
        post=schemas.Post.model_validate(stored),
        hashtags=hashtags,
        mentions=list(mentioned),
        media=[schemas.Media.model_validate(m) for m in media_repo.get_by_post(db, post_id)],
        warnings=warnings,
    )


def retweet(db: Session, user_id: str, post_id: str) -> schemas.Post:
    """
    Retweet a post.

    Raises:
        NotFoundError: the user or the original post does not exist
        ConflictError: the user already retweeted it
        SelfReferenceError: the user wrote the original
    """
    _require_user(db, user_id)
    original = _require_post(db, post_id)
    if posts_repo.has_retweeted(db, user_id, post_id):
        raise ConflictError("already retweeted this post")
    if original.author_id == user_id:
        raise SelfReferenceError("cannot retweet your own post")

    try:
        post = posts_repo.create_retweet(db, user_id, original)
        notifications_repo.create(db, original.author_id, user_id, NotificationType.retweet, post_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if posts_repo.has_retweeted(db, user_id, post_id):
            raise ConflictError("already retweeted this post") from exc
        raise

    logger.info("post_retweeted", post_id=post.id, original_post_id=post_id, user_id=user_id)
    return schemas.Post.model_validate(post)


def delete_post(db: Session, post_id: str, requester_id: str) -> List[str]:
    """
    Delete a post written by requester_id, then its stored media files.

    Returns:
        Warnings for media files that could not be removed

    Raises:
        NotFoundError: no such post, or the requester is not its author
    """
    media_paths = [m.file_path for m in media_repo.get_by_post(db, post_id)]
    if not posts_repo.delete(db, post_id, requester_id):
        raise NotFoundError("post not found or you don't own this post")
    db.commit()

    warnings: List[str] = []
    for path in media_paths:
        try:
            media_store.delete_stored_file(path)
        except OSError as exc:
            warnings.append(f"failed to delete media file {path}: {exc}")
            logger.warning("media_delete_failed", post_id=post_id, path=path, error=str(exc))
    return warnings


def get_post(db: Session, post_id: str) -> schemas.Post:
    return schemas.Post.model_validate(_require_post(db, post_id))


def get_post_stats(db: Session, post_id: str) -> schemas.PostStats:
    _require_post(db, post_id)
    return schemas.PostStats(
        like_count=social_repo.count_likes(db, post_id),
        retweet_count=posts_repo.count_retweets(db, post_id),
        reply_count=posts_repo.count_replies(db, post_id),
        media=[schemas.Media.model_validate(m) for m in media_repo.get_by_post(db, post_id)],
    )


def get_hashtags_for_post(db: Session, post_id: str) -> List[str]:
    return hashtags_repo.get_tags_for_post(db, post_id)


def get_user_posts(db: Session, username: str, limit: int = 50) -> List[schemas.Post]:
    user = users_repo.get_by_username(db, username)
    if user is None:
        raise NotFoundError(f"user @{username} not found")
    return [schemas.Post.model_validate(p) for p in posts_repo.get_by_author(db, user.id, limit)]


def get_media(db: Session, post_id: str) -> List[schemas.Media]:
    _require_post(db, post_id)
    return [schemas.Media.model_validate(m) for m in media_repo.get_by_post(db, post_id)]


def download_media(db: Session, post_id: str, output_dir: str) -> Tuple[List[str], List[str]]:
    """
    Copy a post's stored images into output_dir.

    Returns:
        (copied paths, warnings for files that could not be copied)
    """
    media = get_media(db, post_id)
    os.makedirs(output_dir, exist_ok=True)
    copied: List[str] = []
    warnings: List[str] = []
    for item in media:
        dest = os.path.join(output_dir, item.file_name)
        try:
            shutil.copyfile(item.file_path, dest)
        except OSError as exc:
            warnings.append(f"failed to copy {item.file_name}: {exc}")
            logger.warning("media_download_failed", post_id=post_id, path=item.file_path, error=str(exc))
            continue
        copied.append(dest)
    return copied, warnings
