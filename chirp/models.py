from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from chirp.ids import new_id

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns store UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    id = Column(String(26), primary_key=True, default=new_id)
    username = Column(String(15), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    posts = relationship("Post", back_populates="author", foreign_keys="Post.author_id")


class Post(Base):
    __tablename__ = "posts"
    id = Column(String(26), primary_key=True, default=new_id)
    author_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    is_retweet = Column(Boolean, nullable=False, default=False)
    original_post_id = Column(String(26), ForeignKey("posts.id", ondelete="CASCADE"), nullable=True, index=True)
    parent_post_id = Column(String(26), ForeignKey("posts.id", ondelete="SET NULL"), nullable=True, index=True)

    author = relationship("User", back_populates="posts", foreign_keys=[author_id])
    media = relationship(
        "Media", back_populates="post", cascade="all, delete-orphan", passive_deletes=True,
        order_by="Media.position",
    )

    __table_args__ = (
        # One retweet per (user, original); NULL original ids never collide
        UniqueConstraint("author_id", "original_post_id", name="uq_posts_retweet"),
        CheckConstraint(
            "(NOT is_retweet AND original_post_id IS NULL)"
            " OR (is_retweet AND original_post_id IS NOT NULL AND parent_post_id IS NULL)",
            name="ck_posts_reply_xor_retweet",
        ),
    )

    @property
    def author_username(self) -> str:
        return self.author.username


Index("idx_posts_created", Post.created_at.desc())
Index("idx_posts_author_created", Post.author_id, Post.created_at)


class Follow(Base):
    __tablename__ = "follows"
    follower_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    followee_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_follows_not_self"),
    )


Index("idx_follows_followee", Follow.followee_id)


class Like(Base):
    __tablename__ = "likes"
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(String(26), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


Index("idx_likes_post", Like.post_id)


class Block(Base):
    __tablename__ = "blocks"
    blocker_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    blocked_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("blocker_id <> blocked_id", name="ck_blocks_not_self"),
    )


class Hashtag(Base):
    __tablename__ = "hashtags"
    id = Column(Integer, primary_key=True)
    tag = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class PostHashtag(Base):
    __tablename__ = "post_hashtags"
    post_id = Column(String(26), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    hashtag_id = Column(Integer, ForeignKey("hashtags.id", ondelete="CASCADE"), primary_key=True)

    hashtag = relationship("Hashtag")


Index("idx_posthashtags_tag_post", PostHashtag.hashtag_id, PostHashtag.post_id)


class Mention(Base):
    __tablename__ = "mentions"
    post_id = Column(String(26), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    mentioned_user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


Index("idx_mentions_user", Mention.mentioned_user_id)


class NotificationType(str, PyEnum):
    like = "like"
    retweet = "retweet"
    follow = "follow"
    reply = "reply"
    mention = "mention"
    message = "message"


# Notification types whose target_id points at a post
POST_NOTIFICATION_TYPES = (
    NotificationType.like,
    NotificationType.retweet,
    NotificationType.reply,
    NotificationType.mention,
)


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(String(26), primary_key=True, default=new_id)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(Enum(NotificationType, name="notification_type"), nullable=False)
    # Post or message id; not a foreign key, the target may be deleted later
    target_id = Column(String(26), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("user_id <> actor_id", name="ck_notifications_not_self"),
    )


Index("idx_notifications_user_created", Notification.user_id, Notification.created_at)


class Message(Base):
    __tablename__ = "messages"
    id = Column(String(26), primary_key=True, default=new_id)
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    @property
    def sender_username(self) -> str:
        return self.sender.username

    @property
    def receiver_username(self) -> str:
        return self.receiver.username


Index("idx_messages_pair", Message.sender_id, Message.receiver_id, Message.created_at)
Index("idx_messages_receiver_read", Message.receiver_id, Message.read)


class Media(Base):
    __tablename__ = "media"
    id = Column(String(26), primary_key=True, default=new_id)
    post_id = Column(String(26), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    file_path = Column(Text, nullable=False)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(32), nullable=False)
    file_size = Column(Integer, nullable=False)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    post = relationship("Post", back_populates="media")

    __table_args__ = (
        UniqueConstraint("post_id", "position", name="uq_media_post_position"),
        CheckConstraint("position >= 0 AND position <= 3", name="ck_media_position"),
    )
