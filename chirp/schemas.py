"""
Domain entities handed to callers of the engine.

Built from ORM rows with ``model_validate``; nothing above the service layer
sees a SQLAlchemy object.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chirp.models import NotificationType


class Entity(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class User(Entity):
    """A registered account."""
    id: str
    username: str
    created_at: datetime


class Media(Entity):
    """An image attached to a post."""
    id: str
    post_id: str
    file_path: str
    file_name: str
    file_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    position: int = Field(..., ge=0, le=3)


class Post(Entity):
    """An original post, a reply or a retweet."""
    id: str
    author_id: str
    author_username: str
    text: str
    created_at: datetime
    is_retweet: bool = False
    original_post_id: Optional[str] = None
    parent_post_id: Optional[str] = None


class ThreadPost(Post):
    """A post inside a thread view; level is relative to the requested post."""
    level: int


class PostStats(BaseModel):
    like_count: int
    retweet_count: int
    reply_count: int
    media: List[Media] = Field(default_factory=list)


class UserStats(BaseModel):
    post_count: int
    following_count: int
    follower_count: int
    unread_notifications: int
    unread_messages: int


class Message(Entity):
    """A direct message."""
    id: str
    sender_id: str
    receiver_id: str
    sender_username: str
    receiver_username: str
    text: str
    created_at: datetime
    read: bool


class Conversation(BaseModel):
    """Latest message and unread count for one counterpart."""
    other_user_id: str
    other_username: str
    last_message: str
    last_message_at: datetime
    unread_count: int


class Notification(BaseModel):
    id: str
    user_id: str
    actor_id: str
    actor_username: str
    type: NotificationType
    target_id: Optional[str] = None
    target_text: Optional[str] = None
    created_at: datetime
    read: bool


class TrendingHashtag(BaseModel):
    tag: str
    count: int
