"""Terminal rendering for CLI output."""

from datetime import datetime
from typing import Iterable, List, Optional

import typer

from chirp import schemas
from chirp.models import NotificationType, utcnow

NOTIFICATION_VERBS = {
    NotificationType.like: "liked your post",
    NotificationType.retweet: "retweeted your post",
    NotificationType.follow: "started following you",
    NotificationType.reply: "replied to your post",
    NotificationType.mention: "mentioned you",
    NotificationType.message: "sent you a message",
}


def truncate(text: str, length: int = 50) -> str:
    """
    >>> truncate("short")
    'short'
    >>> truncate("abcdefghij", 8)
    'abcde...'
    """
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def format_time_ago(when: datetime, now: Optional[datetime] = None) -> str:
    """
    Compact relative time: 'just now', '5m', '3h', '2d', else a date.

    >>> format_time_ago(datetime(2024, 1, 1, 12, 0), now=datetime(2024, 1, 1, 12, 30))
    '30m'
    """
    now = now or utcnow()
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    if seconds < 7 * 86400:
        return f"{seconds // 86400}d"
    return when.strftime("%Y-%m-%d")


def _username(name: str) -> str:
    return typer.style(f"@{name}", fg=typer.colors.CYAN, bold=True)


def _dim(text: str) -> str:
    return typer.style(text, dim=True)


def format_post(post: schemas.Post, indent: int = 0) -> str:
    pad = "  " * indent
    if post.is_retweet:
        header = f"🔁 {_username(post.author_username)} retweeted"
    elif post.parent_post_id:
        header = f"↳ {_username(post.author_username)}"
    else:
        header = _username(post.author_username)
    lines = [
        f"{pad}{header} {_dim('· ' + format_time_ago(post.created_at))}",
        f"{pad}{post.text}",
        f"{pad}{_dim('id: ' + post.id)}",
    ]
    return "\n".join(lines)


def format_posts(posts: Iterable[schemas.Post]) -> str:
    return "\n\n".join(format_post(p) for p in posts)


def format_post_with_stats(post: schemas.Post, stats: schemas.PostStats, hashtags: List[str]) -> str:
    lines = [format_post(post)]
    if hashtags:
        lines.append(typer.style(" ".join(f"#{t}" for t in hashtags), fg=typer.colors.BLUE))
    for item in stats.media:
        size = f" {item.width}x{item.height}" if item.width and item.height else ""
        lines.append(f"🖼  {item.file_name} ({item.file_type}{size}, {item.file_size:,} bytes)")
    lines.append(f"❤️  {stats.like_count}   🔁 {stats.retweet_count}   💬 {stats.reply_count}")
    return "\n".join(lines)


def format_thread(posts: Iterable[schemas.ThreadPost]) -> str:
    blocks = []
    for post in posts:
        block = format_post(post, indent=max(post.level, 0))
        if post.level == 0:
            block = typer.style("▶ ", fg=typer.colors.YELLOW) + block.lstrip()
        blocks.append(block)
    return "\n\n".join(blocks)


def format_notification(notification: schemas.Notification) -> str:
    marker = typer.style("●", fg=typer.colors.GREEN) if not notification.read else " "
    line = f"{marker} {_username(notification.actor_username)} {NOTIFICATION_VERBS[notification.type]}"
    if notification.target_text:
        line += f': "{truncate(notification.target_text)}"'
    elif notification.target_id and notification.type != NotificationType.follow:
        line += _dim(" (deleted)")
    return f"{line} {_dim('· ' + format_time_ago(notification.created_at))}"


def format_message(message: schemas.Message, viewer_id: Optional[str] = None) -> str:
    sender = "you" if message.sender_id == viewer_id else _username(message.sender_username)
    unread = typer.style(" (new)", fg=typer.colors.GREEN) if not message.read and message.receiver_id == viewer_id else ""
    return f"{sender}{unread} {_dim('· ' + format_time_ago(message.created_at))}\n  {message.text}\n  {_dim('id: ' + message.id)}"


def format_conversation(conversation: schemas.Conversation) -> str:
    unread = (
        typer.style(f" [{conversation.unread_count} unread]", fg=typer.colors.GREEN)
        if conversation.unread_count
        else ""
    )
    return (
        f"{_username(conversation.other_username)}{unread} "
        f"{_dim('· ' + format_time_ago(conversation.last_message_at))}\n  {truncate(conversation.last_message)}"
    )


def format_user(user: schemas.User, stats: Optional[schemas.UserStats] = None) -> str:
    lines = [f"{_username(user.username)} {_dim('joined ' + user.created_at.strftime('%Y-%m-%d'))}"]
    if stats is not None:
        lines.append(
            f"Posts: {stats.post_count}   Following: {stats.following_count}   Followers: {stats.follower_count}"
        )
    return "\n".join(lines)
