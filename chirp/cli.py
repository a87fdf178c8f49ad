# chirp/cli.py
from contextlib import contextmanager
from datetime import timedelta
from typing import List, Optional

import typer

from chirp import display
from chirp.db import get_session, init_db
from chirp.errors import ChirpError
from chirp.logging.setup import configure_logging
from chirp.models import utcnow
from chirp.services import auth
from chirp.services import messaging as message_service
from chirp.services import notifications as notification_service
from chirp.services import posts as post_service
from chirp.services import seeder
from chirp.services import social as social_service
from chirp.services import timeline
from chirp.services import users as user_service

app = typer.Typer(help="Chirp: a local, single-machine social network", no_args_is_help=True)
user_app = typer.Typer(help="Create accounts and switch the active user", no_args_is_help=True)
message_app = typer.Typer(help="Direct messages", no_args_is_help=True)
notifications_app = typer.Typer(help="Your notifications (lists them when no subcommand is given)")
image_app = typer.Typer(help="Post images", no_args_is_help=True)
app.add_typer(user_app, name="user")
app.add_typer(message_app, name="message")
app.add_typer(notifications_app, name="notifications")
app.add_typer(image_app, name="image")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL for this run"),
):
    configure_logging(level=log_level)
    init_db()


@contextmanager
def _errors():
    try:
        yield
    except ChirpError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


def _warn(warnings: List[str]) -> None:
    for warning in warnings:
        typer.echo(f"⚠️  {warning}", err=True)


# --- users -------------------------------------------------------------------

@user_app.command("create")
def user_create(username: str = typer.Argument(..., help="3-15 letters, digits or underscores")):
    """Register a new user."""
    with _errors(), get_session() as db:
        user = user_service.create_user(db, username)
    typer.echo(f"✓ Created user @{user.username}")


@user_app.command("login")
def user_login(username: str):
    """Make USERNAME the active user."""
    with _errors(), get_session() as db:
        user = auth.login(db, username)
    typer.echo(f"✓ Logged in as @{user.username}")


@user_app.command("logout")
def user_logout():
    """Forget the active user."""
    auth.logout()
    typer.echo("✓ Logged out")


@user_app.command("whoami")
def user_whoami():
    """Show the active user."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
    typer.echo(f"@{me.username}")


@user_app.command("show")
def user_show(username: str):
    """Show a user's profile counters."""
    with _errors(), get_session() as db:
        user = user_service.get_user(db, username)
        stats = user_service.get_user_stats(db, user.id)
    typer.echo(display.format_user(user, stats))


@app.command("profile")
def profile_cmd(
    username: Optional[str] = typer.Argument(None, help="Defaults to the active user"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, max=200),
):
    """Show a user's profile and recent posts."""
    with _errors(), get_session() as db:
        user = user_service.get_user(db, username) if username else auth.resolve_actor(db)
        stats = user_service.get_user_stats(db, user.id)
        posts = post_service.get_user_posts(db, user.username, limit=limit)
    typer.echo(display.format_user(user, stats))
    typer.echo("─" * 50)
    typer.echo(display.format_posts(posts) if posts else "No posts yet")


# --- posts -------------------------------------------------------------------

def _publish(text: str, images: Optional[List[str]], parent_id: Optional[str] = None) -> None:
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        result = post_service.publish_post(db, me.id, text, images=images or [], parent_post_id=parent_id)
    _warn(result.warnings)
    verb = "Replied" if parent_id else "Posted"
    typer.echo(f"✓ {verb} (id: {result.post.id})")
    if result.hashtags:
        typer.echo("  Hashtags: " + " ".join(f"#{t}" for t in result.hashtags))
    if result.mentions:
        typer.echo("  Mentioned: " + " ".join(f"@{u}" for u in result.mentions))
    if result.media:
        typer.echo(f"  Images: {len(result.media)}")


@app.command("post")
def post_cmd(
    text: str = typer.Argument(..., help="Up to 280 characters"),
    images: Optional[List[str]] = typer.Option(None, "--image", "-i", help="Attach an image (repeatable, max 4)"),
):
    """Publish a post."""
    _publish(text, images)


@app.command("reply")
def reply_cmd(
    post_id: str,
    text: str,
    images: Optional[List[str]] = typer.Option(None, "--image", "-i", help="Attach an image (repeatable, max 4)"),
):
    """Reply to a post."""
    _publish(text, images, parent_id=post_id)


@app.command("show")
def show_cmd(post_id: str):
    """Show a post with its counters."""
    with _errors(), get_session() as db:
        post = post_service.get_post(db, post_id)
        stats = post_service.get_post_stats(db, post_id)
        tags = post_service.get_hashtags_for_post(db, post_id)
    typer.echo(display.format_post_with_stats(post, stats, tags))


@app.command("delete")
def delete_cmd(post_id: str):
    """Delete one of your posts."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        warnings = post_service.delete_post(db, post_id, me.id)
    _warn(warnings)
    typer.echo("✓ Post deleted")


@app.command("retweet")
def retweet_cmd(post_id: str):
    """Retweet someone else's post."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        post = post_service.retweet(db, me.id, post_id)
    typer.echo(f"✓ Retweeted (id: {post.id})")


@app.command("search")
def search_cmd(query: str, limit: int = typer.Option(50, "--limit", "-l", min=1, max=200)):
    """Search post text (case-insensitive)."""
    with _errors(), get_session() as db:
        posts = timeline.search(db, query, limit=limit)
    if not posts:
        typer.echo(f"No posts matching '{query}'")
        return
    typer.echo(f"\n🔎 {len(posts)} result(s) for '{query}':\n")
    typer.echo(display.format_posts(posts))


@app.command("thread")
def thread_cmd(post_id: str):
    """Show a post with its ancestors and direct replies."""
    with _errors(), get_session() as db:
        posts = timeline.get_thread(db, post_id)
    typer.echo(display.format_thread(posts))


@app.command("feed")
def feed_cmd(
    limit: int = typer.Option(20, "--limit", "-l", min=1, max=200),
    page: int = typer.Option(1, "--page", "-p", min=1),
):
    """Your posts and posts from people you follow, newest first."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        posts = timeline.get_feed(db, me.id, limit=limit, offset=(page - 1) * limit)
    if not posts:
        typer.echo("Your feed is empty. Follow someone with: chirp follow <username>")
        return
    typer.echo(display.format_posts(posts))


# --- social ------------------------------------------------------------------

@app.command("follow")
def follow_cmd(username: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        social_service.follow(db, me.id, other.id)
    typer.echo(f"✓ Following @{other.username}")


@app.command("unfollow")
def unfollow_cmd(username: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        social_service.unfollow(db, me.id, other.id)
    typer.echo(f"✓ Unfollowed @{other.username}")


def _list_users(users, empty: str) -> None:
    if not users:
        typer.echo(empty)
        return
    for user in users:
        typer.echo(f"@{user.username}")


@app.command("following")
def following_cmd(username: Optional[str] = typer.Argument(None)):
    """Users someone follows (defaults to you)."""
    with _errors(), get_session() as db:
        user = user_service.get_user(db, username) if username else auth.resolve_actor(db)
        users = social_service.get_following(db, user.id)
    _list_users(users, f"@{user.username} is not following anyone")


@app.command("followers")
def followers_cmd(username: Optional[str] = typer.Argument(None)):
    """Users following someone (defaults to you)."""
    with _errors(), get_session() as db:
        user = user_service.get_user(db, username) if username else auth.resolve_actor(db)
        users = social_service.get_followers(db, user.id)
    _list_users(users, f"@{user.username} has no followers")


@app.command("like")
def like_cmd(post_id: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        social_service.like(db, me.id, post_id)
    typer.echo("✓ Liked")


@app.command("unlike")
def unlike_cmd(post_id: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        social_service.unlike(db, me.id, post_id)
    typer.echo("✓ Unliked")


@app.command("likes")
def likes_cmd(post_id: str):
    """Users who liked a post."""
    with _errors(), get_session() as db:
        users = social_service.get_likers(db, post_id)
    _list_users(users, "No likes yet")


@app.command("block")
def block_cmd(username: str):
    """Block a user from messaging you."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        social_service.block(db, me.id, other.id)
    typer.echo(f"✓ Blocked @{other.username}")


@app.command("unblock")
def unblock_cmd(username: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        social_service.unblock(db, me.id, other.id)
    typer.echo(f"✓ Unblocked @{other.username}")


@app.command("blocked")
def blocked_cmd():
    """Users you have blocked."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        users = social_service.get_blocked(db, me.id)
    _list_users(users, "You have not blocked anyone")


# --- discovery ---------------------------------------------------------------

@app.command("hashtag")
def hashtag_cmd(tag: str, limit: int = typer.Option(50, "--limit", "-l", min=1, max=200)):
    """Posts carrying a hashtag."""
    with _errors(), get_session() as db:
        posts = timeline.get_posts_by_hashtag(db, tag, limit=limit)
    if not posts:
        typer.echo(f"No posts tagged #{tag.lstrip('#')}")
        return
    typer.echo(display.format_posts(posts))


@app.command("trending")
def trending_cmd(
    limit: int = typer.Option(10, "--limit", "-l", help="Number of hashtags (1-100)", min=1, max=100),
    hours: int = typer.Option(24, "--hours", help="Look-back window in hours", min=1, max=24 * 30),
):
    """Most used hashtags in the recent window."""
    with _errors(), get_session() as db:
        trending = timeline.get_trending_hashtags(
            db, limit=limit, since=utcnow() - timedelta(hours=hours)
        )
    if not trending:
        typer.echo(f"No trending hashtags in the last {hours} hours")
        return
    typer.echo(f"\n🔥 Top {len(trending)} trending hashtags (last {hours} hours):")
    typer.echo("─" * 50)
    for i, item in enumerate(trending, 1):
        typer.echo(f"{i:2d}. #{item.tag:<20} ({item.count:,} posts)")


@app.command("mentions")
def mentions_cmd(limit: int = typer.Option(50, "--limit", "-l", min=1, max=200)):
    """Posts that mention you."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        posts = timeline.get_mentions(db, me.id, limit=limit)
    if not posts:
        typer.echo("No one has mentioned you yet")
        return
    typer.echo(display.format_posts(posts))


# --- messages ----------------------------------------------------------------

@message_app.command("send")
def message_send(username: str, text: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        message = message_service.send_message(db, me.id, other.id, text)
    typer.echo(f"✓ Message sent to @{other.username} (id: {message.id})")


@message_app.command("inbox")
def message_inbox(limit: int = typer.Option(20, "--limit", "-l", min=1, max=200)):
    """Messages you received, newest first."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        messages = message_service.get_inbox(db, me.id, limit=limit)
    if not messages:
        typer.echo("📭 Your inbox is empty")
        return
    typer.echo("\n\n".join(display.format_message(m, me.id) for m in messages))


@message_app.command("unread")
def message_unread():
    """Unread messages you received."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        messages = message_service.get_unread_messages(db, me.id)
    if not messages:
        typer.echo("No unread messages")
        return
    typer.echo("\n\n".join(display.format_message(m, me.id) for m in messages))


@message_app.command("conversation")
def message_conversation(username: str, limit: int = typer.Option(50, "--limit", "-l", min=1, max=500)):
    """Your conversation with USERNAME; marks their messages as read."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        other = user_service.get_user(db, username)
        messages = message_service.get_conversation(db, me.id, other.id, limit=limit)
        message_service.mark_conversation_read(db, me.id, other.id)
    if not messages:
        typer.echo(f"No messages with @{other.username}")
        return
    typer.echo("\n\n".join(display.format_message(m, me.id) for m in messages))


@message_app.command("list")
def message_list():
    """Your conversations, most recent first."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        conversations = message_service.get_conversations(db, me.id)
    if not conversations:
        typer.echo("No conversations yet")
        return
    typer.echo("\n\n".join(display.format_conversation(c) for c in conversations))


@message_app.command("delete")
def message_delete(message_id: str):
    """Delete a message you sent."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        message_service.delete_message(db, message_id, me.id)
    typer.echo("✓ Message deleted")


@message_app.command("search")
def message_search(query: str, limit: int = typer.Option(50, "--limit", "-l", min=1, max=200)):
    """Search messages you sent or received."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        messages = message_service.search_messages(db, me.id, query, limit=limit)
    if not messages:
        typer.echo(f"No messages matching '{query}'")
        return
    typer.echo("\n\n".join(display.format_message(m, me.id) for m in messages))


# --- notifications -----------------------------------------------------------

@notifications_app.callback(invoke_without_command=True)
def notifications_list(
    ctx: typer.Context,
    unread: bool = typer.Option(False, "--unread", "-u", help="Only unread notifications"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, max=200),
):
    if ctx.invoked_subcommand is not None:
        return
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        notifications = notification_service.get_notifications(db, me.id, unread_only=unread, limit=limit)
    if not notifications:
        typer.echo("🔔 No notifications")
        return
    for notification in notifications:
        typer.echo(display.format_notification(notification))


@notifications_app.command("read")
def notifications_read():
    """Mark all notifications as read."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        updated = notification_service.mark_all_read(db, me.id)
    typer.echo(f"✓ Marked {updated} notification(s) as read")


@notifications_app.command("count")
def notifications_count():
    """Number of unread notifications."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        count = notification_service.count_unread(db, me.id)
    typer.echo(str(count))


@notifications_app.command("clear")
def notifications_clear():
    """Delete notifications you have already read."""
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        deleted = notification_service.delete_all_read(db, me.id)
    typer.echo(f"✓ Cleared {deleted} notification(s)")


@notifications_app.command("delete")
def notifications_delete(notification_id: str):
    with _errors(), get_session() as db:
        me = auth.resolve_actor(db)
        notification_service.delete_notification(db, notification_id, me.id)
    typer.echo("✓ Notification deleted")


# --- images ------------------------------------------------------------------

@image_app.command("download")
def image_download(
    post_id: str,
    output: str = typer.Option(".", "--output", "-o", help="Directory to copy images into"),
):
    """Copy a post's images to a directory."""
    with _errors(), get_session() as db:
        paths, warnings = post_service.download_media(db, post_id, output)
    _warn(warnings)
    if not paths:
        typer.echo("No images to download")
        return
    for path in paths:
        typer.echo(f"✓ {path}")


# --- seeding -----------------------------------------------------------------

@app.command("seed")
def seed_cmd(
    users: int = typer.Option(20, help="Number of users"),
    posts: int = typer.Option(200, help="Number of posts"),
    seed: int = typer.Option(1337, help="Random seed"),
):
    """Populate the database with mock data."""
    seeder.seed_random_generators(seed)
    with _errors(), get_session() as db:
        us = seeder.make_users(db, users)
        ps = seeder.make_posts(db, us, posts)
        follows = seeder.make_follows(db, us)
        likes = seeder.make_likes(db, us, ps)
    typer.echo(f"Seed complete: users={len(us)}, posts={len(ps)}, follows={follows}, likes={likes}")


if __name__ == "__main__":
    app()
