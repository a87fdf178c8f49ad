"""
Text extraction and validation for post bodies and usernames.

Hashtags and mentions share one token rule: the sigil followed by one or
more ASCII word characters (``[A-Za-z0-9_]``). The ASCII class is the same
one usernames are validated against, so every mention token can name a real
account. Tokens are lowercased and de-duplicated in first-occurrence order.
"""
import re
from typing import List

from chirp.config import MAX_POST_LENGTH, USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH
from chirp.errors import ValidationError

HASHTAG_RE = re.compile(r"#(\w+)", re.ASCII)
MENTION_RE = re.compile(r"@(\w+)", re.ASCII)
USERNAME_RE = re.compile(r"^\w+$", re.ASCII)


def _extract(pattern: re.Pattern, text: str) -> List[str]:
    seen = {}
    for match in pattern.finditer(text):
        seen.setdefault(match.group(1).lower(), None)
    return list(seen)


def extract_hashtags(text: str) -> List[str]:
    """
    Extract hashtags from text.

    Args:
        text: Raw post text

    Returns:
        Lowercased tags without the '#', first occurrence first

    >>> extract_hashtags("Hello #World #world #Go")
    ['world', 'go']
    """
    return _extract(HASHTAG_RE, text)


def extract_mentions(text: str) -> List[str]:
    """
    Extract @mentions from text.

    >>> extract_mentions("@Alice ping @bob @alice")
    ['alice', 'bob']
    """
    return _extract(MENTION_RE, text)


def sanitize_post_text(text: str) -> str:
    return text.strip()


def validate_post_text(text: str) -> str:
    """Trim text and check the length limits. Returns the trimmed text."""
    text = sanitize_post_text(text)
    if not text:
        raise ValidationError("post cannot be empty")
    if len(text) > MAX_POST_LENGTH:
        raise ValidationError(f"post cannot exceed {MAX_POST_LENGTH} characters")
    return text


def sanitize_username(username: str) -> str:
    return username.strip().lstrip("@").lower()


def validate_username(username: str) -> str:
    """Normalize a username and check its shape. Returns the normalized name."""
    username = sanitize_username(username)
    if len(username) < USERNAME_MIN_LENGTH:
        raise ValidationError(f"username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"username must be at most {USERNAME_MAX_LENGTH} characters")
    if not USERNAME_RE.match(username):
        raise ValidationError("username can only contain letters, numbers, and underscores")
    return username
