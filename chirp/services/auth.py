# chirp/services/auth.py
"""
Active-user resolver backed by a small JSON session file.

The engine never reads this state itself; the CLI resolves the active user
once per command and passes its id into every engine call.
"""
import json
import os
from typing import Optional

from sqlalchemy.orm import Session

from chirp import config, schemas
from chirp.errors import AuthError, NotFoundError
from chirp.services.users import get_user


def _session_path(path: Optional[str] = None) -> str:
    return path or config.SESSION_FILE


def _load(path: str) -> dict:
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        return {}


def _save(path: str, data: dict) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)


def current_username(path: Optional[str] = None) -> str:
    """
    Return the logged-in username.

    Raises:
        AuthError: nobody is logged in
    """
    username = _load(_session_path(path)).get("current_user")
    if not username:
        raise AuthError("not logged in. Run: chirp user login <username>")
    return username


def login(db: Session, username: str, path: Optional[str] = None) -> schemas.User:
    """Make an existing user the active one."""
    user = get_user(db, username)
    path = _session_path(path)
    data = _load(path)
    data["current_user"] = user.username
    _save(path, data)
    return user


def logout(path: Optional[str] = None) -> None:
    path = _session_path(path)
    data = _load(path)
    data.pop("current_user", None)
    _save(path, data)


def resolve_actor(db: Session, path: Optional[str] = None) -> schemas.User:
    """The active user as an entity; a stale session (deleted user) is an AuthError."""
    username = current_username(path)
    try:
        return get_user(db, username)
    except NotFoundError as exc:
        raise AuthError(f"active user @{username} no longer exists. Run: chirp user login <username>") from exc
