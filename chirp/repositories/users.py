"""User rows."""
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from chirp.models import User


def create(db: Session, username: str) -> User:
    user = User(username=username)
    db.add(user)
    db.flush()
    return user


def get_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def get_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.username) == username.lower()).first()


def get_by_usernames(db: Session, usernames: List[str]) -> List[User]:
    """Resolve usernames case-insensitively; unknown names are skipped."""
    if not usernames:
        return []
    lowered = [name.lower() for name in usernames]
    return db.query(User).filter(func.lower(User.username).in_(lowered)).all()


def list_all(db: Session, limit: int = 100) -> List[User]:
    return db.query(User).order_by(User.username).limit(limit).all()
