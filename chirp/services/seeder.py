"""
Mock data for local experiments.

Everything goes through the public services so that hashtags, mentions and
notifications come out exactly as they would for real activity.
"""
from __future__ import annotations

import random
import re
from typing import Sequence

from faker import Faker
from sqlalchemy.orm import Session

from chirp import config, schemas
from chirp.services import posts as post_service
from chirp.services import social as social_service
from chirp.services import users as user_service

fake = Faker()

TAG_POOL = [
    "python", "sqlite", "music", "sports", "gaming", "travel", "food",
    "fitness", "news", "books", "movies", "coffee", "art", "science",
]


def seed_random_generators(seed: int = 1337) -> None:
    """Seed both random and Faker so repeated runs produce the same data."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)
    fake.unique.clear()


def _username(raw: str) -> str:
    name = re.sub(r"[^A-Za-z0-9_]", "_", raw).lower()[: config.USERNAME_MAX_LENGTH]
    return name.ljust(config.USERNAME_MIN_LENGTH, "_")


def make_users(db: Session, n_users: int) -> list[schemas.User]:
    users: list[schemas.User] = []
    seen: set[str] = set()
    while len(users) < n_users:
        name = _username(fake.unique.user_name())
        if name in seen:
            continue
        seen.add(name)
        users.append(user_service.create_user(db, name))
    return users


def _post_text(users: Sequence[schemas.User]) -> str:
    words = fake.sentence(nb_words=random.randint(6, 14)).rstrip(".")
    tags = " ".join(f"#{t}" for t in random.sample(TAG_POOL, random.randint(0, 2)))
    mention = f" @{random.choice(users).username}" if random.random() < 0.2 else ""
    return f"{words}{mention} {tags}".strip()[: config.MAX_POST_LENGTH]


def make_posts(
    db: Session, users: Sequence[schemas.User], n_posts: int, reply_ratio: float = 0.25
) -> list[schemas.Post]:
    """Publish n_posts, a share of them as replies to earlier posts."""
    posts: list[schemas.Post] = []
    for _ in range(n_posts):
        author = random.choice(users)
        parent = random.choice(posts) if posts and random.random() < reply_ratio else None
        result = post_service.publish_post(
            db, author.id, _post_text(users), parent_post_id=parent.id if parent else None
        )
        posts.append(result.post)
    return posts


def make_follows(db: Session, users: Sequence[schemas.User], max_per_user: int = 10) -> int:
    created = 0
    for user in users:
        others = [u for u in users if u.id != user.id]
        for followee in random.sample(others, min(len(others), random.randint(0, max_per_user))):
            social_service.follow(db, user.id, followee.id)
            created += 1
    return created


def make_likes(
    db: Session, users: Sequence[schemas.User], posts: Sequence[schemas.Post], max_per_post: int = 8
) -> int:
    created = 0
    for post in posts:
        for liker in random.sample(list(users), min(len(users), random.randint(0, max_per_post))):
            social_service.like(db, liker.id, post.id)
            created += 1
    return created
