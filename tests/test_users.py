# tests/test_users.py
"""Tests for accounts, profile counters and the active-user session file."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from chirp import config
from chirp.errors import AuthError, ConflictError, NotFoundError, ValidationError
from chirp.services import auth
from chirp.services import messaging as message_service
from chirp.services import posts as post_service
from chirp.services import social as social_service
from chirp.services import users as user_service


class TestUsers:
    def test_username_normalized(self, db):
        user = user_service.create_user(db, "  @Dave_1 ")
        assert user.username == "dave_1"
        assert len(user.id) == 26

    def test_duplicate_is_case_insensitive(self, db, alice):
        with pytest.raises(ConflictError):
            user_service.create_user(db, "ALICE")

    def test_invalid_username(self, db):
        with pytest.raises(ValidationError):
            user_service.create_user(db, "no")

    def test_lookup(self, db, alice):
        assert user_service.get_user(db, "@Alice").id == alice.id
        assert user_service.get_user_by_id(db, alice.id).username == "alice"
        with pytest.raises(NotFoundError):
            user_service.get_user(db, "nobody")

    def test_list_users_alphabetical(self, db, bob, alice):
        assert [u.username for u in user_service.list_users(db)] == ["alice", "bob"]

    def test_created_at_is_naive_utc(self, db):
        user = user_service.create_user(db, "dora")

        now = datetime.now(timezone.utc).replace(tzinfo=None)
        assert user.created_at.tzinfo is None
        assert abs(now - user.created_at) < timedelta(minutes=1)

    def test_ids_sort_in_creation_order(self, db):
        users = [user_service.create_user(db, f"user{i}") for i in range(5)]
        ids = [u.id for u in users]
        assert ids == sorted(ids)

    def test_stats(self, db, alice, bob):
        post_service.publish_post(db, alice.id, "one")
        post_service.publish_post(db, alice.id, "two")
        social_service.follow(db, bob.id, alice.id)
        message_service.send_message(db, bob.id, alice.id, "hey")

        stats = user_service.get_user_stats(db, alice.id)

        assert stats.post_count == 2
        assert stats.follower_count == 1
        assert stats.following_count == 0
        assert stats.unread_notifications == 2
        assert stats.unread_messages == 1


class TestSession:
    def test_not_logged_in(self, db):
        with pytest.raises(AuthError):
            auth.resolve_actor(db)

    def test_login_logout(self, db, alice):
        auth.login(db, "alice")

        with open(config.SESSION_FILE) as fh:
            assert json.load(fh)["current_user"] == "alice"
        assert auth.resolve_actor(db).id == alice.id

        auth.logout()
        with pytest.raises(AuthError):
            auth.current_username()

    def test_login_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            auth.login(db, "ghost")

    def test_stale_session(self, db, tmp_path):
        path = tmp_path / "stale.json"
        path.write_text(json.dumps({"current_user": "ghost"}))

        with pytest.raises(AuthError):
            auth.resolve_actor(db, path=str(path))
