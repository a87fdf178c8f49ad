# tests/test_social.py
"""Tests for follow, like and block relationships."""

import pytest

from chirp.errors import ConflictError, NotFoundError, SelfReferenceError
from chirp.models import Block, Notification, NotificationType
from chirp.services import posts as post_service
from chirp.services import social as social_service


class TestFollow:
    def test_follow_unfollow_sequence(self, db, alice, bob):
        social_service.follow(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            social_service.follow(db, alice.id, bob.id)

        social_service.unfollow(db, alice.id, bob.id)
        with pytest.raises(NotFoundError):
            social_service.unfollow(db, alice.id, bob.id)

        social_service.follow(db, alice.id, bob.id)
        assert social_service.is_following(db, alice.id, bob.id)

    def test_follow_notifies_followee(self, db, alice, bob):
        social_service.follow(db, alice.id, bob.id)

        note = db.query(Notification).one()
        assert (note.user_id, note.actor_id, note.type) == (bob.id, alice.id, NotificationType.follow)
        assert note.target_id is None

    def test_self_follow(self, db, alice):
        with pytest.raises(SelfReferenceError):
            social_service.follow(db, alice.id, alice.id)

    def test_missing_followee(self, db, alice):
        with pytest.raises(NotFoundError):
            social_service.follow(db, alice.id, "missing")

    def test_unknown_follower(self, db, bob):
        with pytest.raises(NotFoundError):
            social_service.follow(db, "ghost", bob.id)
        assert db.query(Notification).count() == 0

    def test_following_and_followers_lists(self, db, alice, bob, carol):
        social_service.follow(db, alice.id, bob.id)
        social_service.follow(db, alice.id, carol.id)
        social_service.follow(db, carol.id, bob.id)

        assert [u.username for u in social_service.get_following(db, alice.id)] == ["bob", "carol"]
        assert [u.username for u in social_service.get_followers(db, bob.id)] == ["alice", "carol"]
        assert not social_service.is_following(db, bob.id, alice.id)


class TestLike:
    def test_like_unlike_sequence(self, db, alice, bob):
        post = post_service.publish_post(db, alice.id, "like me").post

        social_service.like(db, bob.id, post.id)
        with pytest.raises(ConflictError):
            social_service.like(db, bob.id, post.id)
        assert [u.username for u in social_service.get_likers(db, post.id)] == ["bob"]

        social_service.unlike(db, bob.id, post.id)
        with pytest.raises(NotFoundError):
            social_service.unlike(db, bob.id, post.id)

    def test_like_notifies_author(self, db, alice, bob):
        post = post_service.publish_post(db, alice.id, "like me").post
        social_service.like(db, bob.id, post.id)

        note = db.query(Notification).one()
        assert (note.user_id, note.type, note.target_id) == (alice.id, NotificationType.like, post.id)

    def test_self_like_allowed_without_notification(self, db, alice):
        post = post_service.publish_post(db, alice.id, "me").post
        social_service.like(db, alice.id, post.id)

        assert db.query(Notification).count() == 0
        assert post_service.get_post_stats(db, post.id).like_count == 1

    def test_missing_post(self, db, bob):
        with pytest.raises(NotFoundError):
            social_service.like(db, bob.id, "missing")

    def test_unknown_liker(self, db, alice):
        post = post_service.publish_post(db, alice.id, "like me").post
        with pytest.raises(NotFoundError):
            social_service.like(db, "ghost", post.id)


class TestBlock:
    def test_block_is_idempotent(self, db, alice, bob):
        social_service.block(db, alice.id, bob.id)
        social_service.block(db, alice.id, bob.id)

        assert db.query(Block).count() == 1
        assert social_service.is_blocked(db, alice.id, bob.id)
        assert not social_service.is_blocked(db, bob.id, alice.id)
        assert [u.username for u in social_service.get_blocked(db, alice.id)] == ["bob"]

    def test_unblock(self, db, alice, bob):
        social_service.block(db, alice.id, bob.id)
        social_service.unblock(db, alice.id, bob.id)

        assert not social_service.is_blocked(db, alice.id, bob.id)
        with pytest.raises(NotFoundError):
            social_service.unblock(db, alice.id, bob.id)

    def test_self_block(self, db, alice):
        with pytest.raises(SelfReferenceError):
            social_service.block(db, alice.id, alice.id)

    def test_unknown_blocker(self, db, bob):
        with pytest.raises(NotFoundError):
            social_service.block(db, "ghost", bob.id)
        assert db.query(Block).count() == 0
