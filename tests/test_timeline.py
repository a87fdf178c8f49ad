# tests/test_timeline.py
"""Tests for feed, thread, search, hashtag and trending reads."""

from datetime import timedelta

import pytest

from chirp.errors import NotFoundError, ValidationError
from chirp.models import Post, utcnow
from chirp.services import posts as post_service
from chirp.services import social as social_service
from chirp.services import timeline


def _publish(db, user, text, parent=None):
    return post_service.publish_post(db, user.id, text, parent_post_id=parent.id if parent else None).post


class TestFeed:
    def test_includes_self_and_followees_only(self, db, alice, bob, carol):
        social_service.follow(db, alice.id, bob.id)
        mine = _publish(db, alice, "mine")
        followed = _publish(db, bob, "followed")
        _publish(db, carol, "stranger")

        feed = timeline.get_feed(db, alice.id)

        assert [p.id for p in feed] == [followed.id, mine.id]

    def test_pages_do_not_overlap(self, db, alice, bob):
        social_service.follow(db, alice.id, bob.id)
        ids = [_publish(db, bob, f"post {i}").id for i in range(7)]

        seen = []
        offset = 0
        while True:
            page = timeline.get_feed(db, alice.id, limit=3, offset=offset)
            if not page:
                break
            seen.extend(p.id for p in page)
            offset += 3

        assert seen == list(reversed(ids))

    def test_retweets_appear_in_feed(self, db, alice, bob, carol):
        social_service.follow(db, alice.id, bob.id)
        original = _publish(db, carol, "carol says")
        rt = post_service.retweet(db, bob.id, original.id)

        feed = timeline.get_feed(db, alice.id)

        assert [p.id for p in feed] == [rt.id]
        assert feed[0].is_retweet is True

    def test_bad_paging(self, db, alice):
        with pytest.raises(ValidationError):
            timeline.get_feed(db, alice.id, limit=0)
        with pytest.raises(ValidationError):
            timeline.get_feed(db, alice.id, offset=-1)


class TestThread:
    def test_chain_of_four(self, db, alice, bob):
        root = _publish(db, alice, "root")
        r1 = _publish(db, bob, "r1", parent=root)
        r2 = _publish(db, alice, "r2", parent=r1)
        r3 = _publish(db, bob, "r3", parent=r2)

        thread = timeline.get_thread(db, r2.id)

        assert [(p.id, p.level) for p in thread] == [
            (root.id, -2),
            (r1.id, -1),
            (r2.id, 0),
            (r3.id, 1),
        ]

    def test_only_direct_replies(self, db, alice, bob):
        root = _publish(db, alice, "root")
        a = _publish(db, bob, "a", parent=root)
        b = _publish(db, bob, "b", parent=root)
        _publish(db, alice, "grandchild", parent=a)

        thread = timeline.get_thread(db, root.id)

        assert [(p.id, p.level) for p in thread] == [(root.id, 0), (a.id, 1), (b.id, 1)]

    def test_missing_post(self, db):
        with pytest.raises(NotFoundError):
            timeline.get_thread(db, "missing")


class TestSearch:
    def test_case_insensitive_newest_first(self, db, alice, bob):
        old = _publish(db, alice, "I love Python")
        new = _publish(db, bob, "python rocks")
        _publish(db, bob, "nothing here")

        results = timeline.search(db, "PYTHON")

        assert [p.id for p in results] == [new.id, old.id]

    def test_wildcards_are_literal(self, db, alice):
        _publish(db, alice, "100% sure")
        _publish(db, alice, "1000 sure")

        assert [p.text for p in timeline.search(db, "100%")] == ["100% sure"]

    def test_empty_query(self, db):
        with pytest.raises(ValidationError):
            timeline.search(db, "  ")


class TestHashtagsAndMentions:
    def test_posts_by_hashtag(self, db, alice):
        tagged = _publish(db, alice, "hello #Python")
        _publish(db, alice, "hello #rust")

        assert [p.id for p in timeline.get_posts_by_hashtag(db, "#PYTHON")] == [tagged.id]

    def test_mentions_feed(self, db, alice, bob):
        post = _publish(db, alice, "hi @bob")
        _publish(db, alice, "hi nobody")

        assert [p.id for p in timeline.get_mentions(db, bob.id)] == [post.id]


class TestTrending:
    def test_count_then_alphabetical(self, db, alice, bob):
        _publish(db, alice, "#beta #alpha")
        _publish(db, bob, "#beta #gamma")
        _publish(db, bob, "#alpha #beta #beta")

        trending = timeline.get_trending_hashtags(db, limit=10)

        assert [(t.tag, t.count) for t in trending] == [("beta", 3), ("alpha", 2), ("gamma", 1)]

    def test_window_excludes_old_posts(self, db, alice):
        old = _publish(db, alice, "#old")
        _publish(db, alice, "#new")
        db.query(Post).filter(Post.id == old.id).update({Post.created_at: utcnow() - timedelta(days=3)})
        db.commit()

        trending = timeline.get_trending_hashtags(db)

        assert [t.tag for t in trending] == ["new"]

    def test_limit(self, db, alice):
        _publish(db, alice, "#a #b #c")
        assert len(timeline.get_trending_hashtags(db, limit=2)) == 2
