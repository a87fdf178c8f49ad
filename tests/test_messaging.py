# tests/test_messaging.py
"""Tests for direct messages."""

import pytest

from chirp.errors import ForbiddenError, NotFoundError, SelfReferenceError, ValidationError
from chirp.models import Message, NotificationType
from chirp.services import messaging as message_service
from chirp.services import notifications as notification_service
from chirp.services import social as social_service


class TestSend:
    def test_send_notifies_receiver(self, db, alice, bob):
        message = message_service.send_message(db, alice.id, bob.id, "  hi bob  ")

        assert message.text == "hi bob"
        assert message.read is False
        assert (message.sender_username, message.receiver_username) == ("alice", "bob")
        notes = notification_service.get_notifications(db, bob.id)
        assert [(n.type, n.target_text) for n in notes] == [(NotificationType.message, "hi bob")]

    def test_blocked_sender_leaves_no_message(self, db, alice, bob):
        social_service.block(db, bob.id, alice.id)

        with pytest.raises(ForbiddenError):
            message_service.send_message(db, alice.id, bob.id, "let me in")
        assert db.query(Message).count() == 0

    def test_blocker_cannot_message_blocked_user(self, db, alice, bob):
        social_service.block(db, alice.id, bob.id)
        social_service.block(db, alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            message_service.send_message(db, alice.id, bob.id, "hi")
        assert db.query(Message).count() == 0

    def test_unblock_reopens_messaging(self, db, alice, bob):
        social_service.block(db, alice.id, bob.id)
        social_service.unblock(db, alice.id, bob.id)

        message_service.send_message(db, alice.id, bob.id, "sorry")
        assert db.query(Message).count() == 1

    def test_missing_sender(self, db, bob):
        with pytest.raises(NotFoundError):
            message_service.send_message(db, "ghost", bob.id, "boo")
        assert db.query(Message).count() == 0

    def test_self_message(self, db, alice):
        with pytest.raises(SelfReferenceError):
            message_service.send_message(db, alice.id, alice.id, "me")

    def test_empty_message(self, db, alice, bob):
        with pytest.raises(ValidationError):
            message_service.send_message(db, alice.id, bob.id, "   ")

    def test_missing_receiver(self, db, alice):
        with pytest.raises(NotFoundError):
            message_service.send_message(db, alice.id, "missing", "hello?")


class TestConversations:
    def test_conversation_is_chronological(self, db, alice, bob, carol):
        m1 = message_service.send_message(db, alice.id, bob.id, "one")
        m2 = message_service.send_message(db, bob.id, alice.id, "two")
        message_service.send_message(db, carol.id, alice.id, "other")

        conversation = message_service.get_conversation(db, alice.id, bob.id)

        assert [m.id for m in conversation] == [m1.id, m2.id]

    def test_conversation_list(self, db, alice, bob, carol):
        message_service.send_message(db, bob.id, alice.id, "b1")
        message_service.send_message(db, bob.id, alice.id, "b2")
        message_service.send_message(db, carol.id, alice.id, "c1")
        message_service.send_message(db, alice.id, carol.id, "reply to carol")

        conversations = message_service.get_conversations(db, alice.id)

        assert [(c.other_username, c.last_message, c.unread_count) for c in conversations] == [
            ("carol", "reply to carol", 1),
            ("bob", "b2", 2),
        ]

    def test_conversation_list_after_reading(self, db, alice, bob):
        message_service.send_message(db, bob.id, alice.id, "ping")
        message_service.mark_conversation_read(db, alice.id, bob.id)

        (conversation,) = message_service.get_conversations(db, alice.id)

        assert conversation.other_user_id == bob.id
        assert conversation.unread_count == 0
        assert message_service.get_conversations(db, bob.id)[0].other_username == "alice"

    def test_mark_read_only_touches_one_direction(self, db, alice, bob):
        message_service.send_message(db, alice.id, bob.id, "to bob")
        message_service.send_message(db, bob.id, alice.id, "to alice")

        updated = message_service.mark_conversation_read(db, bob.id, alice.id)

        assert updated == 1
        assert message_service.count_unread_messages(db, bob.id) == 0
        assert message_service.count_unread_messages(db, alice.id) == 1
        assert [m.text for m in message_service.get_unread_messages(db, alice.id)] == ["to alice"]


class TestDeleteAndSearch:
    def test_only_sender_can_delete(self, db, alice, bob):
        message = message_service.send_message(db, alice.id, bob.id, "oops")

        with pytest.raises(NotFoundError):
            message_service.delete_message(db, message.id, bob.id)

        message_service.delete_message(db, message.id, alice.id)
        assert db.query(Message).count() == 0

    def test_search_scoped_to_participant(self, db, alice, bob, carol):
        message_service.send_message(db, alice.id, bob.id, "Lunch tomorrow?")
        message_service.send_message(db, bob.id, carol.id, "lunch is on me")

        assert [m.text for m in message_service.search_messages(db, alice.id, "LUNCH")] == ["Lunch tomorrow?"]
        assert len(message_service.search_messages(db, bob.id, "lunch")) == 2

    def test_inbox_newest_first(self, db, alice, bob, carol):
        message_service.send_message(db, bob.id, alice.id, "first")
        message_service.send_message(db, carol.id, alice.id, "second")

        assert [m.text for m in message_service.get_inbox(db, alice.id)] == ["second", "first"]
