"""Tests for the chat message repository against the in-memory database."""

from datetime import datetime, timedelta, timezone

import pytest

from synergy_backend.database import session_scope
from synergy_backend.model.message import Message
from synergy_backend.repositories import MessageRepository

SAME_INSTANT = datetime(2025, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)


def _add(db, message_id, created_at, content):
    db.add(Message(
        id=message_id,
        created_at=created_at,
        project_id="p-one",
        user_id="u-bob",
        username="Bob",
        content=content,
    ))
    db.flush()


@pytest.mark.integration
class TestMessageRepository:

    def test_timestamp_ties_follow_insertion_order(self, session_factory, seeded):
        with session_scope(session_factory) as db:
            _add(db, "m-b", SAME_INSTANT, "first")
            _add(db, "m-a", SAME_INSTANT, "second")

        with session_scope(session_factory) as db:
            messages = MessageRepository(db).find_by_project("p-one")

        assert [m.id for m in messages] == ["m-b", "m-a"]
        assert [m.content for m in messages] == ["first", "second"]

    def test_older_timestamp_sorts_first(self, session_factory, seeded):
        with session_scope(session_factory) as db:
            _add(db, "m-late", SAME_INSTANT, "later")
            _add(db, "m-early", SAME_INSTANT - timedelta(seconds=1), "earlier")

        with session_scope(session_factory) as db:
            ids = [m.id for m in MessageRepository(db).find_by_project("p-one")]

        assert ids == ["m-early", "m-late"]

    def test_append_assigns_id_and_timestamp(self, session_factory, seeded):
        with session_scope(session_factory) as db:
            message = MessageRepository(db).append("p-one", "u-alice", "Alice", "hello")
            assert message.id
            assert message.created_at is not None
            assert message.seq is not None

    def test_other_projects_are_excluded(self, session_factory, seeded):
        with session_scope(session_factory) as db:
            MessageRepository(db).append("p-two", "u-carol", "Carol", "elsewhere")

        with session_scope(session_factory) as db:
            assert MessageRepository(db).find_by_project("p-one") == []
