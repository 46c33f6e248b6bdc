"""Tests for the wire DTOs of the chat channel."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from synergy_types.base import format_timestamp, utc_now
from synergy_types.messages import ChatMessageGet
from synergy_types.projects import ProjectAccess
from synergy_types.websocket import (
    WSAck,
    WSConnected,
    WSError,
    WSMessage,
    WSSendMessage,
    WSUserLeft,
    parse_server_event,
    to_frame,
)


def _message(**overrides) -> ChatMessageGet:
    values = dict(
        id="m-1",
        project_id="p-one",
        user_id="u-bob",
        username="Bob",
        content="hello",
        timestamp=datetime(2024, 5, 1, 12, 30, 0, 125000, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return ChatMessageGet(**values)


@pytest.mark.unit
class TestTimestamps:

    def test_utc_now_has_millisecond_precision(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.microsecond % 1000 == 0

    def test_format_timestamp_aware(self):
        value = datetime(2024, 5, 1, 14, 30, 0, 125000, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-05-01T12:30:00.125Z"

    def test_format_timestamp_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00.000Z"


@pytest.mark.unit
class TestServerEvents:

    def test_message_frame(self):
        frame = to_frame(WSMessage.from_message(_message()))

        assert frame == {
            "type": "message",
            "_id": "m-1",
            "projectId": "p-one",
            "userId": "u-bob",
            "username": "Bob",
            "content": "hello",
            "timestamp": "2024-05-01T12:30:00.125Z",
        }

    def test_success_ack_omits_error(self):
        frame = to_frame(WSAck(ref="c1", success=True, message_id="m-1"))
        assert frame == {"type": "ack", "ref": "c1", "success": True, "messageId": "m-1"}

    def test_failure_ack_omits_message_id(self):
        frame = to_frame(WSAck(success=False, error="Failed to save message"))
        assert frame == {"type": "ack", "success": False, "error": "Failed to save message"}

    def test_connected_frame(self):
        frame = to_frame(WSConnected(user_id="u-bob", username="Bob", project_id="p-one"))
        assert frame["message"] == "Successfully connected to chat"
        assert frame["projectId"] == "p-one"

    @pytest.mark.parametrize("event", [
        WSConnected(user_id="u-bob", username="Bob", project_id="p-one"),
        WSError(code="NOT_AUTHORIZED", message="no"),
        WSAck(ref="r", success=True, message_id="m-1"),
        WSUserLeft(user_id="u-bob", username="Bob"),
    ])
    def test_parse_server_event_restores_type(self, event):
        parsed = parse_server_event(to_frame(event))
        assert type(parsed) is type(event)

    def test_parse_message_event(self):
        parsed = parse_server_event(to_frame(WSMessage.from_message(_message())))
        assert isinstance(parsed, WSMessage)
        assert parsed.id == "m-1"
        assert parsed.timestamp == datetime(2024, 5, 1, 12, 30, 0, 125000, tzinfo=timezone.utc)

    @pytest.mark.parametrize("data", [{"type": "typing"}, {}, {"type": "ack"}])
    def test_parse_unknown_or_malformed(self, data):
        assert parse_server_event(data) is None


@pytest.mark.unit
class TestSendMessage:

    def test_minimal_payload(self):
        event = WSSendMessage.model_validate({"type": "message", "content": "hi"})
        assert event.ref is None

    def test_rejects_extra_fields(self):
        with pytest.raises(ValidationError):
            WSSendMessage.model_validate({"type": "message", "content": "hi", "username": "Mallory"})

    def test_rejects_wrong_type(self):
        with pytest.raises(ValidationError):
            WSSendMessage.model_validate({"type": "ack", "content": "hi"})

    def test_rejects_long_ref(self):
        with pytest.raises(ValidationError):
            WSSendMessage.model_validate({"type": "message", "content": "hi", "ref": "r" * 129})


@pytest.mark.unit
class TestProjectAccess:

    def test_admits_owner_and_members_only(self):
        access = ProjectAccess(project_id="p", owner_email="bob@example.com", member_emails=("alice@example.com",))

        assert access.admits("bob@example.com")
        assert access.admits("alice@example.com")
        assert not access.admits("carol@example.com")
        assert not access.admits("Bob@example.com")
