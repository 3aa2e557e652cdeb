"""
Unit tests for the webhook message envelope.
"""

import json

import pytest

from ingest_schemas.exceptions import EnvelopeValidationError
from ingest_schemas.stream import (
    WebhookMessage,
    WebhookMessageProperties,
    new_webhook_message_validator,
)


@pytest.fixture
def webhook_map() -> dict[str, str]:
    return {
        "workspaceID": "workspaceID",
        "sourceID": "sourceID",
        "sourceType": "sourceType",
        "reason": "reason",
        "stage": "webhook",
    }


class TestWebhookMessageProperties:
    """Tests for webhook properties map conversion."""

    def test_map_roundtrip(self, webhook_map):
        """map -> properties -> map is exact."""
        properties = WebhookMessageProperties.from_map(webhook_map)

        assert properties.reason == "reason"
        assert properties.to_map() == webhook_map

    def test_to_map_always_has_every_key(self):
        """Empty fields are still written to the map."""
        assert WebhookMessageProperties().to_map() == {
            "workspaceID": "",
            "sourceID": "",
            "sourceType": "",
            "reason": "",
            "stage": "",
        }

    def test_json_omits_empty_optional_keys(self):
        """Only the workspace and source IDs are written when empty."""
        properties = WebhookMessageProperties(workspace_id="ws", source_id="s")

        assert properties.to_json() == '{"workspaceID":"ws","sourceID":"s"}'
        assert WebhookMessageProperties().to_dict() == {"workspaceID": "", "sourceID": ""}

    def test_json_keeps_set_keys(self, webhook_map):
        """Set fields are written under their wire names."""
        assert WebhookMessageProperties.from_map(webhook_map).to_dict() == webhook_map


class TestWebhookMessage:
    """Tests for webhook message JSON and validation."""

    def test_json_roundtrip(self, webhook_map):
        """JSON decoding reverses encoding."""
        data = {"properties": webhook_map, "payload": {"event": "push"}}

        message = WebhookMessage.from_json(json.dumps(data))

        assert message.properties.to_map() == webhook_map
        assert json.loads(message.to_json()) == data

    def test_json_without_reason(self):
        """A webhook envelope with an empty reason stays a webhook envelope."""
        message = WebhookMessage.from_json(
            '{"properties":{"workspaceID":"ws","sourceID":"s","stage":"webhook"},'
            '"payload":{"n":1.50}}'
        )

        assert isinstance(message.properties, WebhookMessageProperties)
        assert message.properties.reason == ""
        assert message.to_json() == (
            '{"properties":{"workspaceID":"ws","sourceID":"s","stage":"webhook"},'
            '"payload":{"n":1.50}}'
        )

    def test_valid(self, webhook_map):
        """A complete webhook message passes validation."""
        message = WebhookMessage(
            properties=WebhookMessageProperties.from_map(webhook_map),
            payload={"event": "push"},
        )

        new_webhook_message_validator()(message)

    def test_missing_fields(self, webhook_map):
        """Every missing field is reported by path."""
        webhook_map["reason"] = ""
        message = WebhookMessage(properties=WebhookMessageProperties.from_map(webhook_map))

        with pytest.raises(EnvelopeValidationError) as exc_info:
            new_webhook_message_validator()(message)

        assert exc_info.value.fields == [
            "WebhookMessage.properties.reason",
            "WebhookMessage.payload",
        ]
