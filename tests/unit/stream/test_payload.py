"""
Unit tests for raw JSON payloads and envelope member splitting.
"""

import pytest

from ingest_schemas.stream.payload import RawPayload, split_object


class TestRawPayload:
    """Tests for RawPayload."""

    def test_text_kept_verbatim(self):
        """The original text is kept, not a re-encoding of it."""
        payload = RawPayload('{"amount": 12345678901234567890.12, "x": 1.10}')

        assert payload.text == '{"amount": 12345678901234567890.12, "x": 1.10}'
        assert str(payload) == payload.text

    def test_value(self):
        """The payload decodes to Python values on request."""
        assert RawPayload('[1, "two", null]').value() == [1, "two", None]

    def test_from_value(self):
        """Python values are encoded as compact JSON."""
        assert RawPayload.from_value({"key": "välue", "n": [1, 2]}).text == (
            '{"key":"välue","n":[1,2]}'
        )

    @pytest.mark.parametrize("text", ["", "{", "NaN", "[Infinity]", "1 2"])
    def test_invalid_json_rejected(self, text):
        """Only a single well-formed JSON value is accepted."""
        with pytest.raises(ValueError, match="payload is not valid JSON"):
            RawPayload(text)

    def test_equality_by_text(self):
        """Payloads compare by their text."""
        assert RawPayload("[1,2]") == RawPayload("[1,2]")
        assert RawPayload("[1,2]") != RawPayload("[1, 2]")


class TestSplitObject:
    """Tests for split_object."""

    def test_members_keep_raw_text(self):
        """Each member value is returned exactly as written."""
        text = '{ "properties" : {"a": "b"}, "payload": {"n": 1.10, "m": [ 1e400 ]} }'

        assert split_object(text) == {
            "properties": '{"a": "b"}',
            "payload": '{"n": 1.10, "m": [ 1e400 ]}',
        }

    def test_empty_object(self):
        """An empty object has no members."""
        assert split_object(" {} ") == {}

    def test_escaped_member_name(self):
        """Member names are unescaped."""
        assert split_object('{"pay\\u006coad": null}') == {"payload": "null"}

    def test_later_member_wins(self):
        """Repeated names keep the last value."""
        assert split_object('{"a": 1, "a": 2}') == {"a": "2"}

    @pytest.mark.parametrize(
        "text",
        [
            "[]",
            '{"a": 1',
            '{"a" 1}',
            '{"a": }',
            '{"a": 1,}',
            '{a: 1}',
            '{"a": 1} {}',
        ],
    )
    def test_malformed_rejected(self, text):
        """Anything but exactly one JSON object is rejected."""
        with pytest.raises(ValueError):
            split_object(text)
