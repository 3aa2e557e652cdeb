"""
Unit tests for ack key joining and the ack key layout config.
"""

import pytest

from ingest_schemas.cluster.keys import (
    DEFAULT_ACK_KEY_CONFIG,
    AckKeyConfig,
    join_key,
    sibling_key,
)


class TestJoinKey:
    """Tests for join_key."""

    @pytest.mark.parametrize(
        ("segments", "expected"),
        [
            (("ack", "node-0"), "ack/node-0"),
            (("ack/", "node-0"), "ack/node-0"),
            (("ack///", "node-0"), "ack/node-0"),
            (("", "node-0"), "node-0"),
            (("ack", ""), "ack"),
            (("ack", "reload-gw", "node-0"), "ack/reload-gw/node-0"),
            (("/ack", "node-0"), "/ack/node-0"),
            (("//ack", "node-0"), "/ack/node-0"),
            (("", ""), ""),
            ((), ""),
        ],
    )
    def test_join(self, segments, expected):
        """Segments join as a clean slash-separated path."""
        assert join_key(*segments) == expected

    def test_no_leading_separator_for_empty_prefix(self):
        """An empty prefix does not produce a leading slash."""
        assert not join_key("", "node-0").startswith("/")


class TestSiblingKey:
    """Tests for sibling_key."""

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [
            ("ack", "ack-reload-gw"),
            ("ack/", "ack-reload-gw"),
            ("ns/ack", "ns/ack-reload-gw"),
            ("", "reload-gw"),
        ],
    )
    def test_sibling(self, prefix, expected):
        """The segment is appended to the last path component."""
        assert sibling_key(prefix, "reload-gw") == expected

    def test_not_under_prefix(self):
        """Keys under the sibling are never under the original prefix."""
        key = join_key(sibling_key("ack", "reload-gw"), "node-0")

        assert not key.startswith("ack/")


class TestAckKeyConfig:
    """Tests for AckKeyConfig validation."""

    def test_defaults(self):
        """Default segments name the two reload phases."""
        assert DEFAULT_ACK_KEY_CONFIG.gateway_segment == "reload-gw"
        assert DEFAULT_ACK_KEY_CONFIG.src_router_segment == "reload-srcrouter"

    def test_empty_segment_rejected(self):
        """Segments must not be empty."""
        with pytest.raises(ValueError, match="gateway_segment must not be empty"):
            AckKeyConfig(gateway_segment="")

    @pytest.mark.parametrize("segment", ["a/b", ".", ".."])
    def test_non_single_segment_rejected(self, segment):
        """Segments must be a single path component."""
        with pytest.raises(ValueError, match="single key segment"):
            AckKeyConfig(src_router_segment=segment)

    def test_equal_segments_rejected(self):
        """Phases must not share a prefix."""
        with pytest.raises(ValueError, match="must differ"):
            AckKeyConfig(gateway_segment="reload", src_router_segment="reload")

    def test_frozen(self):
        """Config values cannot be changed after creation."""
        with pytest.raises(AttributeError):
            DEFAULT_ACK_KEY_CONFIG.gateway_segment = "other"  # type: ignore[misc]
