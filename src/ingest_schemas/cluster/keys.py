"""
Acknowledgment key derivation.

Ack keys are hierarchical, slash-separated paths. A migration owns a prefix,
each command phase derives a sibling prefix beside it, and every node acks
under ``<prefix>/<node name>``. An acknowledgment store can then decide
"all nodes acked" by counting distinct keys under a prefix, and keys of one
phase are never counted under another phase's prefix.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

SEPARATOR = "/"
SIBLING_SEPARATOR = "-"


def join_key(*segments: str) -> str:
    """
    Join key segments into a single clean path.

    Empty segments are ignored, repeated separators collapse to one and
    trailing separators are dropped. Joining only empty segments yields an
    empty key.

    Example:
        >>> join_key("ack", "node-0")
        'ack/node-0'
        >>> join_key("ack/", "node-0")
        'ack/node-0'
        >>> join_key("", "node-0")
        'node-0'
    """
    parts = [segment for segment in segments if segment]
    if not parts:
        return ""
    key = posixpath.normpath(SEPARATOR.join(parts))
    # normpath keeps a leading "//" as-is
    if key.startswith("//"):
        key = SEPARATOR + key.lstrip(SEPARATOR)
    return key


def sibling_key(prefix: str, segment: str) -> str:
    """
    Derive the prefix that sits beside ``prefix`` for ``segment``.

    The result is ``prefix`` with ``-<segment>`` appended to its last path
    component, so no key under the result is also under ``prefix``. An empty
    prefix yields the bare segment.

    Example:
        >>> sibling_key("ack", "reload-gw")
        'ack-reload-gw'
        >>> sibling_key("ns/ack/", "reload-gw")
        'ns/ack-reload-gw'
        >>> sibling_key("", "reload-gw")
        'reload-gw'
    """
    base = join_key(prefix).rstrip(SEPARATOR)
    if not base:
        return segment
    return base + SIBLING_SEPARATOR + segment


@dataclass(frozen=True)
class AckKeyConfig:
    """
    Layout of the ack key namespace beside a migration prefix.

    Attributes:
        gateway_segment: Segment appended to the migration prefix to form
            the sibling prefix of gateway reload acks
        src_router_segment: Segment appended to the migration prefix to form
            the sibling prefix of source-router reload acks

    Example:
        >>> config = AckKeyConfig(gateway_segment="gw", src_router_segment="router")
    """

    gateway_segment: str = "reload-gw"
    src_router_segment: str = "reload-srcrouter"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in ("gateway_segment", "src_router_segment"):
            value = getattr(self, name)
            if not value:
                raise ValueError(f"{name} must not be empty")
            if SEPARATOR in value or value in (".", ".."):
                raise ValueError(f"{name} must be a single key segment, got {value!r}")

        if self.gateway_segment == self.src_router_segment:
            raise ValueError(
                "gateway_segment and src_router_segment must differ, "
                f"both are {self.gateway_segment!r}"
            )


DEFAULT_ACK_KEY_CONFIG = AckKeyConfig()


__all__ = [
    "DEFAULT_ACK_KEY_CONFIG",
    "SEPARATOR",
    "SIBLING_SEPARATOR",
    "AckKeyConfig",
    "join_key",
    "sibling_key",
]
