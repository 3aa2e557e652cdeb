"""
Webhook message envelope.

Webhook traffic carries a reduced property set: the workspace and source it
belongs to, the source type, the pipeline stage and the reason the message
was produced.
"""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import Field

from ingest_schemas.stream.payload import PayloadEnvelope, RawPayload
from ingest_schemas.stream.properties import (
    MAP_KEY_SOURCE_ID,
    MAP_KEY_SOURCE_TYPE,
    MAP_KEY_STAGE,
    MAP_KEY_WORKSPACE_ID,
    EnvelopeProperties,
)

MAP_KEY_REASON = "reason"


class WebhookMessageProperties(EnvelopeProperties):
    """
    Properties of a webhook message.

    All fields are required by validation, but only the workspace and
    source IDs are written to JSON when empty.
    """

    kind: Literal["webhook"] = Field(default="webhook", exclude=True)

    workspace_id: str = Field(default="", alias=MAP_KEY_WORKSPACE_ID)
    source_id: str = Field(default="", alias=MAP_KEY_SOURCE_ID)
    source_type: str = Field(default="", alias=MAP_KEY_SOURCE_TYPE)
    reason: str = Field(default="", alias=MAP_KEY_REASON)
    stage: str = Field(default="", alias=MAP_KEY_STAGE)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "workspace_id",
        "source_id",
        "source_type",
        "reason",
        "stage",
    )
    ALWAYS_EMITTED: ClassVar[tuple[str, ...]] = ("workspace_id", "source_id")

    def to_map(self) -> dict[str, str]:
        """Convert to a flat string map; every key is always present."""
        return {
            MAP_KEY_WORKSPACE_ID: self.workspace_id,
            MAP_KEY_SOURCE_ID: self.source_id,
            MAP_KEY_SOURCE_TYPE: self.source_type,
            MAP_KEY_REASON: self.reason,
            MAP_KEY_STAGE: self.stage,
        }

    @classmethod
    def from_map(cls, properties: dict[str, str]) -> WebhookMessageProperties:
        """Create from a flat string map. Absent keys become empty strings."""
        return cls(
            workspace_id=properties.get(MAP_KEY_WORKSPACE_ID, ""),
            source_id=properties.get(MAP_KEY_SOURCE_ID, ""),
            source_type=properties.get(MAP_KEY_SOURCE_TYPE, ""),
            reason=properties.get(MAP_KEY_REASON, ""),
            stage=properties.get(MAP_KEY_STAGE, ""),
        )


class WebhookMessage(PayloadEnvelope):
    """A webhook envelope: properties plus an opaque JSON payload."""

    properties: WebhookMessageProperties = Field(default_factory=WebhookMessageProperties)
    payload: RawPayload | None = None


__all__ = [
    "MAP_KEY_REASON",
    "WebhookMessage",
    "WebhookMessageProperties",
]
