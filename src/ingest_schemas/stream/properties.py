"""
Message properties and their flat-map form.

Broker attribute systems carry string-to-string maps, so properties travel
as a flat map beside the payload. The conversion is explicit: a fixed set of
keys is always written, webhook keys are written only for the webhook
stage, and bot keys only for bot traffic.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import (
    ConfigDict,
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from ingest_schemas.base import WireModel
from ingest_schemas.exceptions import PropertyParseError, TimestampParseError
from ingest_schemas.stream.timestamp import Timestamp

STAGE_WEBHOOK = "webhook"

MAP_KEY_REQUEST_TYPE = "requestType"
MAP_KEY_ROUTING_KEY = "routingKey"
MAP_KEY_WORKSPACE_ID = "workspaceID"
MAP_KEY_SOURCE_ID = "sourceID"
MAP_KEY_DESTINATION_ID = "destinationID"
MAP_KEY_REQUEST_IP = "requestIP"
MAP_KEY_RECEIVED_AT = "receivedAt"
MAP_KEY_USER_ID = "userID"
MAP_KEY_SOURCE_JOB_RUN_ID = "sourceJobRunID"
MAP_KEY_SOURCE_TASK_RUN_ID = "sourceTaskRunID"
MAP_KEY_TRACE_ID = "traceID"
MAP_KEY_SOURCE_TYPE = "sourceType"
MAP_KEY_WEBHOOK_FAILURE_REASON = "webhookFailureReason"
MAP_KEY_STAGE = "stage"
MAP_KEY_COMPRESSION = "compression"
MAP_KEY_ENCRYPTION = "encryption"
MAP_KEY_ENCRYPTION_KEY_ID = "encryptionKeyID"
MAP_KEY_IS_BOT = "isBot"
MAP_KEY_BOT_NAME = "botName"
MAP_KEY_BOT_URL = "botURL"
MAP_KEY_BOT_IS_INVALID_BROWSER = "botIsInvalidBrowser"
MAP_KEY_NEEDS_BOT_ENRICHMENT = "needsBotEnrichment"

_TRUE_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TOKENS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(key: str, value: str) -> bool:
    """
    Parse a boolean map token.

    Raises:
        PropertyParseError: If ``value`` is not a recognized token
    """
    if value in _TRUE_TOKENS:
        return True
    if value in _FALSE_TOKENS:
        return False
    raise PropertyParseError(key, f"invalid boolean token {value!r}")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


class EnvelopeProperties(WireModel):
    """
    Base for property sets written to JSON with empty fields omitted.

    Fields named in ``ALWAYS_EMITTED`` are written even when empty. Fields
    named in ``REQUIRED_FIELDS`` must be set for a validator to accept the
    value.
    """

    model_config = ConfigDict(alias_generator=None)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ()
    ALWAYS_EMITTED: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _omit_empty(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict[str, Any]:
        data = handler(self)
        kept = set(self.ALWAYS_EMITTED)
        kept.update(self._wire_name(name) for name in self.ALWAYS_EMITTED)
        return {key: value for key, value in data.items() if key in kept or value}

    @classmethod
    def _wire_name(cls, name: str) -> str:
        return cls.model_fields[name].alias or name


class MessageProperties(EnvelopeProperties):
    """
    Routing and lineage metadata carried with every message.

    Required fields are always present on the wire. Optional fields are
    omitted from JSON when empty or false. Bot details are meaningful only
    when ``is_bot`` is set, and ``source_type`` and
    ``webhook_failure_reason`` only when ``stage`` is ``"webhook"``.

    Fields default to their zero values so that a partially filled value
    can be decoded and then checked by a message validator.
    """

    kind: Literal["message"] = Field(default="message", exclude=True)

    # Required
    request_type: str = Field(default="", alias=MAP_KEY_REQUEST_TYPE)
    routing_key: str = Field(default="", alias=MAP_KEY_ROUTING_KEY)
    workspace_id: str = Field(default="", alias=MAP_KEY_WORKSPACE_ID)
    source_id: str = Field(default="", alias=MAP_KEY_SOURCE_ID)
    received_at: Timestamp | None = Field(default=None, alias=MAP_KEY_RECEIVED_AT)
    request_ip: str = Field(default="", alias=MAP_KEY_REQUEST_IP)

    # Optional
    destination_id: str = Field(default="", alias=MAP_KEY_DESTINATION_ID)
    user_id: str = Field(default="", alias=MAP_KEY_USER_ID)
    source_job_run_id: str = Field(default="", alias=MAP_KEY_SOURCE_JOB_RUN_ID)
    source_task_run_id: str = Field(default="", alias=MAP_KEY_SOURCE_TASK_RUN_ID)
    trace_id: str = Field(default="", alias=MAP_KEY_TRACE_ID)
    source_type: str = Field(default="", alias=MAP_KEY_SOURCE_TYPE)
    webhook_failure_reason: str = Field(default="", alias=MAP_KEY_WEBHOOK_FAILURE_REASON)
    stage: str = Field(default="", alias=MAP_KEY_STAGE)
    compression: str = Field(default="", alias=MAP_KEY_COMPRESSION)
    encryption: str = Field(default="", alias=MAP_KEY_ENCRYPTION)
    # Refers to the right key once keys are rotated
    encryption_key_id: str = Field(default="", alias=MAP_KEY_ENCRYPTION_KEY_ID)
    is_bot: bool = Field(default=False, alias=MAP_KEY_IS_BOT)
    bot_name: str = Field(default="", alias=MAP_KEY_BOT_NAME)
    # Explains why the user agent was identified as a bot
    bot_url: str = Field(default="", alias=MAP_KEY_BOT_URL)
    bot_is_invalid_browser: bool = Field(default=False, alias=MAP_KEY_BOT_IS_INVALID_BROWSER)
    needs_bot_enrichment: bool = Field(default=False, alias=MAP_KEY_NEEDS_BOT_ENRICHMENT)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "request_type",
        "routing_key",
        "workspace_id",
        "source_id",
        "received_at",
        "request_ip",
    )
    ALWAYS_EMITTED: ClassVar[tuple[str, ...]] = REQUIRED_FIELDS

    @property
    def is_webhook_stage(self) -> bool:
        return self.stage == STAGE_WEBHOOK

    def to_map(self) -> dict[str, str]:
        """
        Convert to a flat string map for broker attributes.

        Base keys are always present, empty or not. Webhook keys are added
        for the webhook stage and bot keys for bot traffic; otherwise they
        are absent.
        """
        m = {
            MAP_KEY_REQUEST_TYPE: self.request_type,
            MAP_KEY_ROUTING_KEY: self.routing_key,
            MAP_KEY_WORKSPACE_ID: self.workspace_id,
            MAP_KEY_USER_ID: self.user_id,
            MAP_KEY_SOURCE_ID: self.source_id,
            MAP_KEY_DESTINATION_ID: self.destination_id,
            MAP_KEY_REQUEST_IP: self.request_ip,
            MAP_KEY_RECEIVED_AT: self.received_at.format() if self.received_at else "",
            MAP_KEY_SOURCE_JOB_RUN_ID: self.source_job_run_id,
            MAP_KEY_SOURCE_TASK_RUN_ID: self.source_task_run_id,
            MAP_KEY_TRACE_ID: self.trace_id,
            MAP_KEY_COMPRESSION: self.compression,
            MAP_KEY_ENCRYPTION: self.encryption,
            MAP_KEY_ENCRYPTION_KEY_ID: self.encryption_key_id,
        }
        if self.is_webhook_stage:
            m[MAP_KEY_SOURCE_TYPE] = self.source_type
            m[MAP_KEY_WEBHOOK_FAILURE_REASON] = self.webhook_failure_reason
            m[MAP_KEY_STAGE] = self.stage
        if self.is_bot:
            m[MAP_KEY_IS_BOT] = format_bool(True)
            m[MAP_KEY_BOT_NAME] = self.bot_name
            m[MAP_KEY_BOT_URL] = self.bot_url
            m[MAP_KEY_BOT_IS_INVALID_BROWSER] = format_bool(self.bot_is_invalid_browser)
            m[MAP_KEY_NEEDS_BOT_ENRICHMENT] = format_bool(self.needs_bot_enrichment)
        return m

    @classmethod
    def from_map(cls, properties: dict[str, str]) -> MessageProperties:
        """
        Create from a flat string map.

        Bot keys are read only when ``isBot`` is true.

        Raises:
            TimestampParseError: If ``receivedAt`` is missing or malformed
            PropertyParseError: If a boolean token is malformed
        """
        raw_received_at = properties.get(MAP_KEY_RECEIVED_AT, "")
        try:
            received_at = Timestamp.parse(raw_received_at)
        except TimestampParseError as e:
            raise TimestampParseError(raw_received_at, key=MAP_KEY_RECEIVED_AT) from e

        is_bot = bot_is_invalid_browser = needs_bot_enrichment = False
        bot_name = bot_url = ""

        if properties.get(MAP_KEY_IS_BOT):
            is_bot = parse_bool(MAP_KEY_IS_BOT, properties[MAP_KEY_IS_BOT])

        if is_bot:
            bot_name = properties.get(MAP_KEY_BOT_NAME, "")
            bot_url = properties.get(MAP_KEY_BOT_URL, "")
            if properties.get(MAP_KEY_BOT_IS_INVALID_BROWSER):
                bot_is_invalid_browser = parse_bool(
                    MAP_KEY_BOT_IS_INVALID_BROWSER, properties[MAP_KEY_BOT_IS_INVALID_BROWSER]
                )
            if properties.get(MAP_KEY_NEEDS_BOT_ENRICHMENT):
                needs_bot_enrichment = parse_bool(
                    MAP_KEY_NEEDS_BOT_ENRICHMENT, properties[MAP_KEY_NEEDS_BOT_ENRICHMENT]
                )

        return cls(
            request_type=properties.get(MAP_KEY_REQUEST_TYPE, ""),
            routing_key=properties.get(MAP_KEY_ROUTING_KEY, ""),
            workspace_id=properties.get(MAP_KEY_WORKSPACE_ID, ""),
            request_ip=properties.get(MAP_KEY_REQUEST_IP, ""),
            user_id=properties.get(MAP_KEY_USER_ID, ""),
            source_id=properties.get(MAP_KEY_SOURCE_ID, ""),
            destination_id=properties.get(MAP_KEY_DESTINATION_ID, ""),
            received_at=received_at,
            source_job_run_id=properties.get(MAP_KEY_SOURCE_JOB_RUN_ID, ""),
            source_task_run_id=properties.get(MAP_KEY_SOURCE_TASK_RUN_ID, ""),
            trace_id=properties.get(MAP_KEY_TRACE_ID, ""),
            source_type=properties.get(MAP_KEY_SOURCE_TYPE, ""),
            webhook_failure_reason=properties.get(MAP_KEY_WEBHOOK_FAILURE_REASON, ""),
            stage=properties.get(MAP_KEY_STAGE, ""),
            compression=properties.get(MAP_KEY_COMPRESSION, ""),
            encryption=properties.get(MAP_KEY_ENCRYPTION, ""),
            encryption_key_id=properties.get(MAP_KEY_ENCRYPTION_KEY_ID, ""),
            is_bot=is_bot,
            bot_name=bot_name,
            bot_url=bot_url,
            bot_is_invalid_browser=bot_is_invalid_browser,
            needs_bot_enrichment=needs_bot_enrichment,
        )

    def logger_fields(self) -> dict[str, Any]:
        """
        Structured logging fields for these properties.

        Suitable for ``extra=``. Gated the same way as ``to_map``, except
        that ``isBot`` is always present.

        Example:
            >>> logger.info("Message received", extra=properties.logger_fields())
        """
        fields: dict[str, Any] = {}
        if self.is_webhook_stage:
            fields[MAP_KEY_SOURCE_TYPE] = self.source_type
            fields[MAP_KEY_WEBHOOK_FAILURE_REASON] = self.webhook_failure_reason
            fields[MAP_KEY_STAGE] = self.stage

        fields.update(
            {
                MAP_KEY_REQUEST_TYPE: self.request_type,
                MAP_KEY_ROUTING_KEY: self.routing_key,
                MAP_KEY_WORKSPACE_ID: self.workspace_id,
                MAP_KEY_USER_ID: self.user_id,
                MAP_KEY_SOURCE_ID: self.source_id,
                MAP_KEY_DESTINATION_ID: self.destination_id,
                MAP_KEY_REQUEST_IP: self.request_ip,
                MAP_KEY_RECEIVED_AT: self.received_at.format() if self.received_at else "",
                MAP_KEY_SOURCE_JOB_RUN_ID: self.source_job_run_id,
                MAP_KEY_SOURCE_TASK_RUN_ID: self.source_task_run_id,
                MAP_KEY_TRACE_ID: self.trace_id,
                MAP_KEY_COMPRESSION: self.compression,
                MAP_KEY_ENCRYPTION: self.encryption,
                MAP_KEY_ENCRYPTION_KEY_ID: self.encryption_key_id,
                MAP_KEY_IS_BOT: self.is_bot,
            }
        )
        if self.is_bot:
            fields[MAP_KEY_BOT_NAME] = self.bot_name
            fields[MAP_KEY_BOT_URL] = self.bot_url
            fields[MAP_KEY_BOT_IS_INVALID_BROWSER] = self.bot_is_invalid_browser
            fields[MAP_KEY_NEEDS_BOT_ENRICHMENT] = self.needs_bot_enrichment
        return fields


__all__ = [
    "STAGE_WEBHOOK",
    "EnvelopeProperties",
    "MessageProperties",
    "format_bool",
    "parse_bool",
]
