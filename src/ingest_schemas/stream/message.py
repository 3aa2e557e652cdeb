"""
Message envelope and validation.

A message is a set of properties plus an opaque JSON payload. Decoding is
lenient: absent fields take their zero values. Required fields are checked
by an explicit validator, and semantic rules such as "encryption needs a key
ID" are opt-in checks layered on top of it.

Example:
    >>> validate = new_message_properties_validator(with_encryption_properties_validator())
    >>> properties = MessageProperties.from_map(attributes)
    >>> validate(properties)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Annotated, Any, Union

from pydantic import Discriminator, Field, Tag

from ingest_schemas.base import WireModel
from ingest_schemas.exceptions import (
    EncryptionKeyIDRequiredError,
    EnvelopeValidationError,
)
from ingest_schemas.stream.payload import PayloadEnvelope, RawPayload
from ingest_schemas.stream.properties import MessageProperties
from ingest_schemas.stream.webhook import WebhookMessage, WebhookMessageProperties

logger = logging.getLogger(__name__)

KIND_MESSAGE = "message"
KIND_WEBHOOK = "webhook"


class Message(PayloadEnvelope):
    """An envelope: message properties plus an opaque JSON payload."""

    properties: MessageProperties = Field(default_factory=MessageProperties)
    payload: RawPayload | None = None


# =============================================================================
# Properties tagged union
# =============================================================================


def _properties_kind(value: Any) -> str | None:
    # Wire data carries no kind, so a plain dict must name its variant
    if isinstance(value, dict):
        return value.get("kind")
    return getattr(value, "kind", None)


Properties = Annotated[
    Union[
        Annotated[MessageProperties, Tag(KIND_MESSAGE)],
        Annotated[WebhookMessageProperties, Tag(KIND_WEBHOOK)],
    ],
    Discriminator(_properties_kind),
]


def _variant(kind: str) -> type[MessageProperties] | type[WebhookMessageProperties]:
    if kind == KIND_MESSAGE:
        return MessageProperties
    if kind == KIND_WEBHOOK:
        return WebhookMessageProperties
    raise ValueError(
        f"unknown properties kind {kind!r}, expected {KIND_MESSAGE!r} or {KIND_WEBHOOK!r}"
    )


def decode_properties(
    data: dict[str, Any],
    kind: str = KIND_MESSAGE,
) -> MessageProperties | WebhookMessageProperties:
    """
    Decode a JSON properties object as the ``kind`` variant.

    Raises:
        ValueError: If ``kind`` is not a known variant
        SchemaValidationError: If a field has the wrong type
    """
    return _variant(kind).from_dict(data)


def properties_from_map(
    properties: dict[str, str],
    kind: str = KIND_MESSAGE,
) -> MessageProperties | WebhookMessageProperties:
    """
    Create the ``kind`` variant of properties from a flat string map.

    Raises:
        ValueError: If ``kind`` is not a known variant
        PropertyParseError: If a map value cannot be parsed
    """
    return _variant(kind).from_map(properties)


def properties_to_map(properties: MessageProperties | WebhookMessageProperties) -> dict[str, str]:
    """Convert either properties variant to a flat string map."""
    return properties.to_map()


# =============================================================================
# Validation
# =============================================================================

PropertiesCheck = Callable[[MessageProperties], None]


def _missing_fields(value: WireModel, required: Iterable[str], path: str) -> list[str]:
    missing = []
    for name in required:
        field_value = getattr(value, name)
        if field_value is None or field_value == "":
            alias = type(value).model_fields[name].alias or name
            missing.append(f"{path}.{alias}")
    return missing


def _raise_if_missing(missing: list[str]) -> None:
    if missing:
        logger.debug("Envelope validation failed", extra={"missing_fields": missing})
        raise EnvelopeValidationError(missing)


def new_message_validator() -> Callable[[Message], None]:
    """
    Create a validator that checks a message's required fields.

    The returned callable raises ``EnvelopeValidationError`` naming every
    missing field, e.g. ``Message.properties.requestType``.
    """

    def validate(message: Message) -> None:
        missing = _missing_fields(
            message.properties,
            MessageProperties.REQUIRED_FIELDS,
            "Message.properties",
        )
        if message.payload is None:
            missing.append("Message.payload")
        _raise_if_missing(missing)

    return validate


def new_webhook_message_validator() -> Callable[[WebhookMessage], None]:
    """Create a validator that checks a webhook message's required fields."""

    def validate(message: WebhookMessage) -> None:
        missing = _missing_fields(
            message.properties,
            WebhookMessageProperties.REQUIRED_FIELDS,
            "WebhookMessage.properties",
        )
        if message.payload is None:
            missing.append("WebhookMessage.payload")
        _raise_if_missing(missing)

    return validate


def new_message_properties_validator(
    *checks: PropertiesCheck,
) -> Callable[[MessageProperties], None]:
    """
    Create a validator for message properties.

    Args:
        *checks: Semantic checks run, in order, before the required-field
            check. Each raises to reject the properties.
    """

    def validate(properties: MessageProperties) -> None:
        for check in checks:
            check(properties)
        _raise_if_missing(
            _missing_fields(properties, MessageProperties.REQUIRED_FIELDS, "MessageProperties")
        )

    return validate


def with_encryption_properties_validator() -> PropertiesCheck:
    """Check that properties with encryption set also carry a key ID."""

    def check(properties: MessageProperties) -> None:
        if properties.encryption and not properties.encryption_key_id:
            raise EncryptionKeyIDRequiredError()

    return check


__all__ = [
    "KIND_MESSAGE",
    "KIND_WEBHOOK",
    "Message",
    "Properties",
    "PropertiesCheck",
    "decode_properties",
    "new_message_properties_validator",
    "new_message_validator",
    "new_webhook_message_validator",
    "properties_from_map",
    "properties_to_map",
    "with_encryption_properties_validator",
]
