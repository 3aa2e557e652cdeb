"""
Message envelope exchanged between gateway, router and processing stages.

Properties travel either as JSON or as a flat string map of broker
attributes; both forms convert losslessly.
"""

from ingest_schemas.stream.message import (
    KIND_MESSAGE,
    KIND_WEBHOOK,
    Message,
    Properties,
    PropertiesCheck,
    decode_properties,
    new_message_properties_validator,
    new_message_validator,
    new_webhook_message_validator,
    properties_from_map,
    properties_to_map,
    with_encryption_properties_validator,
)
from ingest_schemas.stream.payload import PayloadEnvelope, RawPayload
from ingest_schemas.stream.properties import STAGE_WEBHOOK, EnvelopeProperties, MessageProperties
from ingest_schemas.stream.timestamp import Timestamp
from ingest_schemas.stream.webhook import WebhookMessage, WebhookMessageProperties

__all__ = [
    "KIND_MESSAGE",
    "KIND_WEBHOOK",
    "STAGE_WEBHOOK",
    "EnvelopeProperties",
    "Message",
    "MessageProperties",
    "PayloadEnvelope",
    "Properties",
    "PropertiesCheck",
    "RawPayload",
    "Timestamp",
    "WebhookMessage",
    "WebhookMessageProperties",
    "decode_properties",
    "new_message_properties_validator",
    "new_message_validator",
    "new_webhook_message_validator",
    "properties_from_map",
    "properties_to_map",
    "with_encryption_properties_validator",
]
