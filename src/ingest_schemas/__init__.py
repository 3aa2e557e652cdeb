"""
ingest_schemas - Shared wire-format schemas for the ingestion pipeline.

This library provides:
- Partition migration protocol: lifecycle states, jobs, commands and acks
- Ack key derivation for distributed acknowledgment tracking
- Message envelope properties with lossless flat-map conversion
- Nanosecond-precision RFC 3339 timestamps
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ingest-schemas")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from ingest_schemas.base import WireModel
from ingest_schemas.cluster import (
    DEFAULT_ACK_KEY_CONFIG,
    AckKeyConfig,
    PartitionMigration,
    PartitionMigrationAck,
    PartitionMigrationJob,
    PartitionMigrationJobHeader,
    PartitionMigrationJobStatus,
    PartitionMigrationStatus,
    ReloadGatewayAck,
    ReloadGatewayCommand,
    ReloadSrcRouterAck,
    ReloadSrcRouterCommand,
    join_key,
    sibling_key,
)
from ingest_schemas.exceptions import (
    EncryptionKeyIDRequiredError,
    EnvelopeError,
    EnvelopeValidationError,
    JobNotFoundError,
    PropertyParseError,
    SchemaError,
    SchemaValidationError,
    TimestampParseError,
)
from ingest_schemas.stream import (
    STAGE_WEBHOOK,
    Message,
    MessageProperties,
    RawPayload,
    Timestamp,
    WebhookMessage,
    WebhookMessageProperties,
)

__all__ = [
    "__version__",
    # Base
    "WireModel",
    # Cluster
    "DEFAULT_ACK_KEY_CONFIG",
    "AckKeyConfig",
    "PartitionMigration",
    "PartitionMigrationAck",
    "PartitionMigrationJob",
    "PartitionMigrationJobHeader",
    "PartitionMigrationJobStatus",
    "PartitionMigrationStatus",
    "ReloadGatewayAck",
    "ReloadGatewayCommand",
    "ReloadSrcRouterAck",
    "ReloadSrcRouterCommand",
    "join_key",
    "sibling_key",
    # Stream
    "STAGE_WEBHOOK",
    "Message",
    "MessageProperties",
    "RawPayload",
    "Timestamp",
    "WebhookMessage",
    "WebhookMessageProperties",
    # Exceptions
    "EncryptionKeyIDRequiredError",
    "EnvelopeError",
    "EnvelopeValidationError",
    "JobNotFoundError",
    "PropertyParseError",
    "SchemaError",
    "SchemaValidationError",
    "TimestampParseError",
]
