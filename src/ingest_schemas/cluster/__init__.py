"""
Partition migration protocol.

Shared vocabulary between a cluster coordinator and participant nodes for
moving partitions between nodes with acknowledgment tracking.

Usage:
    >>> from ingest_schemas.cluster import PartitionMigration
    >>>
    >>> migration = PartitionMigration.from_json(data)
    >>> command = migration.reload_gateway_command()
    >>> ack_key = command.ack_key("node-0")
"""

from ingest_schemas.cluster.keys import (
    DEFAULT_ACK_KEY_CONFIG,
    AckKeyConfig,
    join_key,
    sibling_key,
)
from ingest_schemas.cluster.migration import (
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
)

__all__ = [
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
]
