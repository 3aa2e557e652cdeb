"""
Shared pytest fixtures for the ingest_schemas library tests.

This module provides:
- Migration fixtures (migration, migration_job)
- Command fixtures (gateway_command, src_router_command)
- Envelope fixtures (received_at, properties_map, webhook_properties_map)
"""

from __future__ import annotations

import pytest

from ingest_schemas.cluster import (
    PartitionMigration,
    PartitionMigrationJob,
    PartitionMigrationJobHeader,
    PartitionMigrationJobStatus,
    PartitionMigrationStatus,
    ReloadGatewayCommand,
    ReloadSrcRouterCommand,
)
from ingest_schemas.stream import STAGE_WEBHOOK

# =============================================================================
# Migration Fixtures
# =============================================================================


@pytest.fixture
def migration() -> PartitionMigration:
    """
    Provide a migration moving partitions from node 0 to nodes 1 and 2.

    Returns:
        A NEW migration with two jobs and ack key prefix "ack".
    """
    return PartitionMigration(
        id="id",
        status=PartitionMigrationStatus.NEW,
        jobs=[
            PartitionMigrationJobHeader(
                job_id="job-1",
                source_node=0,
                target_node=1,
                partitions=["ws1-0", "ws1-1"],
            ),
            PartitionMigrationJobHeader(
                job_id="job-2",
                source_node=0,
                target_node=2,
                partitions=["ws1-2", "ws1-3"],
            ),
        ],
        ack_key_prefix="ack",
    )


@pytest.fixture
def migration_job() -> PartitionMigrationJob:
    """Provide a dispatched job belonging to "migration-1"."""
    return PartitionMigrationJob(
        job_id="job-1",
        source_node=0,
        target_node=1,
        partitions=["ws1-0", "ws1-1"],
        migration_id="migration-1",
        status=PartitionMigrationJobStatus.NEW,
    )


# =============================================================================
# Command Fixtures
# =============================================================================


@pytest.fixture
def gateway_command() -> ReloadGatewayCommand:
    """Provide a gateway reload command addressed to nodes 0, 1 and 2."""
    return ReloadGatewayCommand(nodes=[0, 1, 2], ack_key_prefix="ack")


@pytest.fixture
def src_router_command() -> ReloadSrcRouterCommand:
    """Provide a source-router reload command."""
    return ReloadSrcRouterCommand(ack_key_prefix="ack")


# =============================================================================
# Envelope Fixtures
# =============================================================================


@pytest.fixture
def received_at() -> str:
    """Provide a receipt time with nanosecond precision."""
    return "2024-08-01T02:30:50.0000002Z"


@pytest.fixture
def properties_map(received_at: str) -> dict[str, str]:
    """
    Provide a complete broker attribute map without webhook or bot keys.

    Returns:
        A map holding exactly the base property keys.
    """
    return {
        "requestType": "requestType",
        "routingKey": "routingKey",
        "workspaceID": "workspaceID",
        "userID": "userID",
        "sourceID": "sourceID",
        "destinationID": "destinationID",
        "requestIP": "10.29.13.20",
        "receivedAt": received_at,
        "sourceJobRunID": "sourceJobRunID",
        "sourceTaskRunID": "sourceTaskRunID",
        "traceID": "traceID",
        "compression": "some-serialized-compression-settings",
        "encryption": "some-serialized-encryption-settings",
        "encryptionKeyID": "encryptionKeyID",
    }


@pytest.fixture
def webhook_properties_map(properties_map: dict[str, str]) -> dict[str, str]:
    """Provide a broker attribute map for the webhook stage."""
    return {
        **properties_map,
        "sourceType": "sourceType",
        "webhookFailureReason": "webhookFailureReason",
        "stage": STAGE_WEBHOOK,
    }
