"""
Partition migration protocol model.

This module defines the values a cluster coordinator and its participant
nodes exchange while moving partitions between nodes. The models are
passive: they expose pure accessors and derivations, and the coordinator
owns every status change.

Models in this module:

Enums:
    - PartitionMigrationStatus: Migration lifecycle states
    - PartitionMigrationJobStatus: Per-job lifecycle states

Core Models:
    - PartitionMigration: A migration and its jobs
    - PartitionMigrationJobHeader: One (source, target, partitions) unit of work
    - PartitionMigrationJob: A dispatched job with its own status

Commands and Acks:
    - ReloadGatewayCommand / ReloadGatewayAck
    - ReloadSrcRouterCommand / ReloadSrcRouterAck
    - PartitionMigrationAck
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TypeVar

from pydantic import Field, model_validator

from ingest_schemas.base import WireModel
from ingest_schemas.cluster.keys import (
    DEFAULT_ACK_KEY_CONFIG,
    AckKeyConfig,
    join_key,
    sibling_key,
)
from ingest_schemas.exceptions import JobNotFoundError

logger = logging.getLogger(__name__)

_S = TypeVar("_S", bound=Enum)


class PartitionMigrationStatus(Enum):
    """
    Migration lifecycle states.

    State machine transitions (linear, no backward transitions):
        NEW -> RELOADING_GW -> RELOADING_SRC_ROUTER -> MIGRATING -> COMPLETED

    Attributes:
        NEW: Migration created, jobs defined, no commands issued.
        RELOADING_GW: Gateway reload issued, awaiting gateway acks.
        RELOADING_SRC_ROUTER: Source-router reload issued, awaiting router acks.
        MIGRATING: Partition data transfer in progress, tracked per job.
        COMPLETED: All jobs completed and all acks collected.
    """

    NEW = "new"
    """Migration created, jobs defined, no commands issued."""

    RELOADING_GW = "reloading-gw"
    """Gateway reload issued, awaiting gateway acks."""

    RELOADING_SRC_ROUTER = "reloading-srcrouter"
    """Source-router reload issued, awaiting router acks."""

    MIGRATING = "migrating"
    """Partition data transfer in progress."""

    COMPLETED = "completed"
    """Migration completed."""

    @property
    def is_terminal(self) -> bool:
        """True for the final state."""
        return self is PartitionMigrationStatus.COMPLETED

    @property
    def next_status(self) -> PartitionMigrationStatus | None:
        """The state that follows this one, or None when terminal."""
        return _next_in(list(PartitionMigrationStatus), self)

    def can_transition_to(self, target: PartitionMigrationStatus) -> bool:
        """
        Check if transition to target state is valid.

        Only the immediately following state is reachable.

        Args:
            target: The state to transition to.

        Returns:
            True if the transition is valid.
        """
        return self.next_status is target


class PartitionMigrationJobStatus(Enum):
    """
    Per-job lifecycle states.

    State machine transitions:
        NEW -> MOVED -> COMPLETED
    """

    NEW = "new"
    """Job dispatched, partitions not yet moved."""

    MOVED = "moved"
    """Partitions have been moved."""

    COMPLETED = "completed"
    """Job completed."""

    @property
    def is_terminal(self) -> bool:
        """True for the final state."""
        return self is PartitionMigrationJobStatus.COMPLETED

    @property
    def next_status(self) -> PartitionMigrationJobStatus | None:
        """The state that follows this one, or None when terminal."""
        return _next_in(list(PartitionMigrationJobStatus), self)

    def can_transition_to(self, target: PartitionMigrationJobStatus) -> bool:
        """Check if transition to target state is valid."""
        return self.next_status is target


def _next_in(states: list[_S], current: _S) -> _S | None:
    index = states.index(current)
    return states[index + 1] if index + 1 < len(states) else None


# =============================================================================
# Acks
# =============================================================================


class PartitionMigrationAck(WireModel):
    """Acknowledgment from a node that received a migration announcement."""

    node_index: int = Field(..., description="Index of the node acknowledging")
    node_name: str = Field(..., description="Name of the node acknowledging")


class ReloadGatewayAck(WireModel):
    """Acknowledgment from a gateway node after reloading."""

    node_index: int = Field(..., description="Index of the node acknowledging")
    node_name: str = Field(..., description="Name of the node acknowledging")


class ReloadSrcRouterAck(WireModel):
    """Acknowledgment from a source router after reloading."""

    node_name: str = Field(..., description="Name of the node acknowledging")


# =============================================================================
# Commands
# =============================================================================


class ReloadGatewayCommand(WireModel):
    """
    Command instructing gateway nodes to reload their partition mapping.

    Attributes:
        nodes: Indices of the gateway nodes to reload
        ack_key_prefix: Prefix recipients key their acks under
    """

    nodes: list[int] = Field(..., description="Gateway node indices to reload")
    ack_key_prefix: str = Field(..., description="Prefix for acknowledgment keys")

    def ack(self, node_index: int, node_name: str) -> ReloadGatewayAck:
        """Create the acknowledgment a gateway node returns after reloading."""
        return ReloadGatewayAck(node_index=node_index, node_name=node_name)

    def ack_key(self, node_name: str) -> str:
        """Key under which ``node_name`` acknowledges this command."""
        return join_key(self.ack_key_prefix, node_name)


class ReloadSrcRouterCommand(WireModel):
    """Command instructing source routers to reload their partition mapping."""

    ack_key_prefix: str = Field(..., description="Prefix for acknowledgment keys")

    def ack(self, node_name: str) -> ReloadSrcRouterAck:
        """Create the acknowledgment a source router returns after reloading."""
        return ReloadSrcRouterAck(node_name=node_name)

    def ack_key(self, node_name: str) -> str:
        """Key under which ``node_name`` acknowledges this command."""
        return join_key(self.ack_key_prefix, node_name)


# =============================================================================
# Jobs
# =============================================================================


class PartitionMigrationJobHeader(WireModel):
    """
    One unit of migration work: a set of partitions moved between two nodes.

    Node indices refer to a cluster membership table maintained outside
    this model.

    Attributes:
        job_id: Identifier, unique within the migration
        source_node: Index of the node the partitions move from
        target_node: Index of the node the partitions move to
        partitions: Partition IDs moved by this job, in order
    """

    job_id: str = Field(..., description="Unique identifier for the migration job")
    source_node: int = Field(..., ge=0, description="Index of the source node")
    target_node: int = Field(..., ge=0, description="Index of the target node")
    partitions: list[str] = Field(..., min_length=1, description="Partition IDs being migrated")

    @model_validator(mode="after")
    def _check_distinct_nodes(self) -> PartitionMigrationJobHeader:
        if self.source_node == self.target_node:
            raise ValueError(f"sourceNode and targetNode must differ, both are {self.source_node}")
        return self


class PartitionMigrationJob(PartitionMigrationJobHeader):
    """
    A dispatched job, tracked independently of its parent migration.

    Serializes flat: header fields sit beside ``migrationId`` and
    ``status``.
    """

    migration_id: str = Field(..., description="ID of the parent migration")
    status: PartitionMigrationJobStatus = Field(..., description="Current status of the job")

    @classmethod
    def from_header(
        cls, header: PartitionMigrationJobHeader, migration_id: str
    ) -> PartitionMigrationJob:
        """Create a new job from a copy of ``header``."""
        return cls(
            job_id=header.job_id,
            source_node=header.source_node,
            target_node=header.target_node,
            partitions=list(header.partitions),
            migration_id=migration_id,
            status=PartitionMigrationJobStatus.NEW,
        )

    def header(self) -> PartitionMigrationJobHeader:
        """Return a copy of the header part of this job."""
        return PartitionMigrationJobHeader(
            job_id=self.job_id,
            source_node=self.source_node,
            target_node=self.target_node,
            partitions=list(self.partitions),
        )


# =============================================================================
# Migration
# =============================================================================


class PartitionMigration(WireModel):
    """
    The overall migration of a set of partitions.

    The coordinator creates a migration in ``NEW``, derives reload commands
    from it, and advances ``status`` as acknowledgments complete. Job
    progress is tracked separately through ``PartitionMigrationJob``.

    Attributes:
        id: Unique identifier for the migration
        status: Current lifecycle state
        jobs: Units of work, one per (source, target, partitions) move
        ack_key_prefix: Namespace for this migration's acknowledgment keys

    Example:
        >>> migration = PartitionMigration(
        ...     id="migration-1",
        ...     status=PartitionMigrationStatus.NEW,
        ...     jobs=[
        ...         PartitionMigrationJobHeader(
        ...             job_id="job-1", source_node=0, target_node=1, partitions=["ws1-0"]
        ...         ),
        ...     ],
        ...     ack_key_prefix="ack",
        ... )
        >>> migration.ack_key("node-0")
        'ack/node-0'
    """

    id: str = Field(..., description="Unique identifier for the migration")
    status: PartitionMigrationStatus = Field(..., description="Current status of the migration")
    jobs: list[PartitionMigrationJobHeader] = Field(..., min_length=1, description="Migration jobs")
    ack_key_prefix: str = Field(..., description="Prefix for acknowledgment keys")

    @model_validator(mode="after")
    def _check_unique_job_ids(self) -> PartitionMigration:
        seen: set[str] = set()
        for job in self.jobs:
            if job.job_id in seen:
                raise ValueError(f"duplicate jobId {job.job_id!r}")
            seen.add(job.job_id)
        return self

    def source_nodes(self) -> set[int]:
        """Unique indices of the nodes partitions are moved from."""
        return {job.source_node for job in self.jobs}

    def target_nodes(self) -> set[int]:
        """Unique indices of the nodes partitions are moved to."""
        return {job.target_node for job in self.jobs}

    def ack(self, node_index: int, node_name: str) -> PartitionMigrationAck:
        """
        Create the acknowledgment a node returns for this migration.

        The node is not checked against the migration's jobs.
        """
        return PartitionMigrationAck(node_index=node_index, node_name=node_name)

    def ack_key(self, node_name: str) -> str:
        """Key under which ``node_name`` acknowledges this migration."""
        return join_key(self.ack_key_prefix, node_name)

    def job(self, job_id: str) -> PartitionMigrationJobHeader:
        """
        Look up a job by ID.

        Raises:
            JobNotFoundError: If the migration has no such job
        """
        for job in self.jobs:
            if job.job_id == job_id:
                return job
        raise JobNotFoundError(self.id, job_id)

    def dispatch_jobs(self) -> list[PartitionMigrationJob]:
        """Create a ``NEW`` job record for every job header."""
        jobs = [PartitionMigrationJob.from_header(header, self.id) for header in self.jobs]
        logger.debug(
            "Dispatching %d jobs for migration %s",
            len(jobs),
            self.id,
            extra={"migration_id": self.id, "job_count": len(jobs)},
        )
        return jobs

    def reload_gateway_command(
        self,
        nodes: list[int] | None = None,
        config: AckKeyConfig = DEFAULT_ACK_KEY_CONFIG,
    ) -> ReloadGatewayCommand:
        """
        Derive the gateway reload command for this migration.

        Args:
            nodes: Gateway nodes to address. Defaults to every source and
                target node, in ascending order.
            config: Ack key layout

        Returns:
            Command whose ack prefix sits beside this migration's prefix
        """
        if nodes is None:
            nodes = sorted(self.source_nodes() | self.target_nodes())
        command = ReloadGatewayCommand(
            nodes=list(nodes),
            ack_key_prefix=sibling_key(self.ack_key_prefix, config.gateway_segment),
        )
        logger.debug(
            "Derived gateway reload command for migration %s",
            self.id,
            extra={"migration_id": self.id, "ack_key_prefix": command.ack_key_prefix},
        )
        return command

    def reload_src_router_command(
        self,
        config: AckKeyConfig = DEFAULT_ACK_KEY_CONFIG,
    ) -> ReloadSrcRouterCommand:
        """Derive the source-router reload command for this migration."""
        command = ReloadSrcRouterCommand(
            ack_key_prefix=sibling_key(self.ack_key_prefix, config.src_router_segment),
        )
        logger.debug(
            "Derived source-router reload command for migration %s",
            self.id,
            extra={"migration_id": self.id, "ack_key_prefix": command.ack_key_prefix},
        )
        return command


__all__ = [
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
]
