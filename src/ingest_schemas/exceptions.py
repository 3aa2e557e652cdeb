"""Library exceptions for the ingest_schemas package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError


class SchemaError(Exception):
    """Base exception for ingest_schemas library."""

    pass


class SchemaValidationError(SchemaError):
    """
    Raised when a wire type cannot be decoded or fails validation.

    The message names the model and every failing field path, so a
    rejected payload can be diagnosed without inspecting the input.

    Attributes:
        type_name: Name of the model that failed to decode
        errors: Field-qualified error messages, one per failing field
    """

    def __init__(self, type_name: str, errors: list[str]) -> None:
        self.type_name = type_name
        self.errors = errors
        super().__init__(f"Invalid {type_name}: " + "; ".join(errors))

    @classmethod
    def from_pydantic(cls, type_name: str, exc: ValidationError) -> SchemaValidationError:
        """
        Build from a pydantic ValidationError.

        Each error location is rendered as a dotted path rooted at the
        model name, e.g. ``PartitionMigration.jobs.0.jobId: Field required``.
        """
        errors = []
        for error in exc.errors():
            path = ".".join(str(part) for part in (type_name, *error["loc"]))
            errors.append(f"{path}: {error['msg']}")
        return cls(type_name, errors)


class JobNotFoundError(SchemaError):
    """Raised when a migration has no job with the requested ID."""

    def __init__(self, migration_id: str, job_id: str) -> None:
        self.migration_id = migration_id
        self.job_id = job_id
        super().__init__(f"Job {job_id!r} not found in migration {migration_id!r}")


class EnvelopeError(SchemaError):
    """Raised when there's an error with message envelope properties."""

    pass


class PropertyParseError(EnvelopeError):
    """Raised when a property map value cannot be parsed."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"parsing {key}: {message}")


class TimestampParseError(PropertyParseError):
    """Raised when a timestamp is not valid RFC 3339 text."""

    def __init__(self, value: str, key: str = "timestamp") -> None:
        self.value = value
        super().__init__(key, f"cannot parse {value!r} as RFC 3339 timestamp")


class EnvelopeValidationError(EnvelopeError):
    """
    Raised when an envelope is missing required fields.

    Attributes:
        fields: Struct paths of the missing fields, e.g.
            ``Message.properties.requestType``
    """

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__("; ".join(f"{field}: field is required" for field in fields))


class EncryptionKeyIDRequiredError(EnvelopeError):
    """Raised when encryption is set without an encryption key ID."""

    def __init__(self) -> None:
        super().__init__("encryption key ID is required when encryption is set")


__all__ = [
    "EncryptionKeyIDRequiredError",
    "EnvelopeError",
    "EnvelopeValidationError",
    "JobNotFoundError",
    "PropertyParseError",
    "SchemaError",
    "SchemaValidationError",
    "TimestampParseError",
]
