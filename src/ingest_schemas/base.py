"""
Base class for wire-format models.

Wire models are the shared vocabulary between pipeline processes. They are
plain values: mutable so that an owner can update them in place, and
serialized with camelCase field names so that every language in the
pipeline reads the same JSON.
"""

from __future__ import annotations

import logging
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ingest_schemas.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """
    Base class for all wire-format models.

    Field names are snake_case in Python and camelCase on the wire. Both
    spellings are accepted on construction. Assignments are validated, so
    a value that has been mutated is still a valid value; a rejected
    assignment leaves every field as it was.

    Example:
        >>> class NodeRef(WireModel):
        ...     node_name: str
        ...
        >>> ref = NodeRef(node_name="node-0")
        >>> ref.to_json()
        '{"nodeName":"node-0"}'
        >>> NodeRef.from_json('{"nodeName":"node-0"}') == ref
        True
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # Allow snake_case names in construction
        validate_assignment=True,
        # NOT frozen - owners mutate status fields in place
    )

    def __setattr__(self, name: str, value: Any) -> None:
        # Model validators run after the new value is stored; undo on rejection
        snapshot = dict(self.__dict__)
        fields_set = set(self.__pydantic_fields_set__)
        try:
            super().__setattr__(name, value)
        except ValidationError:
            self.__dict__.clear()
            self.__dict__.update(snapshot)
            object.__setattr__(self, "__pydantic_fields_set__", fields_set)
            raise

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a JSON-compatible dictionary keyed by wire names.

        Returns:
            Dictionary representation with all values JSON-serializable
        """
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create from a dictionary keyed by wire names.

        Args:
            data: Dictionary with model fields

        Returns:
            Model instance

        Raises:
            SchemaValidationError: If a field is missing or invalid
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise cls._decode_error(e) from e

    def to_json(self) -> str:
        """Serialize to a JSON string keyed by wire names."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> Self:
        """
        Deserialize from a JSON string.

        Malformed JSON and missing or invalid fields both fail the whole
        decode; a partially populated value is never returned.

        Raises:
            SchemaValidationError: If the JSON is malformed or a field is
                missing or invalid
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise cls._decode_error(e) from e

    def clone(self) -> Self:
        """
        Create a deep copy that shares no mutable storage with this value.

        Nested models and lists are copied at every level, so changes made
        through the clone never reach the original and vice versa.
        """
        return self.model_copy(deep=True)

    @classmethod
    def _decode_error(cls, exc: ValidationError) -> SchemaValidationError:
        error = SchemaValidationError.from_pydantic(cls.__name__, exc)
        logger.debug(
            "Failed to decode %s",
            cls.__name__,
            extra={"type_name": cls.__name__, "error_count": len(error.errors)},
        )
        return error


__all__ = ["WireModel"]
