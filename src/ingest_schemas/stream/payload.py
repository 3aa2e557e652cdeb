"""
Opaque JSON payloads.

A payload is carried as the exact JSON text it arrived in, so number
literals such as ``12345678901234567890.12`` or ``1.10`` reach the next hop
unchanged. Decoding it into Python values and encoding it again cannot
promise that.

``PayloadEnvelope`` reads the raw text of its ``payload`` member straight
out of the envelope JSON and writes it back verbatim.

Example:
    >>> payload = RawPayload('{"amount":12345678901234567890.12}')
    >>> payload.text
    '{"amount":12345678901234567890.12}'
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from json.decoder import scanstring
from typing import Any, Self

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from ingest_schemas.base import WireModel
from ingest_schemas.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\n\r"
_JSON_NULL = "null"
_decoder = json.JSONDecoder()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


@dataclass(frozen=True)
class RawPayload:
    """
    A single JSON value kept as its original text.

    Attributes:
        text: Well-formed JSON text of one value
    """

    text: str

    def __post_init__(self) -> None:
        try:
            json.loads(self.text, parse_constant=_reject_constant)
        except ValueError as e:
            raise ValueError(f"payload is not valid JSON: {e}") from e

    @classmethod
    def from_value(cls, value: Any) -> RawPayload:
        """Encode a JSON-compatible Python value as compact JSON text."""
        return cls(json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False))

    def value(self) -> Any:
        """Decode the payload into Python values."""
        return json.loads(self.text)

    def __str__(self) -> str:
        return self.text

    @classmethod
    def _validate(cls, value: Any) -> RawPayload:
        if isinstance(value, RawPayload):
            return value
        try:
            return cls.from_value(value)
        except TypeError as e:
            raise ValueError(f"payload is not JSON-serializable: {e}") from e

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda payload: payload.value(),
                when_used="json-unless-none",
            ),
        )


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index] in _WHITESPACE:
        index += 1
    return index


def split_object(text: str) -> dict[str, str]:
    """
    Split a JSON object into the raw text of each member value.

    Later members override earlier ones with the same name.

    Example:
        >>> split_object('{"a": 1.10, "b": {"c": null}}')
        {'a': '1.10', 'b': '{"c": null}'}

    Raises:
        ValueError: If ``text`` is not exactly one JSON object
    """
    index = _skip_whitespace(text, 0)
    if not text.startswith("{", index):
        raise ValueError(f"expected '{{' at offset {index}")

    members: dict[str, str] = {}
    index = _skip_whitespace(text, index + 1)
    if text.startswith("}", index):
        index += 1
    else:
        while True:
            if not text.startswith('"', index):
                raise ValueError(f"expected a member name at offset {index}")
            name, index = scanstring(text, index + 1)
            index = _skip_whitespace(text, index)
            if not text.startswith(":", index):
                raise ValueError(f"expected ':' at offset {index}")
            start = _skip_whitespace(text, index + 1)
            _, index = _decoder.raw_decode(text, start)
            members[name] = text[start:index]

            index = _skip_whitespace(text, index)
            if text.startswith(",", index):
                index = _skip_whitespace(text, index + 1)
                continue
            if text.startswith("}", index):
                index += 1
                break
            raise ValueError(f"expected ',' or '}}' at offset {index}")

    if _skip_whitespace(text, index) != len(text):
        raise ValueError(f"unexpected data at offset {index}")
    return members


class PayloadEnvelope(WireModel):
    """
    Base for envelopes made of a properties object and a raw payload.

    Subclasses declare ``properties`` and ``payload: RawPayload | None``.
    JSON encoding writes the payload text verbatim; JSON decoding keeps the
    payload member's text exactly as received. A ``null`` or absent member
    leaves the field at its default.
    """

    def to_json(self) -> str:
        """Serialize to JSON with the payload written verbatim."""
        payload = self.payload.text if self.payload is not None else _JSON_NULL
        return f'{{"properties":{self.properties.to_json()},"payload":{payload}}}'

    @classmethod
    def from_json(cls, data: str | bytes) -> Self:
        """
        Deserialize from JSON, keeping the payload's original text.

        Raises:
            SchemaValidationError: If the JSON is malformed or a field is
                invalid
        """
        try:
            text = data.decode() if isinstance(data, (bytes, bytearray)) else data
            fields: dict[str, Any] = {}
            for name, raw in split_object(text).items():
                if raw == _JSON_NULL:
                    continue
                fields[name] = RawPayload(raw) if name == "payload" else json.loads(raw)
        except ValueError as e:
            logger.debug(
                "Failed to decode %s",
                cls.__name__,
                extra={"type_name": cls.__name__, "error_count": 1},
            )
            raise SchemaValidationError(cls.__name__, [f"{cls.__name__}: {e}"]) from e
        return cls.from_dict(fields)


__all__ = [
    "PayloadEnvelope",
    "RawPayload",
    "split_object",
]
