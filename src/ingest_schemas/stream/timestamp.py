"""
Nanosecond-precision RFC 3339 timestamps.

Envelope receipt times are written by services that keep nanoseconds, so
``datetime`` (microseconds) cannot carry them without loss. ``Timestamp``
keeps the whole-second moment as an aware ``datetime`` and the sub-second
part as an integer nanosecond count.

Text form follows the RFC3339Nano layout: fractional digits are trimmed
of trailing zeros (and dropped entirely when zero), and UTC is written as
``Z``.

Example:
    >>> ts = Timestamp.parse("2024-08-01T02:30:50.0000002Z")
    >>> ts.nanosecond
    200
    >>> ts.format()
    '2024-08-01T02:30:50.0000002Z'
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from ingest_schemas.exceptions import TimestampParseError

_RFC3339_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class Timestamp:
    """
    Immutable point in time with nanosecond precision and a fixed offset.

    Two timestamps are equal when they denote the same instant.

    Attributes:
        moment: Aware datetime truncated to whole seconds; its tzinfo is the
            offset used when formatting
        nanosecond: Nanoseconds past ``moment`` (0 to 999,999,999)
    """

    moment: datetime
    nanosecond: int = 0

    def __post_init__(self) -> None:
        if self.moment.tzinfo is None:
            raise ValueError("moment must be timezone-aware")
        offset = self.moment.utcoffset()
        if offset is not None and offset % timedelta(minutes=1):
            raise ValueError(f"offset must be a whole number of minutes, got {offset}")
        if self.moment.microsecond:
            raise ValueError("moment must be truncated to whole seconds")
        if not 0 <= self.nanosecond < NANOS_PER_SECOND:
            raise ValueError(
                f"nanosecond must be in [0, {NANOS_PER_SECOND}), got {self.nanosecond}"
            )

    @classmethod
    def parse(cls, text: str) -> Timestamp:
        """
        Parse RFC 3339 text with up to nine fractional digits.

        Raises:
            TimestampParseError: If the text is not a valid timestamp
        """
        match = _RFC3339_PATTERN.match(text)
        if match is None:
            raise TimestampParseError(text)

        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        fraction = match.group(7) or ""
        zone = match.group(8)

        if zone == "Z":
            offset = 0
        else:
            zone_hours, zone_minutes = int(zone[1:3]), int(zone[4:6])
            if zone_hours > 23 or zone_minutes > 59:
                raise TimestampParseError(text)
            offset = zone_hours * 3600 + zone_minutes * 60
            if zone[0] == "-":
                offset = -offset

        tz = UTC if offset == 0 else timezone(timedelta(seconds=offset))
        try:
            moment = datetime(year, month, day, hour, minute, second, tzinfo=tz)
        except ValueError as e:
            raise TimestampParseError(text) from e

        return cls(moment, int(fraction.ljust(9, "0")) if fraction else 0)

    @classmethod
    def from_datetime(cls, value: datetime) -> Timestamp:
        """Create from a datetime; naive values are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return cls(value.replace(microsecond=0), value.microsecond * 1000)

    @classmethod
    def now(cls) -> Timestamp:
        """Current UTC time at the clock's full resolution."""
        seconds, nanos = divmod(time.time_ns(), NANOS_PER_SECOND)
        return cls(datetime.fromtimestamp(seconds, UTC), nanos)

    def to_datetime(self) -> datetime:
        """Convert to datetime, truncating to microseconds."""
        return self.moment.replace(microsecond=self.nanosecond // 1000)

    def format(self) -> str:
        """Render as RFC 3339 text with trimmed fractional seconds."""
        m = self.moment
        text = f"{m.year:04d}-{m.month:02d}-{m.day:02d}T{m.hour:02d}:{m.minute:02d}:{m.second:02d}"
        if self.nanosecond:
            text += "." + f"{self.nanosecond:09d}".rstrip("0")

        offset = m.utcoffset()
        total_minutes = int(offset.total_seconds()) // 60 if offset is not None else 0
        if total_minutes == 0:
            return text + "Z"
        sign = "-" if total_minutes < 0 else "+"
        hours, minutes = divmod(abs(total_minutes), 60)
        return f"{text}{sign}{hours:02d}:{minutes:02d}"

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def _validate(cls, value: Any) -> Timestamp:
        if isinstance(value, Timestamp):
            return value
        if isinstance(value, datetime):
            return cls.from_datetime(value)
        if isinstance(value, str):
            try:
                return cls.parse(value)
            except TimestampParseError as e:
                raise ValueError(str(e)) from e
        raise ValueError(f"expected RFC 3339 string or datetime, got {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.format(),
                when_used="json-unless-none",
            ),
        )


__all__ = ["Timestamp"]
