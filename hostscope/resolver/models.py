from __future__ import annotations

import dataclasses as dc
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import msgspec


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_ms(started: float) -> int:
    '''
    Whole milliseconds since a `time.perf_counter()` reading.
    '''
    return max(0, round((time.perf_counter() - started) * 1000))


class RecordKind(str, Enum):
    '''
    How the `address` of a `DNSRecord` is to be read. Only the
    DNS kinds carry record data, the probe kinds carry a
    human readable description.
    '''
    A = 'A'
    AAAA = 'AAAA'
    CNAME = 'CNAME'
    MX = 'MX'
    TXT = 'TXT'
    BROWSER_RESOLUTION = 'Browser Resolution'
    CONNECTIVITY_TEST = 'Connectivity Test'

    @property
    def is_dns(self) -> bool:
        return self not in (
            RecordKind.BROWSER_RESOLUTION,
            RecordKind.CONNECTIVITY_TEST,
        )


@dc.dataclass(frozen=True, slots=True, kw_only=True)
class DNSRecord:
    '''
    One resolved fact about a hostname.

    Attributes
    ----------
    hostname : str
        _The canonical hostname that was queried_
    address : str
        _Record data for DNS kinds, a description for probe kinds_
    kind : RecordKind
    ttl : int | None
    priority : int | None
        _Only set for MX records_
    response_time_ms : int
    observed_at : datetime
    '''
    hostname: str
    address: str
    kind: RecordKind
    response_time_ms: int = 0
    ttl: int | None = None
    priority: int | None = None
    observed_at: datetime = dc.field(default_factory=utcnow)

    @property
    def is_address(self) -> bool:
        return self.kind in (RecordKind.A, RecordKind.AAAA)


@dc.dataclass(frozen=True, slots=True, kw_only=True)
class ResolverResult:
    '''
    The outcome of one resolution attempt. `error` is set only
    when `records` is empty.
    '''
    hostname: str
    records: tuple[DNSRecord, ...] = ()
    error: str | None = None
    methods_attempted: tuple[str, ...] = ()
    total_time_ms: int = 0
    observed_at: datetime = dc.field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.error is not None and self.records:
            raise ValueError('A result cannot carry both records and an error')

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def addresses(self) -> list[str]:
        return [record.address for record in self.records if record.is_address]

    def by_kind(self, kind: RecordKind) -> list[DNSRecord]:
        return [record for record in self.records if record.kind is kind]

    def to_dict(self) -> dict[str, Any]:
        # JSON shaped, tuples come back as lists
        return msgspec.json.decode(msgspec.json.encode(self))

    def to_json(self, *, indent: int = 2) -> str:
        encoded = msgspec.json.encode(self)
        return msgspec.json.format(encoded, indent=indent).decode()
