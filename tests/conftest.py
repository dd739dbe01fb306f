from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from hostscope.core.config import ResolverSettings, load_settings
from hostscope.core.http import create_httpx_client
from hostscope.resolver.models import DNSRecord, RecordKind

DEFAULT_PORTS = {'http': 80, 'https': 443}


def effective_port(request: httpx.Request) -> int:
    '''
    httpx normalizes default ports away, put them back.
    '''
    return request.url.port or DEFAULT_PORTS[request.url.scheme]


def mock_client(handler: Callable) -> httpx.AsyncClient:
    return create_httpx_client(transport=httpx.MockTransport(handler))


def dns_json(*answers: dict, status: int = 0) -> httpx.Response:
    payload: dict = {'Status': status}
    if answers:
        payload['Answer'] = list(answers)
    return httpx.Response(200, json=payload)


def answer(data: str, rtype: int = 1, ttl: int = 300, **extra) -> dict:
    return {'name': 'example.com.', 'type': rtype, 'TTL': ttl, 'data': data, **extra}


def make_record(
    kind: RecordKind = RecordKind.A,
    address: str = '93.184.216.34',
    hostname: str = 'example.com',
) -> DNSRecord:
    return DNSRecord(hostname=hostname, address=address, kind=kind)


class FakeDoh:
    def __init__(
        self,
        by_type: dict[str, list[DNSRecord]] | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.by_type = by_type or {}
        self.exc = exc
        self.calls: list[tuple[str, str]] = []

    async def query_records(self, hostname: str, record_type: str = 'A') -> list[DNSRecord]:
        self.calls.append((hostname, record_type))
        if self.exc:
            raise self.exc
        return list(self.by_type.get(record_type, []))


class FakeProbe:
    def __init__(
        self,
        records: list[DNSRecord] | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.records = records or []
        self.exc = exc
        self.calls: list[str] = []

    async def probe(self, hostname: str) -> list[DNSRecord]:
        self.calls.append(hostname)
        if self.exc:
            raise self.exc
        return list(self.records)


@pytest.fixture
def fast_settings() -> ResolverSettings:
    return load_settings(doh_timeout=0.1, probe_timeout=0.1, passive_timeout=0.1)
