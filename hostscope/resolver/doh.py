from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Awaitable, Callable, Iterator
from typing import Final

import dns.rdatatype
import httpx
import msgspec
from loguru import logger

from hostscope.core.config import DohProvider, ResolverSettings, get_settings
from hostscope.core.http import TransportErrors
from hostscope.resolver.models import DNSRecord, RecordKind, elapsed_ms

DNS_JSON: Final[str] = 'application/dns-json'

_RECORD_KINDS: Final[dict[int, RecordKind]] = {
    dns.rdatatype.A: RecordKind.A,
    dns.rdatatype.AAAA: RecordKind.AAAA,
    dns.rdatatype.CNAME: RecordKind.CNAME,
    dns.rdatatype.MX: RecordKind.MX,
    dns.rdatatype.TXT: RecordKind.TXT,
}


class DohAnswer(msgspec.Struct, kw_only=True):
    '''
    One entry of the `Answer` array in a dns-json response.
    '''
    name: str = ''
    type: int
    data: str
    ttl: int | None = msgspec.field(default=None, name='TTL')
    priority: int | None = None


class DohResponse(msgspec.Struct, kw_only=True):
    status: int = msgspec.field(default=0, name='Status')
    answer: list[DohAnswer] = msgspec.field(default_factory=list, name='Answer')


ProviderStrategy = Callable[[str, str], Awaitable[list[DNSRecord]]]


def mx_preference(answer: DohAnswer) -> int | None:
    '''
    Most providers put the MX preference in `data`
    ("10 mail.example.com.") rather than in `priority`.
    '''
    if answer.priority is not None:
        return answer.priority
    head, _, _ = answer.data.partition(' ')
    return int(head) if head.isdigit() else None


def check_record_type(record_type: str) -> str:
    '''
    Canonicalizes a record type tag, e.g. "aaaa" -> "AAAA".

    Raises
    ------
    ValueError
        _If dnspython does not know the type or it cannot be mapped to a `RecordKind`_
    '''
    try:
        rdtype = dns.rdatatype.from_text(record_type.upper())
    except dns.rdatatype.UnknownRdatatype as exc:
        raise ValueError(f'Unknown record type: {record_type}') from exc

    if rdtype not in _RECORD_KINDS:
        supported = ', '.join(kind.value for kind in _RECORD_KINDS.values())
        raise ValueError(
            f'Unsupported record type `{record_type}`, supported types are: {supported}'
        )
    return dns.rdatatype.to_text(rdtype)


class DohResolver:
    '''
    Looks up records through the configured DNS-over-HTTPS
    providers. Providers are asked one at a time in order and the
    first one that returns at least one usable record wins, a
    failing provider is logged and skipped.
    '''

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ResolverSettings | None = None,
    ) -> None:
        self.client: httpx.AsyncClient = client
        self.settings: ResolverSettings = settings or get_settings()

    @property
    def strategies(self) -> list[ProviderStrategy]:
        return [
            functools.partial(self._ask_provider, provider)
            for provider in self.settings.providers
        ]

    async def query_records(
        self,
        hostname: str,
        record_type: str = 'A',
    ) -> list[DNSRecord]:
        '''
        Queries the providers for one record type of a
        canonical hostname.

        Parameters
        ----------
        hostname : str
        record_type : str, optional
            by default 'A'

        Returns
        -------
        list[DNSRecord]
            _Empty when every provider failed or had no answer_

        Raises
        ------
        ValueError
            _If the record type is not supported_
        '''
        record_type = check_record_type(record_type)

        for strategy in self.strategies:
            records = await strategy(hostname, record_type)
            if records:
                return records

        logger.debug(f'No DoH provider had {record_type} records for {hostname}')
        return []

    async def _ask_provider(
        self,
        provider: DohProvider,
        hostname: str,
        record_type: str,
    ) -> list[DNSRecord]:
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self.settings.doh_timeout):
                response = await self.client.get(
                    provider.url,
                    params={'name': hostname, 'type': record_type},
                    headers={'Accept': DNS_JSON},
                )
        except TransportErrors as exc:
            logger.warning(
                f'DoH provider {provider.name} failed for {hostname} ({record_type}): '
                f'{type(exc).__name__} {exc}'
            )
            return []

        if not response.is_success:
            logger.warning(
                f'DoH provider {provider.name} answered HTTP {response.status_code} '
                f'for {hostname} ({record_type})'
            )
            return []

        try:
            payload = msgspec.json.decode(response.content, type=DohResponse)
        except msgspec.DecodeError as exc:
            logger.warning(
                f'DoH provider {provider.name} sent a malformed payload for {hostname}: {exc}'
            )
            return []

        if payload.status:
            logger.debug(
                f'DoH provider {provider.name} returned rcode {payload.status} for {hostname}'
            )

        response_time = elapsed_ms(started)
        return list(self._walk_answers(hostname, payload, response_time))

    def _walk_answers(
        self,
        hostname: str,
        payload: DohResponse,
        response_time: int,
    ) -> Iterator[DNSRecord]:
        for answer in payload.answer:
            kind = _RECORD_KINDS.get(answer.type)
            if kind is None:
                # RRSIG, DNAME etc. are dropped, not fatal
                continue

            yield DNSRecord(
                hostname=hostname,
                address=answer.data,
                kind=kind,
                ttl=answer.ttl,
                priority=mx_preference(answer) if kind is RecordKind.MX else None,
                response_time_ms=response_time,
            )
