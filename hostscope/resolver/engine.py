from __future__ import annotations

import asyncio
import contextlib
import dataclasses as dc
import time
from collections.abc import AsyncIterator, Sequence
from typing import Final, Protocol, Self

import httpx
from loguru import logger

from hostscope.core.config import ResolverSettings, get_settings
from hostscope.core.http import ClientOptions, create_httpx_client, tracing_events
from hostscope.resolver.connectivity import ConnectivityProber
from hostscope.resolver.doh import DohResolver
from hostscope.resolver.hostnames import is_valid_hostname, is_valid_ip, normalize
from hostscope.resolver.models import DNSRecord, ResolverResult, elapsed_ms
from hostscope.resolver.passive import PassiveProbe

METHOD_DOH: Final[str] = 'DNS-over-HTTPS'
METHOD_PASSIVE: Final[str] = 'Browser Resolution'
METHOD_CONNECTIVITY: Final[str] = 'Connectivity Test'
METHOD_REVERSE_UNSUPPORTED: Final[str] = 'Browser Limitation'

INVALID_HOSTNAME: Final[str] = 'Invalid hostname format'
INVALID_IP: Final[str] = 'Invalid IP address format'
REVERSE_UNSUPPORTED: Final[str] = (
    'Reverse DNS lookup is not supported in this execution environment: '
    'only application-level HTTP(S) transport is available, PTR queries cannot be made'
)


def unresolved_message(hostname: str) -> str:
    return (
        f'Unable to resolve hostname: {hostname}. '
        'The hostname may not exist or may not be reachable.'
    )


class RecordSource(Protocol):
    async def query_records(self, hostname: str, record_type: str = 'A') -> list[DNSRecord]: ...


class HostProbe(Protocol):
    async def probe(self, hostname: str) -> list[DNSRecord]: ...


@dc.dataclass(slots=True)
class _Attempt:
    '''
    Bookkeeping for a single `resolve` call.
    '''
    hostname: str
    started: float = dc.field(default_factory=time.perf_counter)
    records: list[DNSRecord] = dc.field(default_factory=list)
    methods: list[str] = dc.field(default_factory=list)

    @contextlib.asynccontextmanager
    async def strategy(self, method: str) -> AsyncIterator[None]:
        '''
        Records that `method` was invoked and contains any failure
        it raises, a failing strategy just contributes nothing.
        '''
        self.methods.append(method)
        try:
            yield
        except Exception as exc:
            logger.warning(f'{method} failed for {self.hostname}: {exc!r}')

    def finish(self, *, error: str | None = None) -> ResolverResult:
        records = () if error else tuple(self.records)
        if not records and error is None:
            error = unresolved_message(self.hostname)

        return ResolverResult(
            hostname=self.hostname,
            records=records,
            error=error,
            methods_attempted=tuple(self.methods),
            total_time_ms=elapsed_ms(self.started),
        )


def _rejected(name: str, error: str, started: float) -> ResolverResult:
    return ResolverResult(
        hostname=name,
        error=error,
        total_time_ms=elapsed_ms(started),
    )


@dc.dataclass(slots=True)
class HostnameResolver:
    '''
    Runs the resolution strategies for a hostname in order:
    DoH A then AAAA, the passive probe only when DoH found nothing,
    and the connectivity probe unconditionally. Produces one
    `ResolverResult` with the trail of strategies that ran.
    '''
    doh: RecordSource
    passive: HostProbe
    connectivity: HostProbe
    settings: ResolverSettings = dc.field(default_factory=get_settings)

    @classmethod
    def create(
        cls,
        client: httpx.AsyncClient,
        *,
        settings: ResolverSettings | None = None,
    ) -> Self:
        settings = settings or get_settings()
        return cls(
            doh=DohResolver(client, settings),
            passive=PassiveProbe(client, settings),
            connectivity=ConnectivityProber(client, settings),
            settings=settings,
        )

    async def resolve(self, raw_hostname: str) -> ResolverResult:
        '''
        Resolves one user supplied hostname. Never raises, every
        failure is reported through `ResolverResult.error`.

        Parameters
        ----------
        raw_hostname : str
            _Anything from "example.com" to "HTTPS://Example.com:8443/x"_

        Returns
        -------
        ResolverResult
        '''
        started = time.perf_counter()
        hostname = normalize(raw_hostname)
        if not is_valid_hostname(hostname):
            logger.info(f'Rejected hostname {raw_hostname!r}')
            return _rejected(hostname, INVALID_HOSTNAME, started)

        attempt = _Attempt(hostname=hostname, started=started)
        try:
            await self._run(attempt)
        except Exception as exc:
            logger.exception(f'Resolution of {hostname} failed unexpectedly')
            return attempt.finish(error=str(exc) or type(exc).__name__)

        result = attempt.finish()
        logger.info(
            f'{hostname}: {len(result.records)} records via '
            f'{", ".join(result.methods_attempted)} in {result.total_time_ms}ms'
        )
        return result

    async def _run(self, attempt: _Attempt) -> None:
        hostname = attempt.hostname

        async with attempt.strategy(METHOD_DOH):
            for record_type in ('A', 'AAAA'):
                attempt.records.extend(
                    await self.doh.query_records(hostname, record_type)
                )

        if not attempt.records:
            async with attempt.strategy(METHOD_PASSIVE):
                attempt.records.extend(await self.passive.probe(hostname))

        async with attempt.strategy(METHOD_CONNECTIVITY):
            attempt.records.extend(await self.connectivity.probe(hostname))

    async def resolve_batch(self, raw_hostnames: Sequence[str]) -> list[ResolverResult]:
        '''
        Resolves many hostnames concurrently, at most
        `settings.batch_concurrency` at a time. The output has one
        result per input, in input order.
        '''
        gate = asyncio.Semaphore(self.settings.batch_concurrency)

        async def _gated(raw: str) -> ResolverResult:
            async with gate:
                return await self.resolve(raw)

        started = time.perf_counter()
        outcomes = await asyncio.gather(
            *(_gated(raw) for raw in raw_hostnames),
            return_exceptions=True,
        )

        results: list[ResolverResult] = []
        for raw, outcome in zip(raw_hostnames, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f'Batch entry {raw!r} crashed: {outcome!r}')
                outcome = _rejected(
                    normalize(raw),
                    str(outcome) or type(outcome).__name__,
                    started,
                )
            results.append(outcome)
        return results

    async def reverse_lookup(self, ip: str) -> ResolverResult:
        return await reverse_lookup(ip)


@contextlib.asynccontextmanager
async def _resolver_session(
    client: httpx.AsyncClient | None,
    settings: ResolverSettings | None,
) -> AsyncIterator[HostnameResolver]:
    if client is not None:
        yield HostnameResolver.create(client, settings=settings)
        return

    owned_client = create_httpx_client(options=ClientOptions(), events=tracing_events())
    async with owned_client as owned:
        yield HostnameResolver.create(owned, settings=settings)


async def resolve(
    hostname: str,
    *,
    client: httpx.AsyncClient | None = None,
    settings: ResolverSettings | None = None,
) -> ResolverResult:
    '''
    Resolves a single hostname.

    Parameters
    ----------
    hostname : str
    client : httpx.AsyncClient | None
        _Reused when given, otherwise a client is opened for this call_
    settings : ResolverSettings | None

    Returns
    -------
    ResolverResult
    '''
    async with _resolver_session(client, settings) as resolver:
        return await resolver.resolve(hostname)


async def resolve_batch(
    hostnames: Sequence[str],
    *,
    client: httpx.AsyncClient | None = None,
    settings: ResolverSettings | None = None,
) -> list[ResolverResult]:
    async with _resolver_session(client, settings) as resolver:
        return await resolver.resolve_batch(hostnames)


async def reverse_lookup(ip: str) -> ResolverResult:
    '''
    Reverse DNS is permanently unsupported here, there is no way
    to issue PTR queries over the available transport. Only the
    shape of `ip` is checked, the result always carries an error
    and callers should not retry.

    Parameters
    ----------
    ip : str

    Returns
    -------
    ResolverResult
    '''
    started = time.perf_counter()
    if not is_valid_ip(ip):
        return _rejected(ip, INVALID_IP, started)

    logger.debug(f'Reverse lookup of {ip} refused, unsupported')
    return ResolverResult(
        hostname=ip,
        error=REVERSE_UNSUPPORTED,
        methods_attempted=(METHOD_REVERSE_UNSUPPORTED,),
        total_time_ms=elapsed_ms(started),
    )
