from __future__ import annotations

import asyncio
import time

import httpx
from loguru import logger

from hostscope.core.config import ResolverSettings, get_settings
from hostscope.core.http import TransportErrors
from hostscope.resolver.models import DNSRecord, RecordKind, elapsed_ms

PROBE_PATH = '/favicon.ico'


class ConnectivityProber:
    '''
    Knocks on a fixed set of common service ports over http(s)
    to infer that a host is reachable.

    Reachability is inferred, not confirmed: any response at all
    counts, the status and body are never inspected. Every port is
    probed at once and the probe only returns after all of them
    have settled.
    '''

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ResolverSettings | None = None,
    ) -> None:
        self.client: httpx.AsyncClient = client
        self.settings: ResolverSettings = settings or get_settings()

    async def probe(self, hostname: str) -> list[DNSRecord]:
        '''
        Probes every configured port of a canonical hostname.

        Parameters
        ----------
        hostname : str

        Returns
        -------
        list[DNSRecord]
            _One `Connectivity Test` record per port that answered, in port order_
        '''
        outcomes = await asyncio.gather(
            *(self.probe_port(hostname, port) for port in self.settings.ports),
            return_exceptions=True,
        )

        records: list[DNSRecord] = []
        for port, outcome in zip(self.settings.ports, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f'Probe of {hostname}:{port} crashed: {outcome!r}')
                continue
            if outcome is not None:
                records.append(outcome)

        logger.debug(
            f'{len(records)}/{len(self.settings.ports)} ports answered for {hostname}'
        )
        return records

    async def probe_port(self, hostname: str, port: int) -> DNSRecord | None:
        '''
        Tries each protocol for a port in turn, the first
        one that gets any response wins.
        '''
        started = time.perf_counter()
        for scheme in self.settings.protocols_for(port):
            if await self._knock(scheme, hostname, port):
                return DNSRecord(
                    hostname=hostname,
                    address=f'Reachable on {scheme.upper()}:{port}',
                    kind=RecordKind.CONNECTIVITY_TEST,
                    response_time_ms=elapsed_ms(started),
                )
        return None

    async def _knock(self, scheme: str, hostname: str, port: int) -> bool:
        url = f'{scheme}://{hostname}:{port}{PROBE_PATH}'
        try:
            async with asyncio.timeout(self.settings.probe_timeout):
                await self.client.head(url, follow_redirects=False)
        except TransportErrors as exc:
            logger.trace(f'{url} unreachable: {type(exc).__name__}')
            return False
        except Exception as exc:
            # one protocol failing oddly must not cost the port its other protocols
            logger.warning(f'Knock on {url} raised {exc!r}')
            return False
        return True
