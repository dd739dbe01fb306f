import asyncio
import time

import httpx
from loguru import logger

from hostscope.core.config import ResolverSettings, get_settings
from hostscope.core.http import TransportErrors
from hostscope.resolver.models import DNSRecord, RecordKind, elapsed_ms

PLACEHOLDER_ADDRESS = 'Hostname resolved (IP address not observable by this probe)'


class PassiveProbe:
    '''
    Last resort signal that a name resolves at all. Loads the
    site's favicon once and, if it loads, reports that the name
    resolved without ever claiming an address.
    '''

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ResolverSettings | None = None,
    ) -> None:
        self.client: httpx.AsyncClient = client
        self.settings: ResolverSettings = settings or get_settings()

    async def probe(self, hostname: str) -> list[DNSRecord]:
        started = time.perf_counter()
        # cache buster, same as a fresh <img> load
        url = f'https://{hostname}/favicon.ico'
        params = {str(time.time_ns() // 1_000_000): ''}
        try:
            async with asyncio.timeout(self.settings.passive_timeout):
                response = await self.client.get(
                    url, params=params, follow_redirects=True
                )
        except TransportErrors as exc:
            logger.debug(f'Passive probe of {hostname} failed: {type(exc).__name__}')
            return []

        if not response.is_success:
            logger.debug(
                f'Passive probe of {hostname} got HTTP {response.status_code}'
            )
            return []

        return [
            DNSRecord(
                hostname=hostname,
                address=PLACEHOLDER_ADDRESS,
                kind=RecordKind.BROWSER_RESOLUTION,
                response_time_ms=elapsed_ms(started),
            )
        ]
