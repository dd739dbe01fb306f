from __future__ import annotations

import functools
from typing import Any

import msgspec


class DohProvider(msgspec.Struct, frozen=True):
    '''
    A DNS-over-HTTPS endpoint that speaks the `application/dns-json` API.
    '''
    name: str
    url: str


DEFAULT_PROVIDERS: tuple[DohProvider, ...] = (
    DohProvider(name='google', url='https://dns.google/resolve'),
    DohProvider(name='cloudflare', url='https://cloudflare-dns.com/dns-query'),
    DohProvider(name='quad9', url='https://dns.quad9.net:5053/dns-query'),
)

DEFAULT_PORTS: tuple[int, ...] = (80, 443, 8080, 8443, 3000, 5000, 8000, 9000)


class ResolverSettings(msgspec.Struct, frozen=True, kw_only=True):
    '''
    Tunables for the resolution engine. Built once per process
    and never mutated, use `load_settings` to derive a copy.

    Attributes
    ----------
    providers : tuple[DohProvider, ...]
        _DoH endpoints, tried strictly in this order_
    ports : tuple[int, ...]
        _The ports the connectivity prober knocks on_
    https_only_ports : tuple[int, ...]
        _Ports that are only probed over https_
    doh_timeout : float
        _Seconds allowed for one DoH provider request_
    probe_timeout : float
        _Seconds allowed for one protocol attempt on one port_
    passive_timeout : float
        _Seconds allowed for the passive resource load_
    batch_concurrency : int
        _Maximum hostnames resolved at once by a batch_
    '''
    providers: tuple[DohProvider, ...] = DEFAULT_PROVIDERS
    ports: tuple[int, ...] = DEFAULT_PORTS
    https_only_ports: tuple[int, ...] = (443, 8443)
    doh_timeout: float = 10.0
    probe_timeout: float = 5.0
    passive_timeout: float = 3.0
    batch_concurrency: int = 8

    def __post_init__(self) -> None:
        if not self.providers:
            raise ValueError('At least one DoH provider is required')

        for port in (*self.ports, *self.https_only_ports):
            if not 0 < port < 65536:
                raise ValueError(f'Port out of range: {port}')

        for name in ('doh_timeout', 'probe_timeout', 'passive_timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(f'{name} must be positive')

        if self.batch_concurrency < 1:
            raise ValueError('batch_concurrency must be at least 1')

    def protocols_for(self, port: int) -> tuple[str, ...]:
        if port in self.https_only_ports:
            return ('https',)
        return ('http', 'https')


@functools.cache
def get_settings() -> ResolverSettings:
    '''
    The process wide settings instance.

    Returns
    -------
    ResolverSettings
    '''
    return ResolverSettings()


def load_settings(**overrides: Any) -> ResolverSettings:
    '''
    Derives a validated copy of the process settings with
    the given fields replaced.

    Raises
    ------
    ValueError
        _If a field is unknown or a value is out of range_
    '''
    unknown = set(overrides) - set(ResolverSettings.__struct_fields__)
    if unknown:
        raise ValueError(f'Unknown settings: {", ".join(sorted(unknown))}')

    fields = msgspec.structs.asdict(get_settings())
    fields.update(overrides)
    return ResolverSettings(**fields)
