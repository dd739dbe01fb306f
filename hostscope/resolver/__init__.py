'''
**hostscope.resolver**
-------------

The hostname resolution engine: DNS-over-HTTPS lookups, connectivity
probing and a passive resolution probe, composed by `HostnameResolver`.
'''
from hostscope.resolver.connectivity import ConnectivityProber
from hostscope.resolver.doh import DohResolver
from hostscope.resolver.engine import (
    HostnameResolver,
    resolve,
    resolve_batch,
    reverse_lookup,
)
from hostscope.resolver.hostnames import is_valid_hostname, is_valid_ip, normalize
from hostscope.resolver.models import DNSRecord, RecordKind, ResolverResult
from hostscope.resolver.passive import PassiveProbe

__all__ = [
    "ConnectivityProber",
    "DohResolver",
    "HostnameResolver",
    "resolve",
    "resolve_batch",
    "reverse_lookup",
    "is_valid_hostname",
    "is_valid_ip",
    "normalize",
    "DNSRecord",
    "RecordKind",
    "ResolverResult",
    "PassiveProbe",
]
