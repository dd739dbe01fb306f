from hostscope._version import __version__
from hostscope.core._logging import disable_lib_logger
from hostscope.resolver import (
    DNSRecord,
    HostnameResolver,
    RecordKind,
    ResolverResult,
    resolve,
    resolve_batch,
    reverse_lookup,
)

disable_lib_logger()

__all__ = [
    "__version__",
    "DNSRecord",
    "HostnameResolver",
    "RecordKind",
    "ResolverResult",
    "resolve",
    "resolve_batch",
    "reverse_lookup",
]
