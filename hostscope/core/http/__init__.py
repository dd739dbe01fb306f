from hostscope.core.http.client import (
    ClientOptions,
    TransportErrors,
    create_httpx_client,
)
from hostscope.core.http.events import (
    ClientEvents,
    HttpxMiddleware,
    RequestTracer,
    tracing_events,
)

__all__ = [
    "ClientOptions",
    "TransportErrors",
    "create_httpx_client",
    "ClientEvents",
    "HttpxMiddleware",
    "RequestTracer",
    "tracing_events",
]
