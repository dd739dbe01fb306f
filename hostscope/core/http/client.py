import dataclasses as dc

import httpx

from hostscope._version import __version__
from hostscope.core.http.events import ClientEvents

# Failures that mean "nothing usable came back" from a single request.
TransportErrors = (
    httpx.HTTPError,
    httpx.InvalidURL,
    TimeoutError,
)


@dc.dataclass(slots=True)
class ClientOptions:
    """
    Options for configuring the HTTPX AsyncClient.

    The per-strategy deadlines of the resolver are enforced
    separately, these are only the transport level ceilings.
    """

    timeout: int = 10
    max_connections: int = 100
    max_keepalive: int = 20
    keep_alive_expiry: int = 15
    connect_timeout: int = 5
    read_timeout: int = 10
    http2: bool = True
    verify: bool = True
    follow_redirects: bool = False
    headers: dict[str, str] = dc.field(default_factory=dict)

    @property
    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.timeout,
            connect=self.connect_timeout,
            read=self.read_timeout,
        )

    @property
    def httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive,
            keepalive_expiry=self.keep_alive_expiry,
        )


def create_httpx_client(
    *,
    options: ClientOptions | None = None,
    headers: dict[str, str] | None = None,
    events: ClientEvents | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    '''
    Creates the shared AsyncClient every resolver strategy sends through.

    Parameters
    ----------
    options : ClientOptions | None, optional
        by default None
    headers : dict[str, str] | None, optional
        _Merged over `options.headers`_, by default None
    events : ClientEvents | None, optional
        _Request/response hooks to install_, by default None
    transport : httpx.AsyncBaseTransport | None, optional
        _Replaces the network transport (e.g. `httpx.MockTransport`)_, by default None

    Returns
    -------
    httpx.AsyncClient
    '''
    options = options or ClientOptions()
    merged_headers = {**options.headers, **(headers or {})}

    if 'User-Agent' not in merged_headers:
        merged_headers['User-Agent'] = f'hostscope/{__version__}'

    kwargs = {
        'timeout': options.httpx_timeout,
        'headers': merged_headers,
        'limits': options.httpx_limits,
        'http2': options.http2,
        'follow_redirects': options.follow_redirects,
        'verify': options.verify,
    }
    if events:
        kwargs['event_hooks'] = events.httpx_args()

    if transport is not None:
        kwargs['transport'] = transport

    return httpx.AsyncClient(**kwargs)
