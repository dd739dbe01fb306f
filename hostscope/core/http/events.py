from __future__ import annotations

import abc
import dataclasses as dc
from collections.abc import Callable
from typing import Protocol

import httpx
from loguru import logger


class RequestHook(Protocol):
    async def __call__(self, request: httpx.Request) -> None: ...

class ResponseHook(Protocol):
    async def __call__(self, response: httpx.Response) -> None: ...

class HttpxMiddleware(abc.ABC):
    @abc.abstractmethod
    async def on_request(self, request: httpx.Request) -> None:
        pass

    @abc.abstractmethod
    async def on_response(
        self,
        response: httpx.Response,
    ) -> None:
        pass


class RequestTracer(HttpxMiddleware):
    '''
    Logs every request the resolver sends and the status that
    came back at TRACE level. Opaque probes never read the body,
    so only the status line is logged.
    '''

    async def on_request(self, request: httpx.Request) -> None:
        logger.trace(f'-> {request.method} {request.url}')

    async def on_response(self, response: httpx.Response) -> None:
        request = response.request
        logger.trace(
            f'<- {response.status_code} {request.method} {request.url}'
        )


@dc.dataclass
class ClientEvents:
    '''
    Manages HTTPX client event hooks for requests and responses, hooks
    are registered directly or through an `HttpxMiddleware`.
    '''
    _request_hooks: list[RequestHook] = dc.field(default_factory=list, init=False)
    _response_hooks: list[ResponseHook] = dc.field(default_factory=list, init=False)

    def register(
        self,
        *,
        response: ResponseHook | None = None,
        request: RequestHook | None = None,
        middleware: HttpxMiddleware | None = None,
    ) -> None:
        if middleware:
            self._request_hooks.append(middleware.on_request)
            self._response_hooks.append(middleware.on_response)

        if response:
            self._response_hooks.append(response)

        if request:
            self._request_hooks.append(request)

    @property
    def request_hooks(self) -> tuple[RequestHook, ...]:
        return tuple(self._request_hooks)

    @property
    def response_hooks(self) -> tuple[ResponseHook, ...]:
        return tuple(self._response_hooks)

    def httpx_args(self) -> dict[str, list[Callable]]:
        '''
        Returns a dictionary suitable for the `event_hooks`
        argument of `httpx.AsyncClient`

        Returns
        -------
        dict[str, list[Callable]]
        '''
        return {
            'request': list(self._request_hooks),
            'response': list(self._response_hooks),
        }


def tracing_events() -> ClientEvents:
    events = ClientEvents()
    events.register(middleware=RequestTracer())
    return events
