"""``httpx.MockTransport`` wiring for ``ResilientClient`` factories."""

from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx

from sbomgraph.adapters.http_resilience import ResilientClient
from sbomgraph.config.http_resilience import ResilienceConfig  # noqa: TC001

type Handler = Callable[[httpx.Request], httpx.Response]


def make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=resilience.request_headers(),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


class RecordingHandler:
    """Answer requests from a ``{path: (status, json)}`` table and remember every request."""

    def __init__(self, routes: dict[str, tuple[int, object]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, payload = route
        return httpx.Response(status, json=payload)
