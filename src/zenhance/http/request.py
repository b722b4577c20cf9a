"""Immutable HTTP request.

Frozen metadata with async body access. The parameter map is attached
once per request through the private cache and never rebuilt.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Any

from zenhance._internal.asgi import Receive
from zenhance.http.headers import Headers
from zenhance.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``module`` and ``route_params`` are set when an explicit route table
    entry rewrites the request; ``path`` then holds the rewritten logical
    path and ``original_path`` the path the client asked for.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    original_path: str | None = None
    module: str | None = None
    route_params: dict[str, str] = field(default_factory=dict)

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache shared by every rewritten copy of this request
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Parameter map --

    @property
    def parameters(self) -> dict[str, str] | None:
        """The merged parameter map, or ``None`` before dispatch builds it."""
        return self._cache.get("_parameters")

    def attach_parameters(self, parameters: dict[str, str]) -> dict[str, str]:
        """Attach *parameters* unless a map already exists; return the active map."""
        return self._cache.setdefault("_parameters", parameters)

    # -- Rewriting --

    def rewritten(
        self,
        path: str,
        *,
        module: str | None = None,
        route_params: dict[str, str] | None = None,
    ) -> Request:
        """Return a copy dispatched as *path*, sharing this request's cache."""
        return replace(
            self,
            path=path,
            original_path=self.original_path or self.path,
            module=module,
            route_params=dict(route_params or {}),
        )

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request URL (original path + query string)."""
        path = self.original_path or self.path
        if self.query.raw:
            return f"{path}?{self.query.raw.decode('latin-1')}"
        return path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first call."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncIterator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        raw = await self.body()
        return raw.decode("utf-8")

    async def json(self) -> Any:
        import json as json_module

        return json_module.loads(await self.body())

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
