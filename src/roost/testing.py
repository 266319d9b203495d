"""In-process test client.

Drives an App through its ASGI interface, with no sockets, and hands
back the same ``Response`` type handlers produce::

    async with TestClient(app) as client:
        response = await client.get("/blog/hello")
        assert response.status == 200
"""

import json as json_module
from typing import Any

from roost._internal.asgi import Message, RawHeaders, Scope
from roost.app import App
from roost.http.headers import Headers
from roost.http.response import Response


def build_scope(method: str, target: str, headers: dict[str, str] | None = None) -> Scope:
    """An HTTP scope for *method* and a ``path?query`` *target*."""
    path, _, query = target.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": list(Headers.from_mapping(headers or {}).raw),
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


class _Exchange:
    """One request/response round trip over ASGI callables."""

    __slots__ = ("body", "headers", "request_body", "request_sent", "status")

    def __init__(self, request_body: bytes) -> None:
        self.request_body = request_body
        self.request_sent = False
        self.status = 500
        self.headers: RawHeaders = []
        self.body = bytearray()

    async def receive(self) -> Message:
        if self.request_sent:
            return {"type": "http.disconnect"}
        self.request_sent = True
        return {"type": "http.request", "body": self.request_body, "more_body": False}

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = list(message.get("headers", ()))
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")

    def response(self) -> Response:
        received = Headers(self.headers)
        extra = tuple(
            (name.decode("latin-1"), value.decode("latin-1"))
            for name, value in self.headers
            if name not in (b"content-type", b"content-length")
        )
        return Response(
            body=bytes(self.body),
            status=self.status,
            content_type=received.get("content-type", "text/html; charset=utf-8"),
            headers=extra,
        )


class TestClient:
    __test__ = False  # Not a pytest test class

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        # Same order as the lifespan protocol: freeze, then startup hooks
        self.app._ensure_frozen()
        await self.app._run_hooks(self.app._startup_hooks)
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.app._run_hooks(self.app._shutdown_hooks)

    async def request(
        self,
        method: str,
        target: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send *method* to *target* (``path?query``) and collect the response."""
        exchange = _Exchange(body or b"")
        await self.app(build_scope(method, target, headers), exchange.receive, exchange.send)
        return exchange.response()

    async def get(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("GET", target, headers=headers)

    async def head(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("HEAD", target, headers=headers)

    async def delete(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("DELETE", target, headers=headers)

    async def post(
        self,
        target: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """POST *body*, or *json* encoded with a JSON content type."""
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            headers = {"content-type": "application/json", **(headers or {})}
        return await self.request("POST", target, headers=headers, body=body)

    async def put(
        self,
        target: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        return await self.request("PUT", target, headers=headers, body=body)

    async def patch(
        self,
        target: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        return await self.request("PATCH", target, headers=headers, body=body)
