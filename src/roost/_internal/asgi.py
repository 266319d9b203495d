"""ASGI 3 callable signatures used by the app, the server glue and the test client.

Application code never touches these; it sees Request and Response.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# One ASGI event dict (``http.request``, ``http.response.start``, ...)
Message: TypeAlias = MutableMapping[str, Any]

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

# Encoded header pairs as they travel in scopes and response.start messages
RawHeaders: TypeAlias = list[tuple[bytes, bytes]]
