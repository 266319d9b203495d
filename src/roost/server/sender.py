"""Response serialization into ``http.response.start`` / ``http.response.body`` events."""

from roost._internal.asgi import RawHeaders, Send
from roost.http.response import Response

# Statuses that never carry a message body
_BODYLESS = frozenset({204, 304})


def encode_headers(response: Response, body: bytes) -> RawHeaders:
    """Lower-cased, latin-1 encoded header pairs for *response*.

    ``content-type`` comes first and ``content-length`` last; the
    length always describes *body*. A ``Content-Type`` set through
    ``with_header`` replaces ``response.content_type``; a user-set
    ``Content-Length`` is dropped.
    """
    content_type = response.content_type
    extra: RawHeaders = []
    for name, value in response.headers:
        lowered = name.lower()
        if lowered == "content-type":
            content_type = value
        elif lowered != "content-length":
            extra.append((lowered.encode("latin-1"), value.encode("latin-1")))

    encoded: RawHeaders = [(b"content-type", content_type.encode("latin-1")), *extra]
    encoded.append((b"content-length", str(len(body)).encode("latin-1")))
    return encoded


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Emit *response* through the ASGI *send* callable.

    Informational and bodiless statuses (1xx, 204, 304) are sent without
    a body. A ``HEAD`` response advertises the length of the body a
    ``GET`` would have carried but sends none.
    """
    if response.status < 200 or response.status in _BODYLESS:
        body = b""
    else:
        body = response.body_bytes

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response, body),
        }
    )
    await send({"type": "http.response.body", "body": b"" if head else body})
