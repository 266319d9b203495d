"""ASGI handler — translates ASGI scope/messages to roost types.

The only component that touches raw ASGI HTTP messages directly.
Converts the scope to a typed Request, runs the app's dispatch
function, and sends the Response back through ASGI send().
"""

from collections.abc import Awaitable, Callable
from contextvars import Token

from roost._internal.asgi import Receive, Scope, Send
from roost.context import request_var
from roost.errors import HTTPError
from roost.http.request import Request
from roost.http.response import Response
from roost.server.errors import handle_http_error, handle_internal_error
from roost.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: Callable[[Request], Awaitable[Response]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the dispatch pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    try:
        response = await dispatch(request)
        if not isinstance(response, Response):
            msg = (
                f"Route chain for {request.method} {request.path} returned "
                f"{type(response).__name__}, expected Response"
            )
            raise TypeError(msg)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)
    finally:
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")
