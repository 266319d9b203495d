"""Error handling for the ASGI entry point.

Maps HTTPError exceptions and unexpected failures raised by handlers
to plain responses. Unexpected failures are logged with their traceback.
"""

import logging
import traceback

from roost.errors import HTTPError
from roost.http.request import Request
from roost.http.response import Response

logger = logging.getLogger("roost.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Turn an HTTPError raised by a handler into its response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = Response(
        body=exc.detail or str(exc.status),
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Log an unexpected exception and answer 500.

    In debug mode the traceback is included in the response body.
    """
    logger.exception("Unhandled error in %s %s", request.method, request.path, exc_info=exc)
    body = "Internal Server Error"
    if debug:
        body = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
