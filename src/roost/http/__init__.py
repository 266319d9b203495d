"""HTTP primitives — immutable Request and Response.

The same types are used by handlers, middleware, the ASGI glue and the
test client. No wrapper translation layer.
"""

from roost.http.headers import Headers
from roost.http.query import QueryParams
from roost.http.request import Request
from roost.http.response import Response, redirect

__all__ = ["Headers", "QueryParams", "Request", "Response", "redirect"]
