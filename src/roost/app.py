"""Roost application class.

Mutable during setup (route registration, middleware, filesystem routes).
Frozen when the first request is dispatched or the ASGI lifespan starts.
"""

import inspect
import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from roost._internal.asgi import Receive, Scope, Send
from roost._internal.invoke import invoke
from roost._internal.types import Handler
from roost.config import AppConfig
from roost.context import Context
from roost.errors import ConfigurationError
from roost.http.request import Request
from roost.http.response import Response
from roost.middleware.compose import compose
from roost.middleware.protocol import Middleware
from roost.pages.builder import BuildResult, build_routes
from roost.pages.discovery import discover_routes
from roost.pages.templates import create_environment
from roost.pages.types import RouteEntry
from roost.routing.paths import ALL, WILDCARD_PATH, merge_paths, normalize_method
from roost.routing.route import Route, describe_handler
from roost.routing.router import Router
from roost.server.handler import handle_request

logger = logging.getLogger("roost.routing")

_SLASHES_RE = re.compile(r"/+")

Fallback = Callable[[Request], Any]


@dataclass(frozen=True, slots=True)
class _CachedChain:
    """A composed handler chain memoized for one ``(method, path)``."""

    handler: Handler
    params: Mapping[str, str]


def _not_found(request: Request) -> Response:
    return Response("Not found", status=404, content_type="text/plain; charset=utf-8")


class App:
    """The roost application.

    Owns the router, exposes the registration API and dispatches
    requests. Mutable during setup; frozen on first dispatch.

    Thread safety:
        The setup phase is single-threaded (module import, mount calls).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the router. Route cache reads, recency updates
        and evictions happen under a second lock; matching and composing
        run outside it, so concurrent first requests for the same key
        both compose and the last writer wins with an equivalent chain.
    """

    __slots__ = (
        "_cache_lock",
        "_dispatch",
        "_freeze_lock",
        "_frozen",
        "_registered",
        "_route_cache",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._registered: set[tuple[str, str]] = set()
        self._route_cache: OrderedDict[tuple[str, str], _CachedChain] = OrderedDict()
        self._cache_lock: threading.Lock = threading.Lock()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._dispatch: Callable[[Request], Awaitable[Response]] | None = None

    # -- Route registration --

    def add_route(self, method: str, path: str, handler: Handler) -> Route:
        """Register *handler* for *method* on ``base_path + path``.

        Registering the same ``(method, pattern)`` twice logs a warning
        and keeps both, the first one running first. With
        ``strict_routes`` it raises ``ConfigurationError`` instead.
        """
        self._check_not_frozen()
        method = normalize_method(method)
        pattern = merge_paths(self.config.base_path, path)

        key = (method, pattern)
        if key in self._registered:
            if self.config.strict_routes:
                msg = f"Duplicate route {method} {pattern}"
                raise ConfigurationError(msg)
            logger.warning(
                "Duplicate route %s %s (%s); the earlier registration runs first",
                method,
                pattern,
                describe_handler(handler),
            )
        self._registered.add(key)

        route = self._router.add(method, pattern, handler)
        logger.debug("Added %s %s -> %s", route.method, route.pattern, describe_handler(handler))
        return route

    def get(self, path: str, handler: Handler) -> "App":
        self.add_route("GET", path, handler)
        return self

    def post(self, path: str, handler: Handler) -> "App":
        self.add_route("POST", path, handler)
        return self

    def put(self, path: str, handler: Handler) -> "App":
        self.add_route("PUT", path, handler)
        return self

    def patch(self, path: str, handler: Handler) -> "App":
        self.add_route("PATCH", path, handler)
        return self

    def delete(self, path: str, handler: Handler) -> "App":
        self.add_route("DELETE", path, handler)
        return self

    def head(self, path: str, handler: Handler) -> "App":
        self.add_route("HEAD", path, handler)
        return self

    def all(self, path: str, handler: Handler) -> "App":
        """Register *handler* for every method on *path*."""
        self.add_route(ALL, path, handler)
        return self

    def use(self, middleware: Middleware) -> "App":
        """Register global middleware, run for every request.

        Global middleware is not prefixed with ``base_path``. It runs at
        its registration position relative to other matching routes.
        """
        self._check_not_frozen()
        self._router.add(ALL, WILDCARD_PATH, middleware)
        logger.debug("Added middleware %s", describe_handler(middleware))
        return self

    def route(
        self,
        path: str,
        *,
        methods: Sequence[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL pattern. Use ``:name`` for a segment parameter and
                ``:name*`` for a multi-segment one.
            methods: HTTP methods. Defaults to ``["GET"]``.

        Usage::

            @app.route("/users/:id", methods=["GET", "POST"])
            async def user(ctx):
                return Response(ctx.params["id"])
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ("GET",):
                self.add_route(method, path, func)
            return func

        return decorator

    # -- Route trees --

    def build_routes(self, entries: Iterable[RouteEntry]) -> BuildResult:
        """Assemble and register the route tree described by *entries*."""
        self._check_not_frozen()
        return build_routes(self, entries)

    def mount_routes(self, routes_dir: str | Path) -> BuildResult:
        """Discover route files under *routes_dir* and register them.

        Usage::

            app = App()
            app.mount_routes("routes")
        """
        self._check_not_frozen()
        env = create_environment(
            routes_dir,
            autoescape=self.config.autoescape,
            debug=self.config.debug,
        )
        entries = discover_routes(routes_dir, ignore=self.config.ignore_patterns, env=env)
        result = build_routes(self, entries)
        logger.debug("Mounted %d routes from %s", len(result.routes), routes_dir)
        return result

    @property
    def router(self) -> Router:
        return self._router

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Dispatch --

    def handler(self, fallback: Fallback | None = None) -> Callable[[Request], Awaitable[Response]]:
        """Return the request handler serving every registered route.

        Matching handlers are composed into one chain, memoized per
        ``(method, path)``. When nothing matches, *fallback* answers
        (default: a plain ``404 Not found``). Freezes the app.
        """
        self._ensure_frozen()
        fallback = fallback or _not_found

        async def dispatch(request: Request) -> Response:
            async def terminal() -> Any:
                return await invoke(fallback, request)

            path = _SLASHES_RE.sub("/", request.path)
            chain = self._lookup(request.method, path)
            if chain is None:
                return await terminal()

            ctx = Context(request, self.config, terminal, params=chain.params)
            return await chain.handler(ctx)

        return dispatch

    def _default_dispatch(self) -> Callable[[Request], Awaitable[Response]]:
        self._dispatch = self.handler()
        return self._dispatch

    def _lookup(self, method: str, path: str) -> _CachedChain | None:
        key = (method, path)
        with self._cache_lock:
            cached = self._route_cache.get(key)
            if cached is not None:
                self._route_cache.move_to_end(key)
                return cached

        match = self._router.match(method, path)
        if not match:
            return None

        chain = _CachedChain(handler=compose(match.handlers), params=match.params)
        size = self.config.route_cache_size
        if size:
            with self._cache_lock:
                self._route_cache[key] = chain
                while len(self._route_cache) > size:
                    self._route_cache.popitem(last=False)
        return chain

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            dispatch=self._dispatch or self._default_dispatch(),
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self._run_hooks(self._startup_hooks)
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self._run_hooks(self._shutdown_hooks)
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _run_hooks(self, hooks: Sequence[Callable[..., Any]]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking.

        Several ASGI worker threads may dispatch their first request
        concurrently; exactly one of them compiles the router.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._frozen = True
            logger.debug("Route table frozen with %d registrations", len(self._router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and middleware before the first request."
            )
            raise RuntimeError(msg)
