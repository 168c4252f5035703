"""Wren application class.

Mutable during setup (route registration, middleware, lifespan hooks).
Frozen at runtime when ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.middleware.protocol import Handler, Middleware
from wren.middleware.timeout import RequestTimeout
from wren.routing.route import CompiledRoute
from wren.routing.router import HTTP_METHODS, Router
from wren.server.handler import handle_request
from wren.templating import Templates

logger = logging.getLogger("wren.server")


class App:
    """The wren application.

    Routes are compiled the moment they are registered, so a malformed
    pattern raises ``RouteCompilationError`` at import time::

        app = App()
        app.use(RequestId())

        @app.get("/users/:id(\\d+)")
        async def show_user(ctx):
            await ctx.json({"id": ctx.params["id"]})

        app.post("/users", require_admin, create_user)

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one thread
        finalizes the app, even if several workers call ``__call__()``
        concurrently on the first request.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_templates",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._middleware: tuple[Middleware, ...] = ()
        self._templates: Templates | None = None

    # -- Route registration --

    def add(self, method: str, path: str, *handlers: Any) -> CompiledRoute:
        """Register ``handlers[:-1]`` as route middleware and ``handlers[-1]`` as handler."""
        self._check_not_frozen()
        if not handlers:
            msg = f"Route {method.upper()} {path!r} needs a handler."
            raise ConfigurationError(msg)
        *middleware, handler = handlers
        return self._router.add(method, path, handler, middleware)

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] = ("GET",),
        middleware: Iterable[Middleware] = (),
    ) -> Callable[[Handler], Handler]:
        """Register a handler for one or more methods via decorator.

        Args:
            path: Route pattern. ``:name``, ``:name(regex)`` and a final ``*``.
            methods: HTTP methods. Defaults to ``("GET",)``.
            middleware: Route-local middleware, run after the global chain.
        """
        methods = tuple(m.upper() for m in methods)
        for method in methods:
            if method not in HTTP_METHODS:
                msg = f"Unsupported HTTP method {method!r} for route {path!r}."
                raise ConfigurationError(msg)
        route_middleware = tuple(middleware)

        def decorator(func: Handler) -> Handler:
            for method in methods:
                self.add(method, path, *route_middleware, func)
            return func

        return decorator

    def _method(self, method: str, path: str, handlers: tuple[Any, ...]) -> Any:
        if handlers:
            return self.add(method, path, *handlers)
        return self.route(path, methods=(method,))

    def get(self, path: str, *handlers: Any) -> Any:
        """``app.get(path, *middleware, handler)``, or ``@app.get(path)``."""
        return self._method("GET", path, handlers)

    def post(self, path: str, *handlers: Any) -> Any:
        return self._method("POST", path, handlers)

    def put(self, path: str, *handlers: Any) -> Any:
        return self._method("PUT", path, handlers)

    def delete(self, path: str, *handlers: Any) -> Any:
        return self._method("DELETE", path, handlers)

    def patch(self, path: str, *handlers: Any) -> Any:
        return self._method("PATCH", path, handlers)

    def options(self, path: str, *handlers: Any) -> Any:
        return self._method("OPTIONS", path, handlers)

    def head(self, path: str, *handlers: Any) -> Any:
        return self._method("HEAD", path, handlers)

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """Registered routes in match order."""
        return self._router.routes

    # -- Middleware --

    def use(self, *middleware: Middleware) -> None:
        """Append global middleware. Runs for every request, matched or not."""
        self._check_not_frozen()
        self._middleware_list.extend(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async function to run at ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async function to run at ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly and hands HTTP scopes to the
        request handler. Other scope types are ignored.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            config=self.config,
            templates=self._templates,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                try:
                    await self.shutdown()
                except Exception as exc:
                    logger.exception("Shutdown failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Capture middleware and template state. Hold ``_freeze_lock``."""
        middleware = list(self._middleware_list)
        if self.config.request_timeout is not None:
            middleware.insert(0, RequestTimeout(self.config.request_timeout))
        self._middleware = tuple(middleware)
        self._templates = Templates(self.config.template_dir, autoescape=self.config.autoescape)
        self._frozen = True
        logger.debug(
            "App frozen: %d routes, %d global middleware",
            len(self._router),
            len(self._middleware),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and hooks before the first request."
            )
            raise ConfigurationError(msg)
