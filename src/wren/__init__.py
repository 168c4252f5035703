"""Wren — an embeddable ASGI request-dispatch core.

Compiles route patterns, threads each request through onion-style
middleware, and invokes exactly one handler.

Basic usage::

    from wren import App

    app = App()

    @app.get("/users/:id(\\d+)")
    async def show_user(ctx):
        await ctx.json({"id": ctx.params["id"]})

Serve it with any ASGI server (``uvicorn module:app``).
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CancelToken",
    "ConfigurationError",
    "Context",
    "ContextKey",
    "DoubleNextInvocation",
    "HTTPError",
    "Handler",
    "HeadersAlreadySent",
    "Middleware",
    "MiddlewareChainFailure",
    "Next",
    "PathTraversalError",
    "RouteCompilationError",
    "RouteNotFound",
    "Router",
    "TimeoutFailure",
    "WrenError",
    "compose",
    "get_context",
    "run_chain",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name in ("CancelToken", "Context", "ContextKey", "get_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name == "Router":
        from wren.routing.router import Router

        return Router

    if name in ("Handler", "Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("compose", "run_chain"):
        from wren.middleware import chain as _chain

        return getattr(_chain, name)

    if name in (
        "ConfigurationError",
        "DoubleNextInvocation",
        "HTTPError",
        "HeadersAlreadySent",
        "MiddlewareChainFailure",
        "PathTraversalError",
        "RouteCompilationError",
        "RouteNotFound",
        "TimeoutFailure",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
