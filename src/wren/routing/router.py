"""Router with first-match-wins dispatch.

Routes are kept per HTTP method in registration order, which is also their
priority. Dispatch walks that list, lets the first route whose path matches
handle the request, and otherwise hands off to ``next``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from functools import partialmethod
from typing import Any, Self

from wren._internal.invoke import invoke
from wren._internal.types import Handler, Next, RawQuery
from wren.config import RouterConfig
from wren.context import Context
from wren.errors import ConfigurationError, ParseError, SchemaError, ValidationError
from wren.routing.compiler import CompiledRoute, compile_pattern
from wren.routing.resolve import MatchResult, resolve_source
from wren.routing.types import TypeRegistry, default_registry
from wren.schema import Schema

logger = logging.getLogger("wren.routing")


class Router:
    """Typed URL router usable as middleware.

    Usage::

        router = Router(prefix="/users")

        @router.get("/:uid(uid)")
        async def show(ctx: Context) -> dict:
            return await load_user(ctx.params["uid"])

        router.post("/:uid(uid)/tags?notify(boolean)", add_tag, body=schema.string())

        result = await router(ctx, next)

    Registration is meant to happen at startup. Each registration swaps in
    a new per-method tuple, so a dispatch already in flight keeps walking
    the routes it started with.
    """

    __slots__ = ("_all", "_registry", "_routes", "config")

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        prefix: str | None = None,
        registry: TypeRegistry | None = None,
    ) -> None:
        config = config or RouterConfig()
        if prefix is not None:
            config = replace(config, prefix=prefix)
        self.config: RouterConfig = config
        self._registry = registry if registry is not None else default_registry
        self._routes: dict[str, tuple[CompiledRoute, ...]] = {}
        self._all: tuple[CompiledRoute, ...] = ()

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def routes(self) -> list[CompiledRoute]:
        """All compiled routes in registration order."""
        return list(self._all)

    # -- Registration --

    def _join(self, pattern: str) -> str:
        if pattern and not pattern.startswith(("/", "?")):
            raise ParseError("Path must start with '/'", pattern, 0)
        prefix = self.config.prefix
        base = prefix.rstrip("/")
        if prefix and not base and not pattern.startswith("/"):
            # Root prefix: "" and "?q" still mean the root path
            base = "/"
        return base + pattern

    def _append(self, route: CompiledRoute) -> None:
        self._routes[route.method] = (*self._routes.get(route.method, ()), route)
        self._all = (*self._all, route)
        logger.debug("Registered %s %s -> %s", route.method, route.pattern, route.name)

    def add(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        *,
        response: Schema | None = None,
        params: Sequence[Schema] = (),
        body: Schema | None = None,
        required: Iterable[str] = (),
        name: str | None = None,
    ) -> CompiledRoute:
        """Compile *pattern* (with the router prefix) and register it.

        Raises ``ParseError``, ``UnknownTypeError`` or ``CompileError``
        immediately; nothing is registered in that case.
        """
        route = compile_pattern(
            self._join(pattern),
            self._registry,
            method=method,
            handler=handler,
            overrides=params,
            required=required,
            response=response,
            body=body,
            name=name or getattr(handler, "__name__", None),
        )
        self._append(route)
        return route

    def route(
        self,
        method: str,
        pattern: str,
        handler: Handler | None = None,
        *,
        response: Schema | None = None,
        params: Sequence[Schema] = (),
        body: Schema | None = None,
        required: Iterable[str] = (),
        name: str | None = None,
    ) -> Any:
        """Register a handler for *method* and *pattern*.

        Called with a handler, registers it and returns the router so calls
        chain. Called without one, returns a decorator::

            router.get("/a", show_a).get("/b", show_b)

            @router.get("/c")
            def show_c(ctx): ...
        """
        options: dict[str, Any] = {
            "response": response,
            "params": params,
            "body": body,
            "required": required,
            "name": name,
        }

        if handler is None:

            def decorator(func: Handler) -> Handler:
                self.add(method, pattern, func, **options)
                return func

            return decorator

        self.add(method, pattern, handler, **options)
        return self

    get = partialmethod(route, "GET")
    post = partialmethod(route, "POST")
    put = partialmethod(route, "PUT")
    patch = partialmethod(route, "PATCH")
    delete = partialmethod(route, "DELETE")
    head = partialmethod(route, "HEAD")
    options = partialmethod(route, "OPTIONS")

    def include(self, child: "Router") -> Self:
        """Flatten *child*'s routes into this router under this router's prefix.

        Routes are recompiled against this router's registry. Routes added
        to *child* afterwards are not picked up.
        """
        if child is self:
            msg = "A router cannot include itself"
            raise ConfigurationError(msg)

        for route in child.routes:
            self.add(
                route.method,
                route.pattern,
                route.handler,
                response=route.response,
                params=route.overrides,
                body=route.body,
                required=route.required_query,
                name=route.name,
            )
        return self

    # -- Dispatch --

    def match(self, method: str, path: str, query: RawQuery = None) -> tuple[CompiledRoute, MatchResult] | None:
        """Find the first route for *method* whose path matches.

        Returns ``None`` if nothing matches. Raises ``ValidationError`` if
        the first matching path carries an invalid value; later routes are
        not tried in that case.
        """
        for route in self._routes.get(method.upper(), ()):
            result = resolve_source(path, query, route)
            if result is not None:
                return route, result
        return None

    async def middleware(self, ctx: Context, next: Next) -> Any:
        """Dispatch *ctx* to the first matching route, or to *next*."""
        found = self.match(ctx.method, ctx.path, ctx.query)
        if found is None:
            logger.debug("No route for %s %s, passing to next", ctx.method, ctx.path)
            return await invoke(next)

        route, result = found
        ctx.params = result.params
        ctx.query = result.query
        ctx.route = route

        if route.body is not None:
            ctx.body = _check(route.body, ctx.body, "body")

        value = await invoke(route.handler, ctx)

        if route.response is not None and self.config.validate_responses:
            value = _check(route.response, value, "response")
        return value

    async def __call__(self, ctx: Context, next: Next) -> Any:
        return await self.middleware(ctx, next)

    def __repr__(self) -> str:
        return f"Router(prefix={self.config.prefix!r}, routes={len(self._all)})"


def _check(schema: Schema, value: Any, location: str) -> Any:
    try:
        return schema(value)
    except SchemaError as exc:
        raise ValidationError(
            name=location,
            location=location,  # type: ignore[arg-type]
            expected=exc.expected,
            actual=exc.actual,
        ) from exc
