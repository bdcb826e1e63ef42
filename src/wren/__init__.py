"""Wren — a typed URL router that plugs into any middleware chain.

Basic usage::

    from wren import Context, Router

    router = Router(prefix="/users")

    @router.get("/:id(number)?verbose(boolean)")
    async def show(ctx: Context):
        return {"id": ctx.params["id"], "verbose": ctx.query.get("verbose", False)}

    await router(Context("GET", "/users/42", "verbose=1"), next)

Custom parameter types::

    from wren import register_type, schema

    register_type("uid", schema.union([schema.number(), "@me"]), r"@me|[-+]?[0-9]+")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "CompileError",
    "ConfigurationError",
    "Context",
    "Middleware",
    "ParseError",
    "Router",
    "RouterConfig",
    "SchemaError",
    "TypeRegistry",
    "UnknownTypeError",
    "ValidationError",
    "WrenError",
    "compose",
    "default_registry",
    "register_type",
    "schema",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from wren.routing.router import Router

        return Router

    if name == "RouterConfig":
        from wren.config import RouterConfig

        return RouterConfig

    if name == "Context":
        from wren.context import Context

        return Context

    if name in ("Middleware", "compose"):
        from wren import middleware as _mw

        return getattr(_mw, name)

    if name in ("TypeRegistry", "default_registry", "register_type"):
        from wren.routing import types as _types

        return getattr(_types, name)

    if name == "schema":
        import wren.schema as _schema

        return _schema

    if name in (
        "CompileError",
        "ConfigurationError",
        "ParseError",
        "SchemaError",
        "UnknownTypeError",
        "ValidationError",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
