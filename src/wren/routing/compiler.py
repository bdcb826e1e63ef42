"""Pattern compilation: RoutePattern -> CompiledRoute.

A compiled route owns everything dispatch needs: the anchored path regex
with one named group per parameter, and the schema for every parameter and
query key, resolved from the type registry at compile time.
"""

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from wren.errors import CompileError
from wren.routing.pattern import LiteralSegment, RoutePattern, parse_pattern
from wren.routing.types import TypeRegistry
from wren.schema import Schema


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route ready for dispatch. Immutable.

    ``response`` is descriptive unless the router validates responses;
    ``body`` is checked against ``ctx.body`` before the handler runs.
    """

    method: str
    pattern: str
    regex: re.Pattern[str]
    handler: Callable[..., Any]
    param_order: tuple[str, ...] = ()
    param_schemas: Mapping[str, Schema] = field(default_factory=lambda: MappingProxyType({}))
    query_names: tuple[str, ...] = ()
    query_schemas: Mapping[str, Schema] = field(default_factory=lambda: MappingProxyType({}))
    required_query: frozenset[str] = frozenset()
    response: Schema | None = None
    body: Schema | None = None
    overrides: tuple[Schema, ...] = ()
    name: str | None = None


def build_regex(pattern: RoutePattern, registry: TypeRegistry) -> re.Pattern[str]:
    """Build the anchored path regex for *pattern*.

    Segments are joined with ``/`` and the result must match the whole
    path, so ``/foo/:id`` never matches ``/foo/1/`` or ``/foo/1/bar``.
    """
    parts: list[str] = []
    for segment in pattern.segments:
        if isinstance(segment, LiteralSegment):
            parts.append(re.escape(segment.value))
        else:
            fragment = registry.resolve(segment.type_name).fragment
            parts.append(f"(?P<{segment.name}>(?:{fragment}))")

    source = "".join(f"/{part}" for part in parts)
    try:
        return re.compile(rf"\A{source}\Z")
    except re.error as exc:
        msg = f"Cannot compile pattern {pattern.source!r}: {exc}"
        raise CompileError(msg) from exc


def compile_pattern(
    pattern: str | RoutePattern,
    registry: TypeRegistry,
    *,
    method: str,
    handler: Callable[..., Any],
    overrides: Sequence[Schema] = (),
    required: Iterable[str] = (),
    response: Schema | None = None,
    body: Schema | None = None,
    name: str | None = None,
) -> CompiledRoute:
    """Compile a pattern into a route.

    *overrides* replaces registry schemas of path parameters positionally
    (first schema -> first parameter). *required* names query items that
    must be present.

    Raises ``UnknownTypeError`` for unregistered types and ``CompileError``
    for inconsistent arguments.
    """
    parsed = parse_pattern(pattern) if isinstance(pattern, str) else pattern
    params = parsed.params

    if len(overrides) > len(params):
        msg = (
            f"{len(overrides)} parameter schemas given but {parsed.source!r} "
            f"has only {len(params)} path parameters"
        )
        raise CompileError(msg)

    required_query = frozenset(required)
    undeclared = required_query - set(parsed.query)
    if undeclared:
        msg = f"Required query parameters {sorted(undeclared)} are not declared in {parsed.source!r}"
        raise CompileError(msg)

    regex = build_regex(parsed, registry)

    param_schemas: dict[str, Schema] = {}
    for index, param in enumerate(params):
        if index < len(overrides):
            param_schemas[param.name] = overrides[index]
        else:
            param_schemas[param.name] = registry.resolve(param.type_name).schema

    query_schemas = {key: registry.resolve(spec.type_name).schema for key, spec in parsed.query.items()}

    return CompiledRoute(
        method=method.upper(),
        pattern=parsed.source,
        regex=regex,
        handler=handler,
        param_order=tuple(p.name for p in params),
        param_schemas=MappingProxyType(param_schemas),
        query_names=tuple(parsed.query),
        query_schemas=MappingProxyType(query_schemas),
        required_query=required_query,
        response=response,
        body=body,
        overrides=tuple(overrides),
        name=name,
    )
