"""Request resolution: match a path against one compiled route.

``resolve_source`` distinguishes two failure modes:

- the path does not have the route's shape -> ``None`` (try the next route)
- the path matches but a value fails its schema -> ``ValidationError``
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from wren._internal.types import RawQuery
from wren.errors import SchemaError, ValidationError
from wren.routing.compiler import CompiledRoute
from wren.routing.query import parse_query


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Validated values of a successful match."""

    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)


def resolve_params(route: CompiledRoute, path: str) -> dict[str, Any] | None:
    """Match *path* and validate its parameters. ``None`` if it doesn't match."""
    match = route.regex.match(path)
    if match is None:
        return None

    params: dict[str, Any] = {}
    for name in route.param_order:
        text = unquote(match.group(name))
        schema = route.param_schemas[name]
        try:
            params[name] = schema.parse(text)
        except SchemaError as exc:
            raise ValidationError(name=name, location="path", expected=exc.expected, actual=exc.actual) from exc
    return params


def resolve_query(route: CompiledRoute, raw_query: RawQuery) -> dict[str, Any]:
    """Validate the declared query keys. Undeclared keys are ignored."""
    supplied = parse_query(raw_query)
    query: dict[str, Any] = {}

    for name in route.query_names:
        schema = route.query_schemas[name]
        values = supplied.get(name)

        if not values:
            if name in route.required_query:
                raise ValidationError(
                    name=name,
                    location="query",
                    expected=schema.expected,
                    actual=None,
                    detail="missing required query parameter",
                )
            continue

        try:
            if schema.multiple:
                parse_many = getattr(schema, "parse_many", None)
                if parse_many is None:
                    query[name] = [schema.parse(text) for text in values]
                else:
                    query[name] = parse_many(values)
            else:
                # Repeated scalar keys: last occurrence wins
                query[name] = schema.parse(values[-1])
        except SchemaError as exc:
            raise ValidationError(name=name, location="query", expected=exc.expected, actual=exc.actual) from exc

    return query


def resolve_source(raw_path: str, raw_query: RawQuery, route: CompiledRoute) -> MatchResult | None:
    """Resolve a request path (and query) against *route*.

    If *raw_query* is ``None`` and *raw_path* carries a ``?``, the query
    string is split off the path first.

    Returns ``None`` when the path does not match. Raises
    ``ValidationError`` when it matches but a path or query value is
    invalid.
    """
    if raw_query is None and "?" in raw_path:
        raw_path, _, raw_query = raw_path.partition("?")

    params = resolve_params(route, raw_path)
    if params is None:
        return None
    return MatchResult(params=params, query=resolve_query(route, raw_query))
