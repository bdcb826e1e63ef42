"""Route pattern parsing.

Turns a pattern string into literal segments, parameter descriptors, and
query descriptors::

    /users/:uid(uid)/posts?page(number)&tag
    ^^^^^^ ^^^^^^^^^ ^^^^^ ^^^^^^^^^^^^ ^^^
    literal  param  literal   query     query (string)

Nothing here knows about types beyond their names; unknown type names are
rejected when the pattern is compiled.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from wren.errors import ParseError

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

DEFAULT_TYPE = "string"


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """A named, typed parameter.

    Path parameters are never optional: a missing segment means the route
    does not match. Query parameters are optional unless the route
    registration requires them.
    """

    name: str
    type_name: str = DEFAULT_TYPE
    optional: bool = False


@dataclass(frozen=True, slots=True)
class LiteralSegment:
    """A path segment matched verbatim. May be empty (``/foo/`` ends in one)."""

    value: str


type Segment = LiteralSegment | ParamSpec


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A parsed route pattern. Immutable."""

    source: str
    segments: tuple[Segment, ...]
    query: Mapping[str, ParamSpec] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def params(self) -> tuple[ParamSpec, ...]:
        """Path parameters in left-to-right order."""
        return tuple(s for s in self.segments if isinstance(s, ParamSpec))


def _parse_item(text: str, offset: int, pattern: str) -> tuple[str, str]:
    """Split ``name`` or ``name(type)`` into its parts.

    *offset* is the position of *text* inside *pattern*, for error messages.
    """
    open_at = text.find("(")
    close_at = text.find(")")

    if open_at == -1:
        if close_at != -1:
            raise ParseError("Unbalanced ')'", pattern, offset + close_at)
        name, type_name = text, DEFAULT_TYPE
    else:
        name = text[:open_at]
        if close_at == -1:
            raise ParseError("Unterminated type annotation", pattern, offset + open_at)
        if close_at < open_at:
            raise ParseError("Unbalanced ')'", pattern, offset + close_at)
        type_name = text[open_at + 1 : close_at]
        if "(" in type_name:
            nested_at = open_at + 1 + type_name.index("(")
            raise ParseError("Nested brackets in type annotation", pattern, offset + nested_at)
        if close_at != len(text) - 1:
            raise ParseError("Unexpected text after type annotation", pattern, offset + close_at + 1)
        if not _IDENT_RE.fullmatch(type_name):
            raise ParseError(f"Invalid type name {type_name!r}", pattern, offset + open_at + 1)

    if not name:
        raise ParseError("Unterminated parameter name", pattern, offset)
    if not _IDENT_RE.fullmatch(name):
        raise ParseError(f"Invalid parameter name {name!r}", pattern, offset)
    return name, type_name


def _parse_path(path: str, pattern: str) -> tuple[Segment, ...]:
    if not path:
        return ()
    if not path.startswith("/"):
        raise ParseError("Path must start with '/'", pattern, 0)

    segments: list[Segment] = []
    seen: set[str] = set()
    offset = 1

    for part in path[1:].split("/"):
        if part.startswith(":"):
            name, type_name = _parse_item(part[1:], offset + 1, pattern)
            if name in seen:
                raise ParseError(f"Duplicate path parameter {name!r}", pattern, offset)
            seen.add(name)
            segments.append(ParamSpec(name=name, type_name=type_name, optional=False))
        else:
            segments.append(LiteralSegment(part))
        offset += len(part) + 1

    return tuple(segments)


def _parse_query(query: str, offset: int, pattern: str) -> dict[str, ParamSpec]:
    items: dict[str, ParamSpec] = {}

    for part in query.split("&"):
        if not part:
            raise ParseError("Empty query item", pattern, offset)
        name, type_name = _parse_item(part, offset, pattern)
        if name in items:
            raise ParseError(f"Duplicate query parameter {name!r}", pattern, offset)
        items[name] = ParamSpec(name=name, type_name=type_name, optional=True)
        offset += len(part) + 1

    return items


def parse_pattern(pattern: str) -> RoutePattern:
    """Parse a route pattern string.

    Examples::

        "/foo"                     -> [LiteralSegment("foo")]
        "/foo/:id"                 -> [LiteralSegment("foo"), ParamSpec("id", "string")]
        "/foo/:id(number)?q&n(number)"
                                   -> path param id:number, query q:string, n:number

    Raises ``ParseError`` on malformed input.
    """
    path, sep, query = pattern.partition("?")
    segments = _parse_path(path, pattern)
    items = _parse_query(query, len(path) + 1, pattern) if sep else {}
    return RoutePattern(source=pattern, segments=segments, query=MappingProxyType(items))
