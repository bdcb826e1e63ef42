"""Routing: pattern parsing, compilation and first-match dispatch.

Patterns are parsed and compiled once at registration; dispatch only runs
the compiled regexes and schemas.
"""

from wren.routing.compiler import CompiledRoute, compile_pattern
from wren.routing.pattern import LiteralSegment, ParamSpec, RoutePattern, parse_pattern
from wren.routing.resolve import MatchResult, resolve_source
from wren.routing.router import Router
from wren.routing.types import TypeDescriptor, TypeRegistry, default_registry, register_type

__all__ = [
    "CompiledRoute",
    "LiteralSegment",
    "MatchResult",
    "ParamSpec",
    "RoutePattern",
    "Router",
    "TypeDescriptor",
    "TypeRegistry",
    "compile_pattern",
    "default_registry",
    "parse_pattern",
    "register_type",
    "resolve_source",
]
