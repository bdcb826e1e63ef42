"""Parameter types: name -> (schema, regex fragment).

Patterns refer to types by name (``:id(number)``). The registry supplies
the regex fragment the compiler embeds in the path matcher and the schema
the resolver runs on every captured value.

Built-ins::

    string   [^/&?]+                  any text
    number   [-+]?[0-9]+(?:\.[0-9]+)?  float
    boolean  true|false|1|0           bool

Adding a type is visible to patterns compiled afterwards only; compiled
routes keep the fragment and schema they were built with.
"""

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from wren.errors import ConfigurationError, UnknownTypeError
from wren.schema import Schema, boolean, number, string

logger = logging.getLogger("wren.routing")


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """A registered parameter type."""

    name: str
    schema: Schema
    fragment: str


# (fragment, schema factory) for each built-in type
BUILTIN_TYPES: dict[str, tuple[str, Callable[[], Schema]]] = {
    "string": (r"[^/&?]+", string),
    "number": (r"[-+]?[0-9]+(?:\.[0-9]+)?", number),
    "boolean": (r"true|false|1|0", boolean),
}


class TypeRegistry:
    """Mutable mapping of type name to ``TypeDescriptor``.

    Usage::

        registry = TypeRegistry()
        registry.register("uid", schema.union([schema.number(), "@me"]), r"@me|[-+]?[0-9]+")
        registry.resolve("uid").fragment

    Not synchronized. Register types during startup, before serving.
    """

    __slots__ = ("_types",)

    def __init__(self, *, builtins: bool = True) -> None:
        self._types: dict[str, TypeDescriptor] = {}
        if builtins:
            for name, (fragment, factory) in BUILTIN_TYPES.items():
                self.register(name, factory(), fragment)

    def register(self, name: str, schema: Schema, fragment: str | re.Pattern[str]) -> None:
        """Add or replace a type.

        Replacing an existing name (built-ins included) is allowed and
        silent apart from a debug log line.

        Raises ``ConfigurationError`` if *fragment* is not a valid regex or
        declares named groups, which would clash with parameter groups.
        """
        source = fragment.pattern if isinstance(fragment, re.Pattern) else fragment
        try:
            compiled = re.compile(source)
        except re.error as exc:
            msg = f"Invalid regex fragment for type {name!r}: {exc}"
            raise ConfigurationError(msg) from exc
        if compiled.groupindex:
            msg = f"Regex fragment for type {name!r} must not use named groups: {source!r}"
            raise ConfigurationError(msg)

        if name in self._types:
            logger.debug("Replacing parameter type %r", name)
        self._types[name] = TypeDescriptor(name=name, schema=schema, fragment=source)

    def resolve(self, name: str) -> TypeDescriptor:
        """Return the descriptor for *name*. Raises ``UnknownTypeError``."""
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def names(self) -> list[str]:
        return list(self._types)

    def copy(self) -> "TypeRegistry":
        """An independent registry with the same entries."""
        clone = TypeRegistry(builtins=False)
        clone._types.update(self._types)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TypeRegistry({', '.join(self._types)})"


# Shared by every Router that is not given its own registry
default_registry = TypeRegistry()


def register_type(name: str, schema: Schema, fragment: str | re.Pattern[str]) -> None:
    """Register a parameter type on the shared default registry."""
    default_registry.register(name, schema, fragment)
