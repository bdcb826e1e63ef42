"""Built-in schemas for route parameters.

Every schema follows the same shape::

    class MySchema:
        expected = "thing"        # human description for error messages
        multiple = False          # True if the schema takes every repeated query value

        def __call__(self, value):   # validate an already-typed value
            ...
        def parse(self, text):       # coerce raw URL text, then validate
            ...

Both methods return the (possibly coerced) value or raise ``SchemaError``.
Custom schemas only need to match the shape; there is no base class.

A ``multiple`` schema may also define ``parse_many(texts)`` to handle the
repeated values as a whole. Without it, each value goes through ``parse``
and the results are collected in a list.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from wren.errors import SchemaError


@runtime_checkable
class Schema(Protocol):
    """Protocol for parameter schemas."""

    expected: str
    multiple: bool

    def __call__(self, value: Any) -> Any: ...

    def parse(self, text: str) -> Any: ...


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StringSchema:
    """Any string."""

    expected: str = "string"
    multiple: bool = False

    def __call__(self, value: Any) -> str:
        if not isinstance(value, str):
            raise SchemaError(self.expected, value)
        return value

    def parse(self, text: str) -> str:
        return self(text)


# Sign, ASCII digits, optional fraction. Stricter than float(),
# which would also take "nan", "inf", "1_000", and surrounding whitespace.
_NUMBER_RE = re.compile(r"[-+]?[0-9]+(?:\.[0-9]+)?")


@dataclass(frozen=True, slots=True)
class NumberSchema:
    """A number. Text is coerced to ``float`` (IEEE-754 double)."""

    expected: str = "number"
    multiple: bool = False

    def __call__(self, value: Any) -> int | float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise SchemaError(self.expected, value)
        return value

    def parse(self, text: str) -> float:
        if not _NUMBER_RE.fullmatch(text):
            raise SchemaError(self.expected, text)
        return float(text)


_BOOLEAN_TEXT: dict[str, bool] = {"true": True, "1": True, "false": False, "0": False}


@dataclass(frozen=True, slots=True)
class BooleanSchema:
    """A boolean. Text must be exactly ``true``, ``false``, ``1`` or ``0``."""

    expected: str = "boolean"
    multiple: bool = False

    def __call__(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise SchemaError(self.expected, value)
        return value

    def parse(self, text: str) -> bool:
        try:
            return _BOOLEAN_TEXT[text]
        except KeyError:
            raise SchemaError(self.expected, text) from None


@dataclass(frozen=True, slots=True)
class ConstSchema:
    """Exactly one value, e.g. the ``@me`` alias for the current user."""

    value: Any
    multiple: bool = False

    @property
    def expected(self) -> str:
        return repr(self.value)

    def __call__(self, value: Any) -> Any:
        if type(value) is not type(self.value) or value != self.value:
            raise SchemaError(self.expected, value)
        return value

    def parse(self, text: str) -> Any:
        if text != str(self.value):
            raise SchemaError(self.expected, text)
        return self.value


@dataclass(frozen=True, slots=True)
class AnySchema:
    """Accepts everything unchanged."""

    expected: str = "any"
    multiple: bool = False

    def __call__(self, value: Any) -> Any:
        return value

    def parse(self, text: str) -> str:
        return text


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnionSchema:
    """The first member that accepts the value wins."""

    members: tuple[Schema, ...]
    multiple: bool = False

    @property
    def expected(self) -> str:
        return " | ".join(member.expected for member in self.members)

    def __call__(self, value: Any) -> Any:
        for member in self.members:
            try:
                return member(value)
            except SchemaError:
                continue
        raise SchemaError(self.expected, value)

    def parse(self, text: str) -> Any:
        for member in self.members:
            try:
                return member.parse(text)
            except SchemaError:
                continue
        raise SchemaError(self.expected, text)


@dataclass(frozen=True, slots=True)
class ArraySchema:
    """A list of items. Collects every value of a repeated query key."""

    item: Schema
    multiple: bool = True

    @property
    def expected(self) -> str:
        return f"array of {self.item.expected}"

    def __call__(self, value: Any) -> list[Any]:
        if not isinstance(value, list | tuple):
            raise SchemaError(self.expected, value)
        return [self.item(v) for v in value]

    def parse(self, text: str) -> list[Any]:
        return self.parse_many([text])

    def parse_many(self, texts: Sequence[str]) -> list[Any]:
        return [self.item.parse(t) for t in texts]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def string() -> StringSchema:
    """Any string."""
    return StringSchema()


def number() -> NumberSchema:
    """Any number; URL text becomes a ``float``."""
    return NumberSchema()


def boolean() -> BooleanSchema:
    """``True``/``False``; URL text ``true``/``1``/``false``/``0``."""
    return BooleanSchema()


def const(value: Any) -> ConstSchema:
    """Exactly *value*."""
    return ConstSchema(value)


def any_() -> AnySchema:
    """Anything."""
    return AnySchema()


def union(members: Iterable[Schema | Any]) -> UnionSchema:
    """Any of *members*. Non-schema members are treated as constants::

        union([number(), "@me"])
    """
    resolved = tuple(m if isinstance(m, Schema) else const(m) for m in members)
    if not resolved:
        msg = "union() needs at least one member"
        raise ValueError(msg)
    return UnionSchema(resolved)


def array(item: Schema) -> ArraySchema:
    """A list of *item* values."""
    return ArraySchema(item)
