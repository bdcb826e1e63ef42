"""Wren exception hierarchy.

Shared across the parser, compiler, registry, and router so every module
raises and catches the same types.

Registration-time errors (``ConfigurationError`` and its subclasses) are
raised while routes are being declared and are meant to abort startup.
``ValidationError`` is the only request-time error; it propagates out of
``Router.middleware`` untouched so the host can map it to a response.
"""

from dataclasses import dataclass
from typing import Any, Literal

type Location = Literal["path", "query", "body", "response"]


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when router setup is invalid.

    Bad type fragments, bad registration arguments, and everything below.
    """


class ParseError(ConfigurationError):
    """A route pattern string does not follow the pattern grammar."""

    def __init__(self, message: str, pattern: str, position: int) -> None:
        self.pattern = pattern
        self.position = position
        super().__init__(f"{message} at position {position} in {pattern!r}")


class CompileError(ConfigurationError):
    """A parsed pattern cannot be turned into a matcher."""


class UnknownTypeError(CompileError):
    """A pattern references a parameter type that is not registered."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown parameter type {type_name!r}")


class SchemaError(WrenError):
    """A value does not satisfy a schema.

    Keeps the expected kind and the offending value as structured fields;
    ``str()`` renders them for humans.
    """

    def __init__(self, expected: str, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected} but got {actual!r}")


@dataclass(eq=False)
class ValidationError(WrenError):
    """A matched request carries a value that fails its schema.

    Raised during dispatch after the path has matched, so it is a hard
    failure for the request rather than a reason to try another route.
    ``status`` is a hint for hosts mapping errors to responses.
    """

    name: str
    location: Location
    expected: str
    actual: Any
    detail: str = ""

    @property
    def status(self) -> int:
        # A bad handler return value is a server fault, not the client's.
        return 500 if self.location == "response" else 400

    def __str__(self) -> str:
        message = (
            f"Invalid {self.location} parameter {self.name!r}: "
            f"expected {self.expected} but got {self.actual!r}"
        )
        if self.detail:
            return f"{message} ({self.detail})"
        return message
