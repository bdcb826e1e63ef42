"""Parameter schemas: validate typed values, coerce raw URL text.

Usage::

    from wren import schema

    uid = schema.union([schema.number(), "@me"])
    uid.parse("42")    # 42.0
    uid.parse("@me")   # "@me"
    uid.parse("bob")   # SchemaError: expected number | '@me' but got 'bob'

A schema is any object with ``expected``, ``multiple``, ``__call__`` and
``parse``; see ``wren.schema.builtins`` for the protocol.
"""

from wren.errors import SchemaError
from wren.schema.builtins import (
    AnySchema,
    ArraySchema,
    BooleanSchema,
    ConstSchema,
    NumberSchema,
    Schema,
    StringSchema,
    UnionSchema,
    any_,
    array,
    boolean,
    const,
    number,
    string,
    union,
)

__all__ = [
    "AnySchema",
    "ArraySchema",
    "BooleanSchema",
    "ConstSchema",
    "NumberSchema",
    "Schema",
    "SchemaError",
    "StringSchema",
    "UnionSchema",
    "any_",
    "array",
    "boolean",
    "const",
    "number",
    "string",
    "union",
]
