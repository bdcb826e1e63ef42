"""Shared type aliases used across wren modules."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

# Route handler: receives the request context, returns anything (or an awaitable)
type Handler = Callable[..., Any]

# Passthrough to the next middleware in the host's chain
type Next = Callable[[], Awaitable[Any] | Any]

# Query input accepted by the resolver: raw query string or decoded mapping
type RawQuery = str | bytes | Mapping[str, str | Sequence[str]] | None
