"""Request context passed through the middleware chain.

Unlike an immutable request object, the context is a mutable carrier:
the router writes validated ``params`` and ``query`` into it before the
handler runs, and other middleware may stash data in ``state``.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wren._internal.types import RawQuery

if TYPE_CHECKING:
    from wren.routing.compiler import CompiledRoute


@dataclass(slots=True)
class Context:
    """Per-request context.

    ``query`` holds the raw query (string, bytes, or mapping) on the way
    in and the validated query values once a route has matched.
    """

    method: str
    path: str
    query: RawQuery | dict[str, Any] = None
    params: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    state: dict[str, Any] = field(default_factory=dict)

    # Set by the router on a successful match
    route: CompiledRoute | None = None

    @classmethod
    def from_asgi(cls, scope: MutableMapping[str, Any], body: Any = None) -> Context:
        """Create a context from an ASGI HTTP scope.

        Path and query string stay percent-encoded; the router decodes
        them once, on match. ``raw_path`` is preferred over the already
        decoded ``path`` when the server provides it.
        """
        raw_path = scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else scope["path"]
        return cls(
            method=scope["method"],
            path=path,
            query=scope.get("query_string", b"").decode("latin-1"),
            body=body,
            state=dict(scope.get("state") or {}),
        )
