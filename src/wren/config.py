"""Router configuration.

RouterConfig is a frozen dataclass. Pass one to ``Router`` or use the
``prefix`` keyword on the constructor.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(prefix="/api", validate_responses=True)
    """

    # Literal text prepended to every pattern before parsing
    prefix: str = ""

    # Check handler return values against the route's ``response`` schema.
    # Off by default: the response schema is documentation metadata.
    validate_responses: bool = False
