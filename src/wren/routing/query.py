"""Query string normalization.

The resolver accepts whatever the host hands it as ``ctx.query``: a raw
query string (``str`` or ``bytes``), an already-decoded mapping, or
nothing. Everything is normalized to field name -> list of values, in
order of appearance.
"""

from collections.abc import Mapping
from urllib.parse import parse_qsl

from wren._internal.types import RawQuery


def parse_query(raw: RawQuery) -> dict[str, list[str]]:
    """Normalize *raw* into ``{name: [value, ...]}``.

    Raw strings are percent-decoded (``+`` becomes a space) and blank
    values are kept, so ``?flag`` yields ``{"flag": [""]}``. Mapping
    values are taken as already decoded.
    """
    if raw is None:
        return {}

    if isinstance(raw, Mapping):
        result: dict[str, list[str]] = {}
        for key, value in raw.items():
            result[key] = [value] if isinstance(value, str) else list(value)
        return result

    text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
    result = {}
    for key, value in parse_qsl(text.removeprefix("?"), keep_blank_values=True):
        result.setdefault(key, []).append(value)
    return result
