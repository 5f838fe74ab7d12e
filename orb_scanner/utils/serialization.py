"""JSON serialization for outbound payloads."""

from typing import Any

import orjson


def dumps_payload(payload: dict[str, Any], pretty: bool = False) -> bytes:
    """Serialize a payload with orjson; keys keep insertion order."""
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(payload, option=option)
