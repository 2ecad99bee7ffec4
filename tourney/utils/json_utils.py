"""orjson encoding for HTTP responses and notification payloads.

Money is emitted as a decimal string ("25.00"), never a float, and
timestamps as ISO 8601 with a ``Z`` suffix.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

import orjson
from fastapi.responses import JSONResponse

OPTIONS = orjson.OPT_UTC_Z | orjson.OPT_NON_STR_KEYS


def _encode_extra(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def json_dumps(data: Any) -> str:
    """Serialize to a JSON string (Redis messages are text)."""
    return orjson.dumps(data, default=_encode_extra, option=OPTIONS).decode()


class ORJSONResponse(JSONResponse):
    """Default response class of the application."""

    def render(self, content: Any) -> bytes:
        return orjson.dumps(content, default=_encode_extra, option=OPTIONS)
