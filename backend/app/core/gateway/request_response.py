"""
Gateway request/response helpers.

- read_json_body: JSON object body of a request; malformed JSON is InvalidRequest.
- success_response / error_response: the envelopes returned by the gateway
  routes, ``{"success": true, "data": ...}`` and ``{"error": "..."}``.
- Rows coming back from the store are made JSON-safe (datetime, Decimal, UUID, ...).
"""

import json
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from fastapi.responses import JSONResponse
from starlette.requests import Request

from app.core.gateway.errors import InvalidRequest


async def read_json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object."""
    raw = await request.body()
    if not raw:
        raise InvalidRequest("Request body is required")
    try:
        body = json.loads(raw)
    except ValueError:
        raise InvalidRequest("Request body must be valid JSON") from None
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return body


def make_json_safe(obj: Any) -> Any:
    """Recursively convert non-JSON-serializable types to safe primitives.

    Handles: datetime, date, time, timedelta, Decimal, UUID, bytes, sets.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    if isinstance(obj, Decimal):
        # Preserve integer-valued decimals as int, otherwise float
        if obj == int(obj):
            return int(obj)
        return float(obj)
    if isinstance(obj, uuid.UUID):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if isinstance(obj, dict):
        return {k: make_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [make_json_safe(item) for item in obj]
    if isinstance(obj, set):
        return [make_json_safe(item) for item in sorted(obj, key=str)]
    return str(obj)


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": make_json_safe(data)},
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(message)})
