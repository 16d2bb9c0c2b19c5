from __future__ import annotations

import json
from typing import Any

# error.code values the service uses for a missing, expired or foreign token
TOKEN_EXPIRED_CODES = frozenset({4, 5, 6, 12, 13, 14})


def parse_error_body(details: str | bytes | None) -> dict | None:
    if not details:
        return None
    try:
        data = json.loads(details)
    except Exception:
        return None
    return data if isinstance(data, dict) else None


def error_code(body: dict[str, Any] | None) -> int | None:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    code = error.get("code")
    try:
        return int(code)
    except (TypeError, ValueError):
        return None


def is_token_expired(body: dict[str, Any] | None) -> bool:
    return error_code(body) in TOKEN_EXPIRED_CODES
