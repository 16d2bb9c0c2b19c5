"""Per-version differences of the ATOL Online protocol.

Each supported API generation is one row of ``VERSIONS``. Call sites only
ever look a row up, so a new generation is added here and nowhere else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .errors import ConfigurationError

API_VERSION_V3 = "v3"
API_VERSION_V4 = "v4"


def _v3_auth_success(body: dict[str, Any]) -> bool:
    code = body.get("code")
    if code is None or isinstance(code, bool):
        return False
    try:
        return float(code) in (0, 1)
    except (TypeError, ValueError):
        return False


def _v3_auth_error(body: dict[str, Any]) -> str | None:
    return None


def _v4_auth_success(body: dict[str, Any]) -> bool:
    return body.get("error") is None


def _v4_auth_error(body: dict[str, Any]) -> str | None:
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    return f"{error.get('code')} {error.get('text')}"


@dataclass(frozen=True)
class ProtocolVersion:
    name: str
    token_param: str
    is_auth_success: Callable[[dict[str, Any]], bool]
    auth_error: Callable[[dict[str, Any]], str | None]


VERSIONS: dict[str, ProtocolVersion] = {
    API_VERSION_V3: ProtocolVersion(
        name=API_VERSION_V3,
        token_param="tokenid",
        is_auth_success=_v3_auth_success,
        auth_error=_v3_auth_error,
    ),
    API_VERSION_V4: ProtocolVersion(
        name=API_VERSION_V4,
        token_param="token",
        is_auth_success=_v4_auth_success,
        auth_error=_v4_auth_error,
    ),
}


def resolve_version(name: str) -> ProtocolVersion:
    key = (name or "").strip().lower()
    try:
        return VERSIONS[key]
    except KeyError:
        supported = ", ".join(sorted(VERSIONS))
        raise ConfigurationError(f"Unsupported API version '{name}'. Supported: {supported}") from None
