from __future__ import annotations

import json
from typing import Any

import httpx

from .errors import ApiError, AuthError, NetworkError
from .config_types import ConnectionConfig


def encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class Transport:
    def __init__(self, cfg: ConnectionConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        headers = {
            "User-Agent": "atol-client/0.1.0",
            "Content-Type": "application/json; charset=utf-8",
        }
        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def send(self, method: str, url: str, body: Any | None = None) -> httpx.Response:
        try:
            r = self._client.request(method, url, content=encode_body(body))
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        if r.status_code >= 400:
            msg = f"{method} {r.request.url.path} failed with {r.status_code}"
            details = r.text[:1000] if r.text else None

            try:
                data = r.json()
            except Exception:
                data = None
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                text = data["error"].get("text")
                if text:
                    msg = str(text)

            if r.status_code in (401, 403):
                raise AuthError(r.status_code, msg, details, response=r)
            raise ApiError(r.status_code, msg, details, response=r)

        return r
