from __future__ import annotations

import json

import httpx

from atol_client import MemoryTokenCache
from atol_client.errors import ApiError


def make_response(method: str, url: str, status_code: int, payload) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        request=httpx.Request(method, url),
    )


class FakeTransport:
    """Replays scripted (status, payload) pairs, separately for auth and operations."""

    def __init__(self, *, auth=None, ops=None):
        self.auth = list(auth or [])
        self.ops = list(ops or [])
        self.calls: list[tuple[str, str, object]] = []

    @property
    def auth_calls(self):
        return [c for c in self.calls if c[1].endswith("/getToken")]

    @property
    def op_calls(self):
        return [c for c in self.calls if not c[1].endswith("/getToken")]

    def send(self, method, url, body=None):
        self.calls.append((method, url, body))
        queue = self.auth if url.endswith("/getToken") else self.ops
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        status_code, payload = item
        r = make_response(method, url, status_code, payload)
        if status_code >= 400:
            raise ApiError(status_code, "failed", r.text, response=r)
        return r

    def close(self) -> None:
        return None


class RecordingCache(MemoryTokenCache):
    def __init__(self):
        super().__init__()
        self.saved: list[tuple[str, str, int]] = []
        self.deleted: list[str] = []

    def save(self, key, value, ttl_s):
        self.saved.append((key, value, ttl_s))
        super().save(key, value, ttl_s)

    def delete(self, key):
        self.deleted.append(key)
        super().delete(key)
