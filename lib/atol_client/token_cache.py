from __future__ import annotations

import contextlib
import os
import tempfile
import time
import tomllib
from pathlib import Path
from typing import Callable, Protocol

import tomli_w


class TokenCache(Protocol):
    def fetch(self, key: str) -> str | None: ...

    def save(self, key: str, value: str, ttl_s: int) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryTokenCache:
    """Process-local cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def fetch(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def save(self, key: str, value: str, ttl_s: int) -> None:
        self._entries[key] = (value, self._clock() + max(0, int(ttl_s)))

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class FileTokenCache:
    """Tokens kept in a TOML file so that separate processes share them."""

    def __init__(self, path: str | Path, clock: Callable[[], float] = time.time):
        self._path = Path(path).expanduser()
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, dict]:
        try:
            with self._path.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            return {}
        except tomllib.TOMLDecodeError:
            # unreadable file counts as a miss; the next save rewrites it
            return {}
        tokens = data.get("tokens") if isinstance(data, dict) else None
        if not isinstance(tokens, dict):
            return {}
        return {str(k): v for k, v in tokens.items() if isinstance(v, dict)}

    def _store(self, tokens: dict[str, dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(tomli_w.dumps({"tokens": tokens}).encode("utf-8"))
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def fetch(self, key: str) -> str | None:
        entry = self._load().get(key)
        if not entry:
            return None
        value = entry.get("value")
        expires_at = entry.get("expires_at")
        if not isinstance(value, str) or not value:
            return None
        if not isinstance(expires_at, (int, float)) or self._clock() >= expires_at:
            return None
        return value

    def save(self, key: str, value: str, ttl_s: int) -> None:
        now = self._clock()
        tokens = {
            k: v
            for k, v in self._load().items()
            if isinstance(v.get("expires_at"), (int, float)) and v["expires_at"] > now
        }
        tokens[key] = {"value": value, "expires_at": int(now + max(0, int(ttl_s)))}
        self._store(tokens)

    def delete(self, key: str) -> None:
        tokens = self._load()
        if key not in tokens:
            return
        del tokens[key]
        self._store(tokens)
