"""Obtaining and caching the ATOL Online auth token.

A token is looked up in the cache first; only a miss costs a ``getToken``
round trip. Successful authentication stores the token for
``TOKEN_CACHE_TTL`` seconds under a key scoped to the credentials and the
protocol version, so switching either never reuses a token issued for
another context.
"""
from __future__ import annotations

import hashlib
import logging

from .errors import AtolClientError, ConfigurationError
from .token_cache import TokenCache
from .transport import Transport
from .versions import ProtocolVersion

TOKEN_CACHE_KEY = "atol_online_token"
TOKEN_CACHE_TTL = 60 * 60 * 24


def token_cache_key(login: str, password: str, version: str) -> str:
    digest = hashlib.md5(f"{login}{password}".encode("utf-8")).hexdigest()
    return f"{TOKEN_CACHE_KEY}_{digest}_{version}"


class TokenManager:
    def __init__(
            self,
            transport: Transport,
            cache: TokenCache | None,
            *,
            login: str,
            password: str,
            base_url: str,
            version: ProtocolVersion,
            logger: logging.Logger | None = None,
    ):
        self._t = transport
        self.cache = cache
        self._login = login
        self._password = password
        self._base_url = base_url.rstrip("/")
        self.version = version
        self.logger = logger

    @property
    def cache_key(self) -> str:
        return token_cache_key(self._login, self._password, self.version.name)

    def _require_cache(self) -> TokenCache:
        if self.cache is None:
            raise ConfigurationError("Token cache is not configured; call set_cache() first")
        return self.cache

    def get_token(self) -> str | None:
        """Return a usable token, or None when authentication failed."""
        cache = self._require_cache()
        key = self.cache_key
        token = cache.fetch(key)
        if token:
            return token

        url = f"{self._base_url}/{self.version.name}/getToken"
        try:
            response = self._t.send("POST", url, {"login": self._login, "pass": self._password})
        except AtolClientError as e:
            if self.logger:
                self.logger.error(getattr(e, "details", None) or str(e))
            return None

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            if self.logger:
                self.logger.error("getToken returned a non-JSON body: %s", response.text[:1000])
            return None

        if not self.version.is_auth_success(body):
            reason = self.version.auth_error(body)
            if reason and self.logger:
                self.logger.error(reason)
            return None

        token = body.get("token")
        if not isinstance(token, str) or not token:
            if self.logger:
                self.logger.error("getToken response carries no token")
            return None

        cache.save(key, token, TOKEN_CACHE_TTL)
        return token

    def invalidate(self) -> None:
        self._require_cache().delete(self.cache_key)
