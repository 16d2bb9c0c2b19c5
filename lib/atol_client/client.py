from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from .config_types import ConnectionConfig, DEFAULT_VERSION
from .errors import ApiError, NetworkError
from .errors_utils import error_code, is_token_expired, parse_error_body
from .token_cache import TokenCache
from .tokens import TokenManager
from .transport import Transport, encode_body
from .versions import resolve_version

DEFAULT_MAX_ATTEMPTS = 2

OPERATION_SELL = "sell"
OPERATION_SELL_REFUND = "sell_refund"


class AtolClient:
    def __init__(
            self,
            cfg: ConnectionConfig,
            *,
            cache: TokenCache | None = None,
            logger: logging.Logger | None = None,
            transport: Transport | None = None,
    ):
        version = resolve_version(cfg.version or DEFAULT_VERSION)
        self._cfg = cfg
        self._t = transport or Transport(cfg)
        self._base_url = cfg.base_url
        self._debug = cfg.debug
        self._logger = logger
        self._tokens = TokenManager(
            self._t,
            cache,
            login=cfg.login,
            password=cfg.password,
            base_url=self._base_url,
            version=version,
            logger=logger,
        )

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> AtolClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def version(self) -> str:
        return self._tokens.version.name

    def set_version(self, version: str) -> None:
        self._tokens.version = resolve_version(version)

    def set_cache(self, cache: TokenCache) -> None:
        self._tokens.cache = cache

    def set_logger(self, logger: logging.Logger | None) -> None:
        self._logger = logger
        self._tokens.logger = logger

    def get_token(self) -> str | None:
        return self._tokens.get_token()

    def build_url(self, operation: str, token: str | None = None) -> str:
        url = f"{self._base_url}/{self.version}/{self._cfg.group}/{operation}"
        if token:
            url += "?" + urlencode({self._tokens.version.token_param: token})
        return url

    # --- API methods ---
    def sell(self, payload: Any) -> str | None:
        """Register an incoming payment receipt."""
        return self.submit(OPERATION_SELL, payload)

    def sell_refund(self, payload: Any) -> str | None:
        """Register a refund of an incoming payment."""
        return self.submit(OPERATION_SELL_REFUND, payload)

    def submit(self, operation: str, payload: Any, *, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str | None:
        return self._dispatch("POST", operation, payload, max_attempts=max_attempts)

    def check_status(self, uuid: str, *, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str | None:
        """Fetch the processing report of a previously submitted receipt."""
        path = f"report/{quote(str(uuid).strip(), safe='')}"
        return self._dispatch("GET", path, None, max_attempts=max_attempts, log_data=uuid)

    def _dispatch(
            self,
            method: str,
            operation: str,
            payload: Any,
            *,
            max_attempts: int,
            log_data: Any = None,
    ) -> str | None:
        """Send one logical request, re-authenticating once if the token was rejected.

        Returns the raw response body, or None on any failure.
        """
        if log_data is None:
            log_data = payload
        attempts = max(1, int(max_attempts))
        for attempt in range(1, attempts + 1):
            token = self._tokens.get_token()
            if not token:
                return None
            url = self.build_url(operation, token)
            try:
                response = self._t.send(method, url, payload)
            except ApiError as e:
                # the cached token goes away on every failure, not only on expiry codes
                self._tokens.invalidate()
                body = parse_error_body(e.response.text if e.response is not None else e.details)
                if is_token_expired(body) and attempt < attempts:
                    if self._debug and self._logger:
                        self._logger.info(
                            "Token rejected with error code %s, re-authenticating", error_code(body)
                        )
                    continue
                self._log_debug(url, log_data, e.response, attempt)
                return None
            except NetworkError as e:
                self._tokens.invalidate()
                if self._debug and self._logger:
                    self._logger.error("%s %s: %s", method, operation, e)
                return None

            self._log_debug(url, log_data, response, attempt)
            return response.text
        return None

    def _log_debug(self, url: str, data: Any, response: httpx.Response | None, attempt: int) -> None:
        if not (self._debug and self._logger):
            return
        headers = ""
        body = ""
        if data is not None and not isinstance(data, str):
            data = encode_body(data).decode("utf-8", errors="replace")
        if response is not None:
            headers = "\n".join(f"{k}: {v}" for k, v in response.headers.items())
            body = response.text
        self._logger.debug(
            "* URL: %s\n * POSTFIELDS: %s\n * RESPONSE HEADERS: %s\n * RESPONSE BODY: %s\n * ATTEMPTS: %s",
            url,
            data,
            headers,
            body,
            attempt,
        )
