from __future__ import annotations

import httpx


class AtolClientError(Exception):
    """Base client error."""


class ConfigurationError(AtolClientError):
    """Client is wired incorrectly (missing cache, unknown version, empty credentials)."""


class NetworkError(AtolClientError):
    """Transport/network layer error."""


class ApiError(AtolClientError):
    def __init__(
            self,
            status_code: int,
            message: str,
            details: str | None = None,
            response: httpx.Response | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
        self.response = response


class AuthError(ApiError):
    """Auth-related API error."""
