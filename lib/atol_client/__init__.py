from .client import AtolClient
from .http import make_client
from .config_types import ConnectionConfig
from .errors import ApiError, AtolClientError, AuthError, ConfigurationError, NetworkError
from .token_cache import FileTokenCache, MemoryTokenCache, TokenCache

__all__ = [
    "AtolClient",
    "make_client",
    "ConnectionConfig",
    "ApiError",
    "AtolClientError",
    "AuthError",
    "ConfigurationError",
    "NetworkError",
    "FileTokenCache",
    "MemoryTokenCache",
    "TokenCache",
]
