from __future__ import annotations

import logging

from .client import AtolClient
from .config import load_connection_config, token_cache_path
from .config_types import ConnectionConfig
from .logging_ import LOGGER_NAME
from .token_cache import FileTokenCache, TokenCache


def make_client(
    cfg: ConnectionConfig | None = None,
    *,
    cache: TokenCache | None = None,
    logger: logging.Logger | None = None,
) -> AtolClient:
    effective_cfg = cfg or load_connection_config()
    if cache is None:
        cache = FileTokenCache(token_cache_path())
    if logger is None:
        logger = logging.getLogger(LOGGER_NAME)
    return AtolClient(effective_cfg, cache=cache, logger=logger)
