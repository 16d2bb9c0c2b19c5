from __future__ import annotations

import os
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_cache_dir, user_config_dir

from .config_types import ConnectionConfig, DEFAULT_VERSION
from .errors import ConfigurationError
from .versions import resolve_version

APP_NAME = "atol-client"
CONFIG_FILENAME = "config.toml"
TOKEN_CACHE_FILENAME = "tokens.toml"

ENV_LOGIN = "ATOL_LOGIN"
ENV_PASSWORD = "ATOL_PASSWORD"
ENV_GROUP = "ATOL_GROUP"
ENV_VERSION = "ATOL_VERSION"
ENV_TEST_MODE = "ATOL_TEST_MODE"
ENV_DEBUG = "ATOL_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def token_cache_path() -> str:
    return f"{user_cache_dir(APP_NAME)}/{TOKEN_CACHE_FILENAME}"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY


def from_toml(data: dict[str, Any]) -> ConnectionConfig:
    conn = data.get("connection") or {}
    if not isinstance(conn, dict):
        conn = {}
    timeout_raw = conn.get("timeout_s")
    try:
        timeout_s = float(timeout_raw) if timeout_raw is not None else 15.0
    except (TypeError, ValueError):
        timeout_s = 15.0
    return ConnectionConfig(
        login=str(conn.get("login") or "").strip(),
        password=str(conn.get("password") or ""),
        group=str(conn.get("group") or "").strip(),
        version=str(conn.get("version") or DEFAULT_VERSION).strip().lower(),
        test_mode=_as_bool(conn.get("test_mode")),
        debug=_as_bool(conn.get("debug")),
        timeout_s=timeout_s,
    )


def to_toml(cfg: ConnectionConfig) -> dict[str, Any]:
    return {
        "connection": {
            "login": cfg.login,
            "password": cfg.password,
            "group": cfg.group,
            "version": cfg.version,
            "test_mode": cfg.test_mode,
            "debug": cfg.debug,
            "timeout_s": cfg.timeout_s,
        }
    }


def apply_env(cfg: ConnectionConfig) -> ConnectionConfig:
    overrides: dict[str, Any] = {}
    for env_name, field_name in (
            (ENV_LOGIN, "login"),
            (ENV_PASSWORD, "password"),
            (ENV_GROUP, "group"),
    ):
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value.strip() if field_name != "password" else value
    version = os.getenv(ENV_VERSION, "").strip().lower()
    if version:
        overrides["version"] = version
    for env_name, field_name in ((ENV_TEST_MODE, "test_mode"), (ENV_DEBUG, "debug")):
        value = os.getenv(env_name)
        if value is not None and value.strip():
            overrides[field_name] = _as_bool(value)
    return replace(cfg, **overrides) if overrides else cfg


def validate(cfg: ConnectionConfig) -> ConnectionConfig:
    missing = [name for name in ("login", "password", "group") if not getattr(cfg, name)]
    if missing:
        raise ConfigurationError(f"Connection config is incomplete, missing: {', '.join(missing)}")
    resolve_version(cfg.version)
    return cfg


def load_connection_config(path: str | Path | None = None) -> ConnectionConfig:
    path = Path(path or config_path()).expanduser()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        data = {}
    return validate(apply_env(from_toml(data)))


def save_connection_config(cfg: ConnectionConfig, path: str | Path | None = None) -> str:
    path = Path(path or config_path()).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return str(path)
