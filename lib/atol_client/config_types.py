from __future__ import annotations
from dataclasses import dataclass

PRODUCTION_BASE_URL = "https://online.atol.ru/possystem"
TEST_BASE_URL = "https://testonline.atol.ru/possystem"
DEFAULT_VERSION = "v3"


@dataclass(frozen=True)
class ConnectionConfig:
    login: str
    password: str
    group: str
    version: str = DEFAULT_VERSION
    test_mode: bool = False
    debug: bool = False
    timeout_s: float = 15.0

    @property
    def base_url(self) -> str:
        return TEST_BASE_URL if self.test_mode else PRODUCTION_BASE_URL
