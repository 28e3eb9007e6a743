"""
Client configuration.

Values not passed explicitly are read from the environment:

    STORAGE_ACCESS_KEY   access key id used for request signing
    STORAGE_SECRET_KEY   secret key used for request signing
    STORAGE_TIMEOUT      transport timeout in seconds ("none" disables it)
    STORAGE_DEBUG        "1"/"true" to log every request and response
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_USER_AGENT = "storec/1.0"
DEFAULT_TIMEOUT = 60.0


@dataclass
class ClientConfig:
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: Optional[float] = DEFAULT_TIMEOUT
    debug: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key) and bool(self.secret_key)

    @staticmethod
    def from_env() -> "ClientConfig":
        return ClientConfig(
            access_key=os.getenv("STORAGE_ACCESS_KEY"),
            secret_key=os.getenv("STORAGE_SECRET_KEY"),
            timeout=_parse_timeout(os.getenv("STORAGE_TIMEOUT")),
            debug=os.getenv("STORAGE_DEBUG", "").strip().lower() in ("1", "true", "yes"),
        )


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return DEFAULT_TIMEOUT
    if value.strip().lower() == "none":
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f"STORAGE_TIMEOUT is not a number: {value!r}")
    if timeout <= 0:
        raise ConfigurationError(f"STORAGE_TIMEOUT must be positive: {value!r}")
    return timeout
