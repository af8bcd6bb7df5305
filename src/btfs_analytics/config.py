"""Agent configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

DEFAULT_INTERVAL = 15 * 60.0
DEFAULT_ENDPOINT = "http://18.220.204.165:8080/metrics"
DEFAULT_REQUEST_TIMEOUT = 10.0

ENV_PREFIX = "BTFS_ANALYTICS_"
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True, frozen=True)
class AgentConfig:
    """Configuration for the analytics agent."""

    interval: float = DEFAULT_INTERVAL  # seconds between reports
    endpoint: str = DEFAULT_ENDPOINT
    enabled: bool = True
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT  # seconds

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("interval must be positive")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if urlparse(self.endpoint).scheme not in ("http", "https"):
            raise ValueError("endpoint must be an http or https URL")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentConfig":
        """
        Build a config from BTFS_ANALYTICS_* environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
        """
        if environ is None:
            environ = os.environ

        def get(name: str) -> str | None:
            value = environ.get(ENV_PREFIX + name)
            return value.strip() if value is not None else None

        interval = get("INTERVAL")
        endpoint = get("ENDPOINT")
        enabled = get("ENABLED")
        timeout = get("TIMEOUT")

        return cls(
            interval=float(interval) if interval else DEFAULT_INTERVAL,
            endpoint=endpoint or DEFAULT_ENDPOINT,
            enabled=enabled.lower() not in _FALSE_VALUES if enabled else True,
            request_timeout=float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT,
        )
