"""Operator configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass
class OperatorConfig:
    """Runtime configuration for the operator."""

    credentials_secret_name: str = "s3-credentials"
    credentials_secret_namespace: str = "quobject-controller"
    max_workers: int = 4
    retry_delay_seconds: float = 30.0
    conflict_retry_delay_seconds: float = 1.0
    reconcile_timeout_seconds: float = 120.0
    s3_connect_timeout_seconds: float = 10.0
    s3_read_timeout_seconds: float = 30.0
    request_timeout_seconds: float = 30.0
    metrics_port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "OperatorConfig":
        """Load from environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        return cls(
            credentials_secret_name=os.getenv("CREDENTIALS_SECRET_NAME", "s3-credentials"),
            credentials_secret_namespace=os.getenv("CREDENTIALS_SECRET_NAMESPACE", "quobject-controller"),
            max_workers=_env_int("MAX_WORKERS", 4),
            retry_delay_seconds=_env_float("RETRY_DELAY_SECONDS", 30.0),
            conflict_retry_delay_seconds=_env_float("CONFLICT_RETRY_DELAY_SECONDS", 1.0),
            reconcile_timeout_seconds=_env_float("RECONCILE_TIMEOUT_SECONDS", 120.0),
            s3_connect_timeout_seconds=_env_float("S3_CONNECT_TIMEOUT_SECONDS", 10.0),
            s3_read_timeout_seconds=_env_float("S3_READ_TIMEOUT_SECONDS", 30.0),
            request_timeout_seconds=_env_float("REQUEST_TIMEOUT_SECONDS", 30.0),
            metrics_port=_env_int("METRICS_PORT", 8080),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_config: OperatorConfig | None = None


def get_config() -> OperatorConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = OperatorConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the loaded configuration so the next call re-reads the environment."""
    global _config
    _config = None
