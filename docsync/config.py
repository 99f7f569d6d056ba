"""
docsync/config.py

Environment-driven configuration for the sync service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from docsync.errors import ConfigError

DEFAULT_BLOB_API_URL = "https://blob.vercel-storage.com"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_optional_float_env(name: str) -> float | None:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return float(raw_value)
    except ValueError:
        return None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for storage and ingestion connectors.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class ReadinessPolicy:
    """
    Retry policy for downstream processing-status checks.

    ``settling_delay_seconds`` is applied once per batch before the first
    check; ``inter_attempt_delay_seconds`` between checks of one file.
    """

    max_attempts: int = 6
    inter_attempt_delay_seconds: float = 3.0
    settling_delay_seconds: float = 5.0


@dataclass(frozen=True)
class SyncConfig:
    """
    Explicit, immutable configuration for one sync run.
    """

    blob_read_write_token: str | None
    open_webui_base_url: str | None
    open_webui_api_key: str | None
    knowledge_collection_id: str | None = None
    blob_api_url: str = DEFAULT_BLOB_API_URL
    upload_concurrency: int = 4
    run_timeout_seconds: float | None = None
    readiness: ReadinessPolicy = field(default_factory=ReadinessPolicy)

    def missing_fields(self) -> list[str]:
        missing = [
            name
            for name, value in (
                ("BLOB_READ_WRITE_TOKEN", self.blob_read_write_token),
                ("OPEN_WEB_UI_BASE_URL", self.open_webui_base_url),
                ("OPEN_WEB_UI_API_KEY", self.open_webui_api_key),
            )
            if not value
        ]
        return missing

    def validate(self) -> None:
        """
        Raise ConfigError listing every missing credential or endpoint.
        """

        missing = self.missing_fields()
        if missing:
            raise ConfigError(missing)


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Periodic sync schedule. ``cron`` is a standard 5-field crontab string.
    """

    cron: str | None = None


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_readiness_policy() -> ReadinessPolicy:
    """
    Return the status polling policy from environment variables.
    """

    return ReadinessPolicy(
        max_attempts=max(1, _get_int_env("SYNC_MAX_STATUS_ATTEMPTS", 6)),
        inter_attempt_delay_seconds=max(0.0, _get_float_env("SYNC_STATUS_RETRY_DELAY_SECONDS", 3.0)),
        settling_delay_seconds=max(0.0, _get_float_env("SYNC_SETTLING_DELAY_SECONDS", 5.0)),
    )


@lru_cache(maxsize=1)
def get_sync_config() -> SyncConfig:
    """
    Return cached sync configuration from environment variables.

    Missing credentials are left as None; ``SyncConfig.validate`` reports them
    when a run starts.
    """

    run_timeout = _get_optional_float_env("SYNC_RUN_TIMEOUT_SECONDS")
    return SyncConfig(
        blob_read_write_token=_get_optional_str_env("BLOB_READ_WRITE_TOKEN"),
        open_webui_base_url=_get_optional_str_env("OPEN_WEB_UI_BASE_URL"),
        open_webui_api_key=_get_optional_str_env("OPEN_WEB_UI_API_KEY"),
        knowledge_collection_id=_get_optional_str_env("KNOWLEDGE_COLLECTION_ID"),
        blob_api_url=_get_str_env("BLOB_API_URL", DEFAULT_BLOB_API_URL),
        upload_concurrency=max(1, _get_int_env("SYNC_UPLOAD_CONCURRENCY", 4)),
        run_timeout_seconds=run_timeout if run_timeout and run_timeout > 0 else None,
        readiness=get_readiness_policy(),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    return SchedulerSettings(cron=_get_optional_str_env("SYNC_SCHEDULE_CRON"))


def get_cron_secret() -> str | None:
    """
    Return the bearer secret guarding the HTTP sync trigger.

    Not cached, so a rotated secret takes effect without a restart.
    """

    return _get_optional_str_env("CRON_SECRET")
