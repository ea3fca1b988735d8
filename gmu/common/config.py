from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from gmu.infra.observability.datadog import DD_AGENT_HOST_ENV

ENV_FILE = Path(".env")

DEFAULT_REGION = "us-west-2"


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    S3_REGION: str = DEFAULT_REGION
    S3_ENDPOINT_URL: str | None = None
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_SESSION_TOKEN: str | None = None
    S3_USE_SSL: bool = True
    S3_FORCE_PATH_STYLE: bool = False
    LOG_LEVEL: str = "INFO"
    ENABLE_METRICS: bool = True
    DD_AGENT_HOST: str | None = None

    def __post_init__(self) -> None:
        if bool(self.S3_ACCESS_KEY_ID) != bool(self.S3_SECRET_ACCESS_KEY):
            raise ValueError(
                "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY must be set together."
            )
        self.LOG_LEVEL = self.LOG_LEVEL.upper()

    @property
    def s3_addressing_style(self) -> str:
        return "path" if self.S3_FORCE_PATH_STYLE else "auto"

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            S3_REGION=os.environ.get("S3_REGION") or cls.S3_REGION,
            S3_ENDPOINT_URL=_as_optional(os.environ.get("S3_ENDPOINT_URL")),
            S3_ACCESS_KEY_ID=_as_optional(os.environ.get("S3_ACCESS_KEY_ID")),
            S3_SECRET_ACCESS_KEY=_as_optional(os.environ.get("S3_SECRET_ACCESS_KEY")),
            S3_SESSION_TOKEN=_as_optional(os.environ.get("S3_SESSION_TOKEN")),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_FORCE_PATH_STYLE=_as_bool(
                os.environ.get("S3_FORCE_PATH_STYLE"), cls.S3_FORCE_PATH_STYLE
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            DD_AGENT_HOST=_as_optional(os.environ.get(DD_AGENT_HOST_ENV)),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
