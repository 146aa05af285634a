"""
Static service configuration, read from the process environment.
"""
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_OBJECT_KEY = "rippkgs-index.sqlite"
DEFAULT_BLOB_BASE_URL = "https://storage.googleapis.com"

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def _default_index_path() -> Path:
    return Path(tempfile.gettempdir()) / DEFAULT_OBJECT_KEY


class Settings(BaseSettings):
    """
    Settings for the package search service.

    Every field can be overridden by an environment variable named
    ``PKGSEARCH_<FIELD NAME IN UPPER CASE>``. Invalid values raise a pydantic
    ValidationError when the settings are loaded, i.e. at startup.
    """

    model_config = SettingsConfigDict(env_prefix="PKGSEARCH_", env_file=".env", extra="ignore")

    bucket: str = Field(
        default="",
        description="Bucket holding the index snapshot. Empty means serve a pre-provisioned local file.",
    )
    object_key: str = Field(
        default=DEFAULT_OBJECT_KEY,
        description="Object path of the snapshot inside the bucket.",
    )
    index_path: Path = Field(
        default_factory=_default_index_path,
        description="Local path the snapshot is written to and opened from.",
    )
    blob_base_url: str = Field(
        default=DEFAULT_BLOB_BASE_URL,
        description="HTTP endpoint of the blob store.",
    )
    fetch_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout used while downloading the snapshot.",
    )
    lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long a query may wait for the index connection before failing.",
    )
    escape_wildcards: bool = Field(
        default=False,
        description="Match '%' and '_' in queries literally instead of as LIKE wildcards.",
    )
    eager_init: bool = Field(
        default=False,
        description="Fetch and open the index at startup instead of on the first search.",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Root logging level.",
    )

    @field_validator("index_path", mode="before")
    @classmethod
    def _expand_user(cls, value):
        if isinstance(value, str):
            return Path(value).expanduser()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def fetch_enabled(self) -> bool:
        return bool(self.bucket)

    @property
    def object_url(self) -> str:
        return f"{self.blob_base_url.rstrip('/')}/{self.bucket}/{self.object_key.lstrip('/')}"
