"""
Configuration loading and validation.

Settings come from environment variables (prefix ``RANGE_ACCESS_``) or a
``.env`` file, and can be overridden from a YAML file for CLI runs. The
backend API key is only ever read from the environment.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Access resolver configuration."""

    model_config = SettingsConfigDict(env_prefix="RANGE_ACCESS_", env_file=".env", extra="ignore")

    # Projection / ordering
    breadcrumb_separator: str = " → "
    path_delimiters: list[str] = Field(default_factory=lambda: [" / ", "→", "->"])

    # Traversal ceiling, as a multiple of the number of organizations
    traversal_limit_factor: int = Field(default=1, ge=1)

    # Backend
    backend_url: str = "http://localhost:54321"
    backend_api_key_env: str = "RANGE_ACCESS_BACKEND_KEY"
    request_timeout_seconds: int = Field(default=30, ge=1)
    fetch_child_counts: bool = False

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "json"

    @field_validator("path_delimiters")
    @classmethod
    def _non_empty_delimiters(cls, value: list[str]) -> list[str]:
        cleaned = [d for d in value if d]
        if not cleaned:
            raise ValueError("path_delimiters must contain at least one non-empty delimiter")
        return cleaned

    @property
    def backend_api_key(self) -> str | None:
        return os.environ.get(self.backend_api_key_env)


def load_config(path: str | Path) -> Settings:
    """Load settings from a YAML file; environment fills the gaps."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return Settings(**raw)


@lru_cache
def get_settings() -> Settings:
    return Settings()
