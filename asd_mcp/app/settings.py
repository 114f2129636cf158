from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ASD_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    server_name: str = "asd-cli"
    server_version: str = "1.0.0"
    keepalive_interval_seconds: float = Field(default=30.0, gt=0)
    read_chunk_bytes: int = Field(default=65_536, gt=0)
    log_level: str = "INFO"
    workspace_root: str = "."

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        """표준 로그 레벨 이름만 허용하고 대문자로 맞춰요."""
        if not isinstance(value, str) or not isinstance(logging.getLevelName(value.strip().upper()), int):
            raise ValueError(f"unsupported log level: {value!r}")
        return value.strip().upper()
