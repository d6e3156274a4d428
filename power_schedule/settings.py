"""
Typed settings for power-schedule using pydantic-settings.

Values come from ``POWER_SCHEDULE_*`` environment variables or a ``.env``
file in the working directory. Everything has a sensible default, so an
unconfigured run installs the packaged templates to the standard system
locations.

Usage:
    from power_schedule.settings import get_settings

    settings = get_settings()
    print(settings.component_name)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATE_DIR = PACKAGE_DIR / "templates"
DEFAULT_COMPONENT_NAME = "power-schedule"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _default_program_data() -> Path:
    return Path(os.environ.get("ProgramData") or r"C:\ProgramData")


class Settings(BaseSettings):
    """All runtime configuration for one invocation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POWER_SCHEDULE_",
        extra="ignore",
        case_sensitive=False,
    )

    component_name: str = Field(
        default=DEFAULT_COMPONENT_NAME,
        description="Logical name used for the task, daemon label and unit names",
    )
    template_dir: Path = Field(
        default=DEFAULT_TEMPLATE_DIR,
        description="Directory holding windows.xml, macos.plist, linux.service, linux.timer",
    )
    interpreter: Optional[str] = Field(
        default=None,
        description="Interpreter embedded in the systemd unit (skips lookup)",
    )
    install_dir: Optional[Path] = Field(
        default=None,
        description="Override for the directory the trigger script is copied into",
    )
    launch_daemons_dir: Path = Field(default=Path("/Library/LaunchDaemons"))
    systemd_unit_dir: Path = Field(default=Path("/etc/systemd/system"))
    program_data_dir: Path = Field(default_factory=_default_program_data)

    log_level: str = Field(default="WARNING")
    log_file: Optional[Path] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    To reload after changing the environment, call clear_settings_cache().
    """
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
