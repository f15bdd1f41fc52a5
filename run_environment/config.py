"""Configuration for run environment detection"""
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .environment import RunEnvironment


class Settings(BaseSettings):
    """Settings read from ``RUN_ENVIRONMENT_*`` environment variables"""

    model_config = SettingsConfigDict(env_prefix="RUN_ENVIRONMENT_", case_sensitive=False)

    # Build settings
    debug_build: bool = Field(default=False, description="Binary was produced by a debug build")
    bundle_path: Optional[Path] = Field(default=None, description="Installed .app bundle (discovered if not set)")

    # Detection override
    force_environment: Optional[RunEnvironment] = Field(
        default=None,
        description="Skip detection and report this environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    @field_validator('force_environment', mode='before')
    @classmethod
    def parse_force_environment(cls, v):
        if isinstance(v, str):
            if not v.strip():
                return None
            return RunEnvironment.from_string(v)
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('log_format', mode='before')
    @classmethod
    def normalize_log_format(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v
