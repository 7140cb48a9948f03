from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AUDITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="auditor", description="Service name attached to logs")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment mode"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format", validate_default=True
    )

    destinations: list[Literal["console", "file", "remote"]] = Field(
        default=["console"], description="Where audit events are delivered"
    )
    split_files: bool = Field(
        default=False, description="Write each event category to its own file"
    )
    retention_days: int = Field(
        default=0, ge=0, description="Days to keep archives (0 keeps them forever)"
    )
    use_timestamp: bool = Field(default=True, description="Attach timeStamp to events")
    max_file_size_mb: int = Field(
        default=5, gt=0, description="Rotation ceiling for each log file"
    )
    capture_system_errors: bool = Field(
        default=False, description="Record uncaught exceptions, signals and exit"
    )
    use_ui: bool = Field(default=False, description="Expose the log read endpoint")
    base_dir: Optional[Path] = Field(
        default=None, description="Root for log folders (defaults to the working directory)"
    )

    remote_url: Optional[str] = Field(default=None, description="Remote sink URL")
    remote_token: Optional[str] = Field(default=None, description="Remote sink bearer token")
    remote_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Remote sink request timeout"
    )

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v, info):
        if info.data.get("environment") == "production":
            return "json"
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
