from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auditor.core.config import Settings
from auditor.core.models.event import Destination
from auditor.core.models.file_config import DEFAULT_MAX_SIZE_BYTES


class RemoteConfig(BaseModel):
    """Remote HTTP sink settings"""

    url: str = Field(..., min_length=1, description="Sink endpoint")
    token: str = Field(..., min_length=1, description="Bearer token")
    timeout_seconds: Optional[float] = Field(
        default=10.0, description="Request timeout, None for no limit"
    )


class AuditOptions(BaseModel):
    """Options an Audit instance is set up with"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    destinations: List[Destination] = Field(default_factory=lambda: [Destination.CONSOLE])
    split_files: bool = False
    max_retention_days: int = Field(default=0, ge=0)
    use_timestamp: bool = True
    logger: Any = None
    framework: Literal["fastapi", "starlette"] = "fastapi"
    use_ui: bool = False
    capture_system_errors: bool = False
    db_integration: Literal["none", "sqlalchemy"] = "none"
    max_file_size_bytes: int = Field(default=DEFAULT_MAX_SIZE_BYTES, gt=0)
    base_dir: Optional[Path] = None
    remote: Optional[RemoteConfig] = None

    @field_validator("destinations", mode="before")
    @classmethod
    def default_destinations(cls, v):
        if not v:
            return [Destination.CONSOLE]
        return v

    def has_destination(self, destination: Destination) -> bool:
        return destination in self.destinations

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "AuditOptions":
        """Create options from environment settings, explicit overrides win"""
        remote = None
        if settings.remote_url and settings.remote_token:
            remote = RemoteConfig(
                url=settings.remote_url,
                token=settings.remote_token,
                timeout_seconds=settings.remote_timeout_seconds,
            )

        values = {
            "destinations": list(settings.destinations),
            "split_files": settings.split_files,
            "max_retention_days": settings.retention_days,
            "use_timestamp": settings.use_timestamp,
            "use_ui": settings.use_ui,
            "capture_system_errors": settings.capture_system_errors,
            "max_file_size_bytes": settings.max_file_size_bytes,
            "base_dir": settings.base_dir,
            "remote": remote,
        }
        values.update(overrides)
        return cls(**values)
