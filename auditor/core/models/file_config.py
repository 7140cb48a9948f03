from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

DEFAULT_MAX_SIZE_BYTES = 5 * 1024 * 1024
ARCHIVE_FOLDER = "archive"

COMBINED_FOLDER = "audit"
COMBINED_FILE = "audit.log"
SPLIT_FOLDER = "audits"


class FileConfig(BaseModel):
    """A log file destination.

    ``full_path`` stays empty until the registry has located the folder on
    disk; writers must check it before appending.
    """

    file_name: str = Field(..., min_length=1, description="Log file name")
    folder_name: str = Field(..., min_length=1, description="Folder holding the file")
    full_path: str = Field(default="", description="Resolved absolute path")
    max_size_bytes: int = Field(
        default=DEFAULT_MAX_SIZE_BYTES, gt=0, description="Rotation ceiling"
    )

    @property
    def is_located(self) -> bool:
        return bool(self.full_path)

    @property
    def archive_dir(self) -> Path:
        return Path(self.full_path).parent / ARCHIVE_FOLDER


def combined_file_config(max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES) -> FileConfig:
    return FileConfig(
        file_name=COMBINED_FILE,
        folder_name=COMBINED_FOLDER,
        max_size_bytes=max_size_bytes,
    )


def default_file_configs(max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES) -> List[FileConfig]:
    """The four split-mode files, one per category."""
    return [
        FileConfig(file_name=name, folder_name=SPLIT_FOLDER, max_size_bytes=max_size_bytes)
        for name in ("error.log", "request.log", "db.log", "action.log")
    ]
