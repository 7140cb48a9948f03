"""File reading operations module."""
from pathlib import Path

import aiofiles

from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem.paths import resolve_within


class FileReader:
    """Handles file reading operations only."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path).resolve()

    async def read_text(self, path: Path) -> str:
        """Read entire file content as UTF-8."""
        full_path = resolve_within(self.base_path, path)

        try:
            async with aiofiles.open(full_path, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            raise FilesystemError(f"File not found: {path}", path=str(path))
        except PermissionError:
            raise FilesystemError(f"Permission denied: {path}", path=str(path))
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(f"Failed to read file: {e}", path=str(path))
