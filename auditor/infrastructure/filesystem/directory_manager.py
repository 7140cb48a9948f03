"""Directory operations management module."""
from pathlib import Path
from typing import List

from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem.paths import resolve_within


class DirectoryManager:
    """Handles directory operations only."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path).resolve()

    def ensure_directory(self, path: Path, permissions: int = 0o755) -> Path:
        """Create directory (and parents) if missing."""
        full_path = resolve_within(self.base_path, path)
        try:
            full_path.mkdir(mode=permissions, parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to create directory: {e}", path=str(full_path))
        return full_path

    def directory_exists(self, path: Path) -> bool:
        """Check if directory exists."""
        try:
            return resolve_within(self.base_path, path).is_dir()
        except FilesystemError:
            return False

    def list_files(self, path: Path) -> List[Path]:
        """Regular files directly under a directory, sorted by name."""
        full_path = resolve_within(self.base_path, path)
        try:
            return sorted(p for p in full_path.iterdir() if p.is_file())
        except OSError as e:
            raise FilesystemError(f"Failed to list directory: {e}", path=str(full_path))

    def remove_file(self, path: Path) -> None:
        full_path = resolve_within(self.base_path, path)
        try:
            full_path.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to remove file: {e}", path=str(full_path))
