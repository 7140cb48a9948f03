"""Log file writing operations module."""
import shutil
from pathlib import Path

from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem.paths import resolve_within


class FileWriter:
    """Handles log file writes only: append, size, copy and truncate."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path).resolve()

    def touch(self, path: Path) -> Path:
        """Create the file empty if it is missing, never truncate."""
        full_path = resolve_within(self.base_path, path)
        try:
            full_path.touch(exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to create file: {e}", path=str(full_path))
        return full_path

    def append_line(self, path: Path, line: str) -> None:
        """Append one line of UTF-8 text."""
        full_path = resolve_within(self.base_path, path)
        try:
            with open(full_path, "a", encoding="utf-8") as f:
                f.write(line.rstrip("\n") + "\n")
        except OSError as e:
            raise FilesystemError(f"Failed to append to file: {e}", path=str(full_path))

    def file_size(self, path: Path) -> int:
        full_path = resolve_within(self.base_path, path)
        try:
            return full_path.stat().st_size
        except OSError as e:
            raise FilesystemError(f"Failed to stat file: {e}", path=str(full_path))

    def copy_file(self, source: Path, destination: Path) -> Path:
        """Copy file content and permissions."""
        source_path = resolve_within(self.base_path, source)
        dest_path = resolve_within(self.base_path, destination)
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source_path, dest_path)
            shutil.copymode(source_path, dest_path)
        except OSError as e:
            raise FilesystemError(f"Failed to copy file: {e}", path=str(source_path))
        return dest_path

    def truncate(self, path: Path) -> None:
        full_path = resolve_within(self.base_path, path)
        try:
            with open(full_path, "w", encoding="utf-8"):
                pass
        except OSError as e:
            raise FilesystemError(f"Failed to truncate file: {e}", path=str(full_path))
