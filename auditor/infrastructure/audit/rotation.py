"""Audit log rotation: size check, archive copy and truncate"""

from pathlib import Path

from auditor.core.models import FileConfig
from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.audit.archive import archive_name
from auditor.infrastructure.audit.retention import RetentionManager
from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem import DirectoryManager, FileWriter


def format_bytes(size: int, decimals: int = 2) -> str:
    """Human readable byte count, e.g. 5242880 -> '5.0 MB'"""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, max(decimals, 0))} {units[index]}"


class RotationManager:
    """Archives and empties a log file once it reaches its size ceiling.

    The check-then-act here holds no lock; the dispatcher serialises calls
    per file within a process. Writers in other processes can still race.
    """

    def __init__(self, config: ProcessConfig, retention: RetentionManager, base_dir: Path):
        self.config = config
        self.retention = retention
        self.writer = FileWriter(base_dir)
        self.directories = DirectoryManager(base_dir)

    def maybe_rotate(self, file_config: FileConfig) -> bool:
        """Rotate if the file is at or over its ceiling. Never raises."""
        logger = self.config.logger
        if not file_config.is_located:
            return False

        path = Path(file_config.full_path)
        try:
            size = self.writer.file_size(path)
        except FilesystemError as e:
            logger.error("audit_rotation_stat_failed", file=str(path), error=str(e))
            return False

        if size < file_config.max_size_bytes:
            return False

        logger.warning(
            "audit_file_size_limit_reached",
            file_name=file_config.file_name,
            size=format_bytes(size),
            limit=format_bytes(file_config.max_size_bytes),
        )

        try:
            archive_dir = self.directories.ensure_directory(file_config.archive_dir)
            archive_path = self.writer.copy_file(
                path, archive_dir / archive_name(file_config.file_name)
            )
            self.writer.truncate(path)
        except FilesystemError as e:
            logger.error(
                "audit_rotation_failed",
                file=str(path),
                error=str(e),
            )
            return False

        logger.info(
            "audit_file_rotated",
            file_name=file_config.file_name,
            archive=str(archive_path),
            archived_bytes=size,
        )

        self.retention.sweep(file_config)
        return True
