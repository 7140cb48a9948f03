"""Audit archive retention"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from auditor.core.exceptions import ArchiveParseError
from auditor.core.models import FileConfig
from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.audit.archive import (archive_timestamp_segment,
                                                  restore_timestamp)
from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem import DirectoryManager


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RetentionManager:
    """Deletes archives older than the configured retention window.

    An archive name whose timestamp cannot be parsed stops the sweep of
    that directory; entries after it are left for the next sweep.
    """

    def __init__(
        self,
        config: ProcessConfig,
        base_dir: Path,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.directories = DirectoryManager(base_dir)
        self.clock = clock or _utcnow

    @property
    def retention_days(self) -> int:
        options = self.config.options
        return options.max_retention_days if options is not None else 0

    def sweep(self, file_config: FileConfig) -> int:
        """Remove expired archives for one file. Returns the number removed."""
        days = self.retention_days
        if days <= 0 or not file_config.is_located:
            return 0

        logger = self.config.logger
        archive_dir = file_config.archive_dir
        if not self.directories.directory_exists(archive_dir):
            return 0

        try:
            entries = self.directories.list_files(archive_dir)
        except FilesystemError as e:
            logger.error("audit_archive_list_failed", archive_dir=str(archive_dir), error=str(e))
            return 0

        expire_date = self.clock() - timedelta(days=days)
        removed = 0

        for entry in entries:
            segment = archive_timestamp_segment(entry.name)
            if segment is None:
                continue

            try:
                archived_at = restore_timestamp(segment)
            except ArchiveParseError as e:
                logger.error(
                    "audit_archive_parse_failed",
                    archive=entry.name,
                    archive_dir=str(archive_dir),
                    error=e.message,
                )
                return removed

            if archived_at < expire_date:
                try:
                    self.directories.remove_file(entry)
                    removed += 1
                    logger.info(
                        "audit_archive_removed",
                        archive=entry.name,
                        age_days=(self.clock() - archived_at).days,
                    )
                except FilesystemError as e:
                    logger.error("audit_archive_removal_failed", archive=entry.name, error=str(e))
            else:
                logger.info(
                    "audit_archive_pending_expiry",
                    archive=entry.name,
                    retention_days=days,
                    expires_at=(archived_at + timedelta(days=days)).isoformat(),
                )

        return removed

    def sweep_all(self, file_configs) -> int:
        """Sweep every given file; used by the daily scheduler"""
        return sum(self.sweep(file_config) for file_config in file_configs)
