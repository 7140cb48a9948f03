"""Fan-out of normalized records to console, file and remote destinations"""

import json
import threading
from pathlib import Path
from typing import Dict, Optional

from auditor.core.models import Destination, EventRecord, FileConfig
from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.audit.registry import FileRegistry
from auditor.infrastructure.audit.rotation import RotationManager
from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem import FileWriter
from auditor.infrastructure.remote import RemoteSink

# Fixed attempt order within one dispatch
DESTINATION_ORDER = (Destination.CONSOLE, Destination.FILE, Destination.REMOTE)


class Dispatcher:
    """Delivers a record to each configured destination independently.

    A failure in one destination is logged and never prevents the others.
    Rotation and append for the same file are serialised by a per-file lock
    so one process never interleaves them.
    """

    def __init__(
        self,
        config: ProcessConfig,
        registry: FileRegistry,
        rotation: RotationManager,
        remote: RemoteSink,
    ):
        self.config = config
        self.registry = registry
        self.rotation = rotation
        self.remote = remote
        self.writer = FileWriter(registry.base_dir)
        self._file_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def dispatch(self, record: EventRecord, explicit_file: Optional[FileConfig] = None) -> None:
        logger = self.config.logger
        if not self.config.is_initialized:
            logger.error("audit_not_initialized", detail="Not initialized. Setup is required")
            return

        options = self.config.options
        for destination in DESTINATION_ORDER:
            if not options.has_destination(destination):
                continue
            try:
                if destination is Destination.CONSOLE:
                    self._to_console(record)
                elif destination is Destination.FILE:
                    self._to_file(record, explicit_file)
                else:
                    self.remote.send(record.to_payload(include_internal=False))
            except Exception as e:
                logger.error(
                    "audit_destination_failed",
                    destination=destination.value,
                    event_id=record.id,
                    error=str(e),
                )

    def _to_console(self, record: EventRecord) -> None:
        self.config.logger.info(record.to_payload(include_internal=False))

    def _to_file(self, record: EventRecord, explicit_file: Optional[FileConfig]) -> None:
        file_config = explicit_file or self.registry.resolve(record.type)
        if not file_config.is_located:
            self.config.logger.error(
                "audit_file_path_missing",
                detail="Unable to locate file path",
                file_name=file_config.file_name,
            )
            return

        line = json.dumps(record.to_payload(), default=str, ensure_ascii=False)
        with self._lock_for(file_config.full_path):
            self.rotation.maybe_rotate(file_config)
            try:
                self.writer.append_line(Path(file_config.full_path), line)
            except FilesystemError as e:
                self.config.logger.error(
                    "audit_file_write_failed",
                    file=file_config.full_path,
                    error=str(e),
                )

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._file_locks.get(path)
            if lock is None:
                lock = self._file_locks[path] = threading.Lock()
            return lock
