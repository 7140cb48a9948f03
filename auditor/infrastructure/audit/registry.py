"""Log file destinations and their locations on disk"""

from pathlib import Path
from typing import Dict, List, Optional

from auditor.core.models import (Destination, EventType, FileConfig,
                                 combined_file_config, default_file_configs)
from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem import DirectoryManager, FileWriter

# Split-mode category -> file; anything else goes to action.log
CATEGORY_FILES: Dict[str, str] = {
    EventType.ERROR.value: "error.log",
    EventType.REQUEST.value: "request.log",
    EventType.DB.value: "db.log",
    "action": "action.log",
}
FALLBACK_FILE = "action.log"


class FileRegistry:
    """Owns the combined file and the four split-mode files.

    Paths are resolved once by ``prepare`` during setup and reused by every
    write afterwards.
    """

    def __init__(self, config: ProcessConfig, base_dir: Optional[Path] = None):
        self.config = config
        self.base_dir = Path(base_dir or Path.cwd()).resolve()
        self.directories = DirectoryManager(self.base_dir)
        self.writer = FileWriter(self.base_dir)
        self.combined = combined_file_config()
        self.split_files: List[FileConfig] = default_file_configs()

    def configure_combined(self, folder_name: str, file_name: str) -> FileConfig:
        self.combined = FileConfig(
            file_name=file_name,
            folder_name=folder_name,
            max_size_bytes=self.combined.max_size_bytes,
        )
        return self.combined

    def set_max_size(self, max_size_bytes: int) -> None:
        for file_config in [self.combined, *self.split_files]:
            file_config.max_size_bytes = max_size_bytes

    def ensure_file(self, file_config: FileConfig) -> Path:
        """Create the folder (and an empty file) if missing; return the absolute path."""
        folder = self.directories.ensure_directory(Path(file_config.folder_name))
        return self.writer.touch(folder / file_config.file_name)

    def prepare(self, split_files: bool) -> List[FileConfig]:
        """Locate every file the active mode writes to.

        A file whose folder cannot be created keeps an empty ``full_path``;
        writes to it are skipped and logged by the dispatcher.
        """
        prepared = []
        for file_config in self._mode_files(split_files):
            try:
                file_config.full_path = str(self.ensure_file(file_config))
                prepared.append(file_config)
            except FilesystemError as e:
                self.config.logger.error(
                    "audit_file_setup_failed",
                    file_name=file_config.file_name,
                    folder_name=file_config.folder_name,
                    error=str(e),
                )
        return prepared

    def resolve(self, category: str) -> FileConfig:
        """File an event category is written to in the current mode"""
        options = self.config.options
        if options is None or not options.split_files:
            return self.combined
        return self.get(CATEGORY_FILES.get(category, FALLBACK_FILE))

    def get(self, file_name: str) -> FileConfig:
        for file_config in self.split_files:
            if file_config.file_name == file_name:
                return file_config
        raise KeyError(file_name)

    def active_files(self) -> List[FileConfig]:
        """Located files for the current mode, empty before setup or without file output"""
        options = self.config.options
        if options is None or not options.has_destination(Destination.FILE):
            return []
        return [f for f in self._mode_files(options.split_files) if f.is_located]

    def _mode_files(self, split_files: bool) -> List[FileConfig]:
        return list(self.split_files) if split_files else [self.combined]
