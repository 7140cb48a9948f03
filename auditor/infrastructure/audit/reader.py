"""Read side of the audit files, consumed by the log endpoint"""

import json
from pathlib import Path
from typing import Any, Dict, List

from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.audit.registry import FileRegistry
from auditor.infrastructure.exceptions import FilesystemError
from auditor.infrastructure.filesystem import FileReader

_decoder = json.JSONDecoder()


def parse_records(content: str) -> List[Dict[str, Any]]:
    """Parse newline-delimited JSON.

    Older files hold indented multi-line objects; both forms are accepted.
    Anything unparsable up to the next newline is skipped.
    """
    records = []
    index = 0
    length = len(content)
    while index < length:
        while index < length and content[index].isspace():
            index += 1
        if index >= length:
            break
        try:
            obj, index = _decoder.raw_decode(content, index)
        except json.JSONDecodeError:
            newline = content.find("\n", index)
            index = length if newline == -1 else newline + 1
            continue
        if isinstance(obj, dict):
            records.append(obj)
    return records


class LogReader:
    """Returns every record of the active files, newest first"""

    def __init__(self, config: ProcessConfig, registry: FileRegistry):
        self.config = config
        self.registry = registry
        self.reader = FileReader(registry.base_dir)

    async def read_logs(self) -> List[Dict[str, Any]]:
        logs: List[Dict[str, Any]] = []
        for file_config in self.registry.active_files():
            try:
                content = await self.reader.read_text(Path(file_config.full_path))
            except FilesystemError as e:
                self.config.logger.error(
                    "audit_log_read_failed", file=file_config.full_path, error=str(e)
                )
                continue
            logs.extend(
                {"id": sequence, **record}
                for sequence, record in enumerate(parse_records(content))
            )

        logs.sort(key=lambda item: str(item.get("timeStamp") or ""), reverse=True)
        return logs
