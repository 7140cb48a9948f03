from auditor.core.models.event import (Destination, EventRecord, EventType,
                                      generate_id, get_timestamp)
from auditor.core.models.file_config import (FileConfig, combined_file_config,
                                            default_file_configs)
from auditor.core.models.options import AuditOptions, RemoteConfig

__all__ = [
    "Destination",
    "EventRecord",
    "EventType",
    "FileConfig",
    "AuditOptions",
    "RemoteConfig",
    "combined_file_config",
    "default_file_configs",
    "generate_id",
    "get_timestamp",
]
