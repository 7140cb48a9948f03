"""In-process audit event pipeline with log file rotation and retention"""

from auditor.core.auditor import Audit
from auditor.core.models import (AuditOptions, Destination, EventRecord,
                                 EventType, FileConfig, RemoteConfig)

__version__ = "0.1.0"

__all__ = [
    "Audit",
    "AuditOptions",
    "Destination",
    "EventRecord",
    "EventType",
    "FileConfig",
    "RemoteConfig",
]
