"""Initialize-once configuration shared by every pipeline component.

One ``ProcessConfig`` is created per ``Audit`` and handed to each component
at construction. Components keep the reference and read ``options`` on every
call, so nothing works from a stale copy.
"""

import threading
from typing import Any, Optional

from auditor.core.exceptions import NotInitializedError
from auditor.core.models.options import AuditOptions
from auditor.core.types import LoggerHandle
from auditor.infrastructure.logging import get_logger


class ProcessConfig:
    """Holds the active options once setup has run"""

    def __init__(self, logger: Optional[Any] = None):
        self._fallback_logger = logger or get_logger("auditor")
        self._options: Optional[AuditOptions] = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def options(self) -> Optional[AuditOptions]:
        return self._options

    @property
    def logger(self) -> LoggerHandle:
        if self._options is not None and self._options.logger is not None:
            return self._options.logger
        return self._fallback_logger

    def require_options(self) -> AuditOptions:
        """Active options, or NotInitializedError before setup"""
        if not self._initialized or self._options is None:
            raise NotInitializedError()
        return self._options

    def initialize(self, options: AuditOptions) -> bool:
        """Store the options once; later calls only warn"""
        with self._lock:
            if self._initialized:
                self.logger.warning("audit_already_initialized")
                return False
            self._options = options
            self._initialized = True
            return True
