"""Audit facade: setup and the write API producers call into"""

import traceback
from typing import Any, Dict, Mapping, Optional, Type

import httpx

from auditor.core.config import Settings, get_settings
from auditor.core.models import AuditOptions, Destination, EventType
from auditor.core.models.file_config import COMBINED_FOLDER
from auditor.core.process_config import ProcessConfig
from auditor.core.types import LoggerHandle
from auditor.infrastructure.audit import (Dispatcher, EventNormalizer,
                                          FileRegistry, LogReader,
                                          RetentionManager, RetentionScheduler,
                                          RotationManager)
from auditor.infrastructure.middleware.audit import (StarletteEventProducer,
                                                     first_stack_line)
from auditor.infrastructure.middleware.context import get_request_context
from auditor.infrastructure.producer import EventProducer
from auditor.infrastructure.remote import RemoteSink
from auditor.infrastructure.system_errors import SystemErrorCapture

LOG_SUFFIX = ".log"

# FastAPI apps are Starlette apps; both take the same middleware
REQUEST_PRODUCERS: Dict[str, Type[EventProducer]] = {
    "fastapi": StarletteEventProducer,
    "starlette": StarletteEventProducer,
}


class Audit:
    """Entry point of the audit pipeline.

    Build it with options (or let them come from ``AUDITOR_*`` environment
    settings), optionally call ``set_file_config``, then ``setup`` once.
    ``log_event``, ``log`` and ``log_error`` never raise; every failure ends
    up as a logger call.
    """

    def __init__(
        self,
        options: Optional[AuditOptions] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.options = options or AuditOptions.from_settings(settings or get_settings())
        self.config = ProcessConfig(logger=self.options.logger)

        self.registry = FileRegistry(self.config, self.options.base_dir)
        self.registry.set_max_size(self.options.max_file_size_bytes)
        self.normalizer = EventNormalizer(self.config)
        self.retention = RetentionManager(self.config, self.registry.base_dir)
        self.rotation = RotationManager(self.config, self.retention, self.registry.base_dir)
        self.remote = RemoteSink(self.config, transport=transport, async_transport=async_transport)
        self.dispatcher = Dispatcher(self.config, self.registry, self.rotation, self.remote)
        self.scheduler = RetentionScheduler(self.config)
        self.reader = LogReader(self.config, self.registry)
        self.system_errors = SystemErrorCapture(self)

    @property
    def logger(self) -> LoggerHandle:
        return self.config.logger

    @property
    def is_initialized(self) -> bool:
        return self.config.is_initialized

    def set_file_config(
        self,
        folder_name: Optional[str] = None,
        file_name: Optional[str] = None,
        max_size_bytes: Optional[int] = None,
    ) -> None:
        """Override the combined file before setup"""
        if self.config.is_initialized:
            self.logger.warning("audit_file_config_ignored", reason="already initialized")
            return

        if not self.options.has_destination(Destination.FILE):
            self.logger.warning(
                "audit_file_config_ignored",
                reason="add file to destinations for this to work",
            )
            return

        if self.options.split_files:
            self.logger.info(
                "audit_file_config_ignored",
                reason="not supported when using split files",
            )
            return

        base_name = file_name or "audit"
        if not base_name.endswith(LOG_SUFFIX):
            base_name = f"{base_name}{LOG_SUFFIX}"
        combined = self.registry.configure_combined(folder_name or COMBINED_FOLDER, base_name)
        if max_size_bytes:
            combined.max_size_bytes = max_size_bytes

    def setup(self) -> bool:
        """Locate files and activate the configuration. A second call only warns."""
        if self.config.is_initialized:
            return self.config.initialize(self.options)

        if self.options.has_destination(Destination.FILE):
            self.registry.prepare(self.options.split_files)

        if not self.config.initialize(self.options):
            return False

        if self.options.capture_system_errors:
            self.system_errors.install()

        if self.options.max_retention_days > 0:
            self.scheduler.add_task(self.sweep_archives)
            self.scheduler.start()

        self.logger.info(
            "audit_setup_complete",
            destinations=[d.value for d in self.options.destinations],
            split_files=self.options.split_files,
            retention_days=self.options.max_retention_days,
        )
        return True

    def log_event(self, type: str, action: str, message: str, **extra: Any) -> None:
        """Record one event: ``log_event("auth", "login", "User logged in", userId=...)``"""
        self.log({**extra, "type": type, "action": action, "message": message})

    def log(self, event: Mapping[str, Any], file_category: Optional[str] = None) -> None:
        """Record a raw event. ``file_category`` overrides the file it is written to."""
        try:
            if not self.config.is_initialized:
                self.logger.error(
                    "audit_not_initialized", detail="Not initialized. Setup is required"
                )
                return

            record = self.normalizer.normalize(event)
            if record is None:
                return

            explicit_file = self.registry.resolve(file_category) if file_category else None
            self.dispatcher.dispatch(record, explicit_file)
        except Exception as e:
            self.logger.error("audit_log_failed", error=str(e))

    def log_error(self, error: BaseException, **extra: Any) -> None:
        """Record a caught exception as an ``error`` event"""
        status_code = getattr(error, "status_code", None) or getattr(error, "statusCode", None)
        event = {
            "type": EventType.ERROR.value,
            "action": "unknown",
            "outcome": "error",
            "method": "user called",
            "statusCode": status_code or 500,
            "message": str(error) or "an error occurred",
            "stack": first_stack_line(error),
            "fullStack": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
            **get_request_context().as_event_fields(),
            **extra,
        }
        self.log(event, file_category=EventType.ERROR.value)

    def request_logger(self, exclude_paths=None) -> EventProducer:
        """Producer for the configured framework; ``install(app)`` adds the middleware"""
        producer_class = REQUEST_PRODUCERS[self.options.framework]
        return producer_class(self, exclude_paths=exclude_paths)

    def audit_database(self, target: Any):
        """Install SQLAlchemy hooks on a Session class, sessionmaker or session"""
        if self.options.db_integration != "sqlalchemy":
            self.logger.warning(
                "audit_db_integration_disabled",
                db_integration=self.options.db_integration,
            )
            return None

        from auditor.infrastructure.database import SQLAlchemyEventProducer

        producer = SQLAlchemyEventProducer(self)
        producer.install(target)
        return producer

    def create_router(self):
        """FastAPI router serving ``GET /audit-log``, None unless the UI flag is on"""
        if not self.options.use_ui:
            self.logger.warning("audit_ui_disabled")
            return None

        from auditor.api.routes import create_audit_log_router

        return create_audit_log_router(self.reader)

    async def read_logs(self):
        return await self.reader.read_logs()

    def sweep_archives(self) -> int:
        """Retention sweep over every active file"""
        return self.retention.sweep_all(self.registry.active_files())

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.system_errors.uninstall()

    async def aclose(self) -> None:
        """Shut down and wait for remote deliveries still in flight"""
        self.shutdown()
        await self.remote.drain()
