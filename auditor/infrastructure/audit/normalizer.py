"""Raw event -> canonical EventRecord"""

from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from auditor.core.exceptions import EventValidationError
from auditor.core.models import EventRecord, generate_id, get_timestamp
from auditor.core.process_config import ProcessConfig


def missing_fields(raw: Mapping[str, Any]) -> List[str]:
    """Required fields that are absent or empty"""
    missing = []
    for name in EventRecord.REQUIRED_FIELDS:
        value = raw.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def validate_event(raw: Mapping[str, Any]) -> None:
    missing = missing_fields(raw)
    if missing:
        raise EventValidationError(missing)


class EventNormalizer:
    """Validates raw events and builds canonical records"""

    def __init__(self, config: ProcessConfig):
        self.config = config

    def normalize(self, raw: Mapping[str, Any]) -> Optional[EventRecord]:
        """Canonical record, or None after one diagnostic when the event is rejected"""
        try:
            validate_event(raw)
        except EventValidationError as e:
            self.config.logger.error(
                "audit_event_rejected",
                missing_fields=e.missing_fields,
                reason=e.message,
            )
            return None

        options = self.config.options
        data = {k: v for k, v in raw.items() if k not in ("id", "timeStamp")}
        data["id"] = generate_id()
        if options is not None and options.use_timestamp:
            data["timeStamp"] = get_timestamp()

        try:
            return EventRecord(**data)
        except ValidationError as e:
            self.config.logger.error("audit_event_rejected", reason=str(e))
            return None
