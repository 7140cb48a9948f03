import secrets
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventType(str, Enum):
    """Well-known event categories"""
    AUTH = "auth"
    BILLING = "billing"
    SYSTEM = "system"
    ERROR = "error"
    REQUEST = "request"
    DB = "db"


class Destination(str, Enum):
    """Places an event record can be delivered to"""
    CONSOLE = "console"
    FILE = "file"
    REMOTE = "remote"


_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Time-ordered event id: base36 epoch millis plus 3 random bytes."""
    millis = int(time.time() * 1000)
    return f"{_to_base36(millis)}-{secrets.token_hex(3)}"


def get_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:20:30.123Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class EventRecord(BaseModel):
    """Canonical audit record.

    Extra fields (ip, userId, statusCode, stack, duration, ...) are carried
    through unchanged. ``timeStamp`` is only present when timestamps are
    enabled for the running configuration.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    # Written to files, never sent to the console or the remote sink
    INTERNAL_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"fullStack"})
    REQUIRED_FIELDS: ClassVar[tuple] = ("type", "action", "message")

    id: str = Field(..., description="Time-ordered identifier")
    type: str = Field(..., min_length=1, description="Event category")
    action: str = Field(..., min_length=1, description="What happened")
    message: str = Field(..., min_length=1, description="Human readable summary")
    timeStamp: Optional[str] = Field(None, description="Set only when timestamps are enabled")

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v

    def to_payload(self, include_internal: bool = True) -> Dict[str, Any]:
        """Serializable dict using the on-disk field names."""
        data = self.model_dump()
        if data.get("timeStamp") is None:
            data.pop("timeStamp", None)
        if not include_internal:
            for key in self.INTERNAL_FIELDS:
                data.pop(key, None)
        return data
