from typing import Iterable


class AuditError(Exception):
    """Base class for audit pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotInitializedError(AuditError):
    def __init__(self, message: str = "Not initialized. Setup is required"):
        super().__init__(message)


class EventValidationError(AuditError):
    def __init__(self, missing_fields: Iterable[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Event is missing required field(s): {', '.join(self.missing_fields)}"
        )


class ArchiveParseError(AuditError):
    def __init__(self, file_name: str, reason: str = "unparsable timestamp"):
        self.file_name = file_name
        super().__init__(f"Cannot read archive timestamp from '{file_name}': {reason}")
