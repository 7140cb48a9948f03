"""Infrastructure layer exceptions."""

from typing import Optional


class InfrastructureError(Exception):
    """Base infrastructure error."""
    pass


class FilesystemError(InfrastructureError):
    """Filesystem operation error."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class RemoteDeliveryError(InfrastructureError):
    """Remote sink delivery error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
