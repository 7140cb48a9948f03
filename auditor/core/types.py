"""Common type definitions for Auditor"""

from typing import Any, Callable, Dict, Protocol

# Type aliases
Payload = Dict[str, Any]
Task = Callable[[], Any]


# Protocols
class LoggerHandle(Protocol):
    """Protocol for the logger audit diagnostics and console output go to"""

    def info(self, event: Any, **kwargs: Any) -> Any: ...

    def warning(self, event: Any, **kwargs: Any) -> Any: ...

    def error(self, event: Any, **kwargs: Any) -> Any: ...
