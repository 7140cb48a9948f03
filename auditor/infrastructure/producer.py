"""Event producers: integrations that turn host activity into audit events"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from auditor.core.auditor import Audit


class EventProducer(ABC):
    """Base class for producers.

    A producer only ever calls ``Audit.log``; the pipeline never sees
    framework request/response or ORM types.
    """

    name: str = "producer"

    def __init__(self, audit: "Audit"):
        self.audit = audit

    @abstractmethod
    def install(self, target: Any) -> Any:
        """Attach to the host object (app, session factory, ...)"""
        pass
