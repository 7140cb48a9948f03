"""SQLAlchemy session hooks producing db audit events"""

import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import ORMExecuteState, Session

from auditor.core.models import EventType
from auditor.infrastructure.middleware.context import get_request_context
from auditor.infrastructure.producer import EventProducer

if TYPE_CHECKING:
    from auditor.core.auditor import Audit

FLUSH_STARTED_KEY = "audit_flush_started"


def _model_name(obj: Any) -> str:
    return type(obj).__name__


def changed_fields(obj: Any) -> Dict[str, Any]:
    """New values of attributes modified since load"""
    changes = {}
    for attr in inspect(obj).attrs:
        history = attr.history
        if history.has_changes() and history.added:
            changes[attr.key] = history.added[0]
    return changes


def identity_of(obj: Any) -> Optional[List[Any]]:
    identity = inspect(obj).identity
    return list(identity) if identity is not None else None


class SQLAlchemyEventProducer(EventProducer):
    """Emits ``db`` events for ORM selects and flushed inserts, updates and deletes.

    ``install`` accepts anything SQLAlchemy session events can listen on: the
    ``Session`` class, a ``sessionmaker`` or a single session.
    """

    name = "sqlalchemy"

    def __init__(self, audit: "Audit"):
        super().__init__(audit)
        self._targets: List[Any] = []

    def install(self, target: Any) -> Any:
        event.listen(target, "do_orm_execute", self._on_execute)
        event.listen(target, "before_flush", self._before_flush)
        event.listen(target, "after_flush", self._after_flush)
        self._targets.append(target)
        return target

    def uninstall(self) -> None:
        for target in self._targets:
            event.remove(target, "do_orm_execute", self._on_execute)
            event.remove(target, "before_flush", self._before_flush)
            event.remove(target, "after_flush", self._after_flush)
        self._targets.clear()

    def _on_execute(self, state: ORMExecuteState):
        if not state.is_select or state.is_column_load or state.is_relationship_load:
            return None

        start = time.perf_counter()
        result = state.invoke_statement()
        duration = round((time.perf_counter() - start) * 1000, 2)

        models = sorted({m.class_.__name__ for m in state.all_mappers}) or ["unknown"]
        for model in models:
            self._emit("find", model, str(state.statement), duration)
        return result

    def _before_flush(self, session: Session, flush_context, instances) -> None:
        session.info[FLUSH_STARTED_KEY] = time.perf_counter()

    def _after_flush(self, session: Session, flush_context) -> None:
        started = session.info.pop(FLUSH_STARTED_KEY, None)
        duration = round((time.perf_counter() - started) * 1000, 2) if started else None

        for obj in session.new:
            self._emit("create", _model_name(obj), changed_fields(obj), duration)
        for obj in session.dirty:
            if session.is_modified(obj):
                criteria = {"identity": identity_of(obj), "changes": changed_fields(obj)}
                self._emit("update", _model_name(obj), criteria, duration)
        for obj in session.deleted:
            self._emit("delete", _model_name(obj), {"identity": identity_of(obj)}, duration)

    def _emit(self, action: str, model: str, criteria: Any, duration: Optional[float]) -> None:
        self.audit.log(
            {
                "type": EventType.DB.value,
                "action": action,
                "message": f"handling DB calls [Model:{model}]-[Action:{action}]",
                "collection": model,
                "criteria": criteria,
                "duration": duration,
                **get_request_context().as_event_fields(),
            },
            file_category=EventType.DB.value,
        )
