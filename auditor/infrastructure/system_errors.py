"""Process-level error, signal and exit capture"""

import atexit
import signal
import sys
import threading
import traceback
from typing import TYPE_CHECKING, Any, Dict, Optional

from auditor.core.models import EventType
from auditor.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from auditor.core.auditor import Audit

logger = get_logger(__name__)

CAPTURED_SIGNALS = ("SIGTERM", "SIGINT")


class SystemErrorCapture:
    """Writes a final event for uncaught exceptions, termination signals and exit.

    Everything lands in the error file. Signal handlers can only be
    installed from the main thread; elsewhere they are skipped.
    """

    def __init__(self, audit: "Audit"):
        self.audit = audit
        self.installed = False
        self._previous_excepthook = None
        self._previous_thread_hook = None
        self._previous_signals: Dict[int, Any] = {}

    def install(self) -> None:
        if self.installed:
            return

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._on_uncaught
        self._previous_thread_hook = threading.excepthook
        threading.excepthook = self._on_thread_uncaught

        if threading.current_thread() is threading.main_thread():
            for name in CAPTURED_SIGNALS:
                signum = getattr(signal, name, None)
                if signum is None:
                    continue
                self._previous_signals[signum] = signal.signal(signum, self._on_signal)
        else:
            logger.warning("audit_signal_capture_skipped", reason="not main thread")

        atexit.register(self._on_exit)
        self.installed = True

    def uninstall(self) -> None:
        if not self.installed:
            return

        sys.excepthook = self._previous_excepthook or sys.__excepthook__
        threading.excepthook = self._previous_thread_hook or threading.__excepthook__
        for signum, handler in self._previous_signals.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous_signals.clear()
        atexit.unregister(self._on_exit)
        self.installed = False

    def _write(self, event: Dict[str, Any]) -> None:
        self.audit.log(event, file_category=EventType.ERROR.value)

    def _error_event(self, error: BaseException, outcome: str, origin: Optional[str] = None):
        event = {
            "type": EventType.ERROR.value,
            "action": "unknown",
            "message": f"an {outcome}",
            "outcome": outcome,
            "error": f"{type(error).__name__}: {error}",
            "fullStack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
        if origin:
            event["origin"] = origin
        return event

    def _on_uncaught(self, exc_type, exc_value, exc_tb) -> None:
        if exc_value is not None:
            self._write(self._error_event(exc_value, "uncaughtException", "main"))
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc_value, exc_tb)

    def _on_thread_uncaught(self, args) -> None:
        if args.exc_value is not None:
            origin = args.thread.name if args.thread is not None else "thread"
            self._write(self._error_event(args.exc_value, "uncaughtException", origin))
        previous = self._previous_thread_hook or threading.__excepthook__
        previous(args)

    def _on_signal(self, signum, frame) -> None:
        name = signal.Signals(signum).name
        self._write(
            {
                "type": "signal",
                "action": "terminated",
                "message": "app was terminated",
                "outcome": name,
                "signal": name,
            }
        )
        sys.exit(0)

    def _on_exit(self) -> None:
        self._write(
            {
                "type": EventType.SYSTEM.value,
                "action": "exit",
                "message": "app was exited",
                "outcome": "exit",
            }
        )
