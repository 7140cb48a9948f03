"""Tests for destination fan-out"""

import threading
from unittest.mock import Mock

from auditor.core.models import AuditOptions, Destination, EventRecord, FileConfig
from auditor.core.process_config import ProcessConfig
from auditor.infrastructure.audit.dispatcher import Dispatcher
from auditor.infrastructure.audit.registry import FileRegistry
from auditor.infrastructure.audit.retention import RetentionManager
from auditor.infrastructure.audit.rotation import RotationManager
from conftest import logged_events, read_lines


def build(logger, base_dir, **options):
    config = ProcessConfig(logger=logger)
    registry = FileRegistry(config, base_dir)
    rotation = RotationManager(config, RetentionManager(config, base_dir), base_dir)
    remote = Mock()
    dispatcher = Dispatcher(config, registry, rotation, remote)
    if options:
        registry.prepare(options.get("split_files", False))
        config.initialize(AuditOptions(logger=logger, **options))
    return dispatcher


def record(**extra) -> EventRecord:
    return EventRecord(
        id="lw1abc-0a1b2c", type="auth", action="login", message="User logged in",
        timeStamp="2024-05-01T10:20:30.123Z", **extra,
    )


class TestDispatcher:
    """Test per-destination delivery"""

    def test_not_initialized(self, logger, base_dir):
        dispatcher = build(logger, base_dir)

        dispatcher.dispatch(record())

        logger.error.assert_called_once()
        assert logger.error.call_args.args[0] == "audit_not_initialized"
        dispatcher.remote.send.assert_not_called()

    def test_console_receives_payload(self, logger, base_dir):
        dispatcher = build(logger, base_dir, destinations=[Destination.CONSOLE])

        dispatcher.dispatch(record(fullStack="trace"))

        payload = logger.info.call_args.args[0]
        assert payload["id"] == "lw1abc-0a1b2c"
        assert payload["timeStamp"] == "2024-05-01T10:20:30.123Z"
        assert "fullStack" not in payload

    def test_file_line_matches_record(self, logger, base_dir):
        dispatcher = build(logger, base_dir, destinations=[Destination.FILE])

        dispatcher.dispatch(record(userId="42", fullStack="trace"))

        lines = read_lines(base_dir / "audit" / "audit.log")
        assert lines == [
            {
                "id": "lw1abc-0a1b2c", "type": "auth", "action": "login",
                "message": "User logged in", "timeStamp": "2024-05-01T10:20:30.123Z",
                "userId": "42", "fullStack": "trace",
            }
        ]

    def test_remote_receives_external_payload(self, logger, base_dir):
        dispatcher = build(logger, base_dir, destinations=[Destination.REMOTE])

        dispatcher.dispatch(record(fullStack="trace"))

        payload = dispatcher.remote.send.call_args.args[0]
        assert payload["id"] == "lw1abc-0a1b2c"
        assert "fullStack" not in payload

    def test_file_failure_does_not_stop_remote(self, logger, base_dir):
        dispatcher = build(
            logger, base_dir, destinations=[Destination.FILE, Destination.REMOTE]
        )
        dispatcher.rotation.maybe_rotate = Mock(side_effect=RuntimeError("disk gone"))

        dispatcher.dispatch(record())

        dispatcher.remote.send.assert_called_once()
        call = logger.error.call_args
        assert call.args[0] == "audit_destination_failed"
        assert call.kwargs["destination"] == "file"

    def test_console_failure_does_not_stop_file(self, logger, base_dir):
        logger.info.side_effect = RuntimeError("closed stream")
        dispatcher = build(
            logger, base_dir, destinations=[Destination.CONSOLE, Destination.FILE]
        )

        dispatcher.dispatch(record())

        assert len(read_lines(base_dir / "audit" / "audit.log")) == 1
        assert logger.error.call_args.kwargs["destination"] == "console"

    def test_destination_order(self, logger, base_dir):
        calls = []
        dispatcher = build(
            logger, base_dir,
            destinations=[Destination.REMOTE, Destination.FILE, Destination.CONSOLE],
        )
        logger.info.side_effect = lambda *a, **k: calls.append("console")
        dispatcher.rotation.maybe_rotate = Mock(side_effect=lambda f: calls.append("file"))
        dispatcher.remote.send.side_effect = lambda p: calls.append("remote")

        dispatcher.dispatch(record())

        assert calls == ["console", "file", "remote"]

    def test_missing_path_skipped(self, logger, base_dir):
        dispatcher = build(logger, base_dir, destinations=[Destination.FILE])
        unlocated = FileConfig(file_name="ghost.log", folder_name="ghost")

        dispatcher.dispatch(record(), unlocated)

        call = logger.error.call_args
        assert call.args[0] == "audit_file_path_missing"
        assert call.kwargs["detail"] == "Unable to locate file path"
        assert not (base_dir / "ghost").exists()

    def test_split_mode_routes_by_type(self, logger, base_dir):
        dispatcher = build(
            logger, base_dir, destinations=[Destination.FILE], split_files=True
        )

        dispatcher.dispatch(record())
        dispatcher.dispatch(
            EventRecord(id="x-000001", type="request", action="incoming request", message="GET / 200")
        )

        assert len(read_lines(base_dir / "audits" / "action.log")) == 1
        assert len(read_lines(base_dir / "audits" / "request.log")) == 1
        assert read_lines(base_dir / "audits" / "error.log") == []

    def test_explicit_file_overrides_routing(self, logger, base_dir):
        dispatcher = build(
            logger, base_dir, destinations=[Destination.FILE], split_files=True
        )

        dispatcher.dispatch(record(), dispatcher.registry.get("error.log"))

        assert len(read_lines(base_dir / "audits" / "error.log")) == 1
        assert read_lines(base_dir / "audits" / "action.log") == []

    def test_concurrent_writes_keep_whole_lines(self, logger, base_dir):
        dispatcher = build(logger, base_dir, destinations=[Destination.FILE])

        def write(worker: int):
            for n in range(25):
                dispatcher.dispatch(
                    EventRecord(
                        id=f"w{worker}-{n:06d}", type="auth", action="login",
                        message="x" * 200,
                    )
                )

        threads = [threading.Thread(target=write, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = read_lines(base_dir / "audit" / "audit.log")
        assert len(lines) == 200
        assert len({line["id"] for line in lines}) == 200
        assert "audit_destination_failed" not in logged_events(logger.error)
