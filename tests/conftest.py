"""Pytest configuration and fixtures"""

import json
from pathlib import Path
from typing import Any, Dict, Generator, List
from unittest.mock import Mock

import pytest

from auditor.core.auditor import Audit
from auditor.core.models import AuditOptions, Destination
from auditor.core.process_config import ProcessConfig


@pytest.fixture
def base_dir(tmp_path: Path, monkeypatch) -> Path:
    """Temporary working directory the log folders are created in"""
    monkeypatch.chdir(tmp_path)
    return tmp_path.resolve()


@pytest.fixture
def logger() -> Mock:
    """Stand-in logger handle recording info/warning/error calls"""
    return Mock(spec=["info", "warning", "error", "debug"])


@pytest.fixture
def make_options(base_dir: Path, logger: Mock):
    def _make(**overrides: Any) -> AuditOptions:
        values: Dict[str, Any] = {"base_dir": base_dir, "logger": logger}
        values.update(overrides)
        return AuditOptions(**values)

    return _make


@pytest.fixture
def make_audit(make_options) -> Generator:
    """Build Audit instances; scheduler and capture hooks are stopped afterwards"""
    created: List[Audit] = []

    def _make(setup: bool = True, **overrides: Any) -> Audit:
        audit = Audit(make_options(**overrides))
        created.append(audit)
        if setup:
            audit.setup()
        return audit

    yield _make

    for audit in created:
        audit.shutdown()


@pytest.fixture
def initialized_config(make_options) -> ProcessConfig:
    """ProcessConfig already initialized with file output"""
    options = make_options(destinations=[Destination.FILE])
    config = ProcessConfig(logger=options.logger)
    config.initialize(options)
    return config


def read_lines(path: Path) -> List[Dict[str, Any]]:
    """Parsed NDJSON records of a log file"""
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


def logged_events(mock_method: Mock) -> List[str]:
    """First positional argument of every call made to a logger method"""
    return [c.args[0] for c in mock_method.call_args_list if c.args]
