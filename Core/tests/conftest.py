from __future__ import annotations

from pathlib import Path

import pytest

from testkit.case import FixtureTestCase
from testkit.config.loader import ConfigLoader
from testkit.logging.audit import LifecycleAuditLogger
from tests.helpers import FakePid


@pytest.fixture()
def pid():
    return FakePid()


@pytest.fixture()
def audit_logger(tmp_path):
    return LifecycleAuditLogger(tmp_path / "artifacts")


@pytest.fixture()
def suite_config():
    config_path = Path(__file__).resolve().parents[1] / "config" / "suite.json"
    return ConfigLoader.load(config_path)


@pytest.fixture(autouse=True)
def detach_fixtures_manager():
    yield
    FixtureTestCase.use_fixtures_manager(None)
