from __future__ import annotations

import os
from typing import Any, Callable

from testkit.config.loader import configure_logging
from testkit.config.schema import SuiteConfig
from testkit.core.orchestrator import FixturesManager
from testkit.fixtures.app import ApplicationFixtureManager, ApplicationSlot, create_flask_app
from testkit.fixtures.app_config import DirectoryConfigProvider
from testkit.fixtures.db import DatabaseFixtureManager
from testkit.logging.audit import LifecycleAuditLogger
from testkit.web.manager import BrowserSessionFixtureManager


def build_fixtures_manager(
    config: SuiteConfig,
    pid_provider: Callable[[], int] = os.getpid,
    slot: ApplicationSlot | None = None,
    app_factory: Callable[[Any], Any] = create_flask_app,
    session_factory=None,
) -> FixturesManager:
    """Registers the fixture managers the config asks for.

    Order matters: the config provider must know the case directory before
    the application is built, and database tables may need the application.
    """

    configure_logging(config.log_level)
    audit_logger = LifecycleAuditLogger(config.audit_root) if config.audit_root else None
    manager = FixturesManager(pid_provider=pid_provider)
    if config.app_config:
        provider = manager.register(DirectoryConfigProvider(config.app_config))
        manager.register(
            ApplicationFixtureManager(
                config_provider=provider,
                slot=slot,
                app_factory=app_factory,
                audit_logger=audit_logger,
            )
        )
    if config.database_url:
        manager.register(DatabaseFixtureManager(config.database_url, audit_logger=audit_logger))
    manager.register(
        BrowserSessionFixtureManager(
            endpoint=config.browser,
            session_factory=session_factory,
            audit_logger=audit_logger,
        )
    )
    return manager
