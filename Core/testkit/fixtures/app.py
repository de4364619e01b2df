from __future__ import annotations

import logging
import os
import runpy
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol, Sequence

from flask import Flask

from testkit.core.events import AfterClass, AfterTest, BeforeClass, BeforeTest
from testkit.core.exceptions import ConfigurationError
from testkit.core.observer import FixtureObserver
from testkit.logging.audit import LifecycleAuditLogger

log = logging.getLogger(__name__)


class AppConfigProvider(Protocol):
    def get_bootstrap_files(self) -> Sequence[str]: ...

    def get_server_vars(self) -> Mapping[str, str]: ...

    def get_app_config(self) -> Any: ...


class ApplicationSlot:
    """Holds the one application instance the suite may use at a time."""

    def __init__(self) -> None:
        self._app: Any = None

    @property
    def app(self) -> Any:
        return self._app

    @property
    def occupied(self) -> bool:
        return self._app is not None

    def install(self, app: Any) -> None:
        self._app = app

    def clear(self) -> Any:
        app, self._app = self._app, None
        return app


def create_flask_app(config: Mapping[str, Any]) -> Flask:
    settings = dict(config)
    import_name = settings.pop("import_name", "testkit_app")
    settings.setdefault("TESTING", True)
    app = Flask(import_name)
    app.config.update(settings)
    return app


class ApplicationFixtureManager(FixtureObserver):
    """Keeps a valid application instance in the slot for every test method.

    With ``share_app`` the instance built at before-class survives the whole
    case. Without it the instance is rebuilt after each method, so the next
    method starts from a fresh one. Isolated methods leave teardown to the
    after-class phase of their own process.
    """

    fixture_name = "app"

    def __init__(
        self,
        config_provider: AppConfigProvider | None = None,
        slot: ApplicationSlot | None = None,
        app_factory: Callable[[Any], Any] = create_flask_app,
        audit_logger: LifecycleAuditLogger | None = None,
    ) -> None:
        self.config_provider = config_provider
        self.slot = slot or ApplicationSlot()
        self.app_factory = app_factory
        self.audit_logger = audit_logger
        self.share_app = False
        self._case_name = ""
        self._executed_bootstrap_files: set[Path] = set()
        self._initial_environ: dict[str, str | None] = {}

    @property
    def app(self) -> Any:
        return self.slot.app

    def on_before_class(self, event: BeforeClass) -> None:
        self.share_app = event.policy.share_app
        self._case_name = event.case_type.__qualname__
        self.create()

    def on_before_test(self, event: BeforeTest) -> None:
        event.case.app = self.slot.app

    def on_after_test(self, event: AfterTest) -> None:
        if event.isolated:
            return
        if self.slot.occupied and not self.share_app:
            self.destroy()
        if not self.slot.occupied:
            self.create()

    def on_after_class(self, event: AfterClass) -> None:
        self.destroy()

    def create(self) -> Any:
        if self.config_provider is None:
            raise ConfigurationError("An application config provider must be set before creating the application")
        if self.slot.occupied:
            self.destroy()
        self._set_server_vars(self.config_provider.get_server_vars())
        self._run_bootstrap_files(self.config_provider.get_bootstrap_files())
        app = self.app_factory(self.config_provider.get_app_config())
        self.slot.install(app)
        log.info("Created application for %s", self._case_name or "<no case>")
        self._audit("create")
        return app

    def destroy(self) -> None:
        if not self.slot.occupied:
            return
        self.slot.clear()
        self._reset_server_vars()
        log.info("Destroyed application for %s", self._case_name or "<no case>")
        self._audit("destroy")

    def reset(self) -> Any:
        self.destroy()
        return self.create()

    def _set_server_vars(self, server_vars: Mapping[str, str]) -> None:
        for name, value in server_vars.items():
            if name not in self._initial_environ:
                self._initial_environ[name] = os.environ.get(name)
            os.environ[name] = str(value)

    def _reset_server_vars(self) -> None:
        for name, value in self._initial_environ.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value
        self._initial_environ = {}

    def _run_bootstrap_files(self, paths: Sequence[str]) -> None:
        for raw_path in paths:
            path = Path(raw_path).resolve()
            if path in self._executed_bootstrap_files:
                continue
            if not path.is_file():
                raise ConfigurationError(f"Bootstrap file does not exist: {path}")
            log.debug("Running bootstrap file %s", path)
            runpy.run_path(str(path), run_name="__testkit_bootstrap__")
            self._executed_bootstrap_files.add(path)

    def _audit(self, action: str) -> None:
        if self.audit_logger is not None:
            self.audit_logger.write(self.fixture_name, action, self._case_name)
