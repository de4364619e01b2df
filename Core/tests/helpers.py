from __future__ import annotations

from itertools import count
from urllib import error, request

import pytest
from selenium.common.exceptions import WebDriverException

from testkit.core.observer import FixtureObserver
from testkit.web.session import BrowserSession

_session_ids = count(1)


class RecordingObserver(FixtureObserver):
    """Remembers every phase it sees, optionally failing on one of them."""

    def __init__(self, name: str, calls: list | None = None, fail_on: str | None = None) -> None:
        self.name = name
        self.calls = calls if calls is not None else []
        self.fail_on = fail_on

    def _record(self, phase: str, event) -> None:
        self.calls.append((self.name, phase, event))
        if phase == self.fail_on:
            raise RuntimeError(f"{self.name} failed on {phase}")

    def on_before_class(self, event) -> None:
        self._record("before_class", event)

    def on_before_test(self, event) -> None:
        self._record("before_test", event)

    def on_after_test(self, event) -> None:
        self._record("after_test", event)

    def on_after_class(self, event) -> None:
        self._record("after_class", event)

    def on_end_of_case(self, event) -> None:
        self._record("end_of_case", event)


class FakePid:
    def __init__(self, value: int = 4242) -> None:
        self.value = value

    def __call__(self) -> int:
        return self.value


class FakeConfigProvider:
    def __init__(self, bootstrap_files=None, server_vars=None, app_config=None) -> None:
        self.bootstrap_files = list(bootstrap_files or [])
        self.server_vars = dict(server_vars or {})
        self.app_config = app_config if app_config is not None else {"SECRET_KEY": "test"}

    def get_bootstrap_files(self):
        return self.bootstrap_files

    def get_server_vars(self):
        return self.server_vars

    def get_app_config(self):
        return self.app_config


class CountingAppFactory:
    def __init__(self) -> None:
        self.created: list[object] = []

    def __call__(self, config):
        app = {"config": config, "serial": len(self.created) + 1}
        self.created.append(app)
        return app


class FakeCommandExecutor:
    pass


class FakeDriver:
    def __init__(self, fail_quit: bool = False) -> None:
        self.session_id = f"session-{next(_session_ids)}"
        self.command_executor = FakeCommandExecutor()
        self.cookies = [{"name": "sid", "value": "abc"}]
        self.quit_calls = 0
        self.delete_cookie_calls = 0
        self.fail_quit = fail_quit

    def quit(self) -> None:
        self.quit_calls += 1
        if self.fail_quit:
            raise WebDriverException("connection refused")

    def get_cookies(self):
        return list(self.cookies)

    def delete_all_cookies(self) -> None:
        self.delete_cookie_calls += 1
        self.cookies = []


class FakeSessionFactory:
    def __init__(self, fail_quit: bool = False, open_error: Exception | None = None) -> None:
        self.sessions: list[BrowserSession] = []
        self.fail_quit = fail_quit
        self.open_error = open_error

    def open_session(self) -> BrowserSession:
        if self.open_error is not None:
            raise self.open_error
        session = BrowserSession(FakeDriver(fail_quit=self.fail_quit))
        self.sessions.append(session)
        return session

    @property
    def drivers(self) -> list[FakeDriver]:
        return [session.driver for session in self.sessions]


class CaseInstance:
    app = None
    db_fixture = None
    browser_session = None


def make_case_type(name: str = "SampleCase", **attributes) -> type:
    return type(name, (), attributes)


def require_reachable_endpoint(url: str) -> None:
    try:
        with request.urlopen(url.rstrip("/") + "/status", timeout=2):
            return
    except (error.URLError, TimeoutError) as exc:
        pytest.skip(f"Remote automation endpoint is not reachable at {url}: {exc}")
