from __future__ import annotations

from typing import Any, ClassVar, Mapping

from testkit.core.exceptions import ConfigurationError
from testkit.core.orchestrator import FixturesManager


class FixtureTestCase:
    """Base class for pytest test classes that rely on managed fixtures.

    Subclasses declare how fixtures are shared between their methods:

        class TestCheckout(FixtureTestCase):
            share_app = True
            share_db_fixture = True

            @classmethod
            def db_tables_to_load(cls):
                return {"orders": ORDERS}

    The defaults rebuild every fixture for every method.
    """

    share_app: ClassVar[bool] = False
    share_db_fixture: ClassVar[bool] = False
    share_browser_session: ClassVar[bool] = False
    share_cookies: ClassVar[bool] = False
    requires_browser: ClassVar[bool] = False

    _fixtures_manager: ClassVar[FixturesManager | None] = None

    app: Any = None
    db_fixture: Any = None
    browser_session: Any = None

    @classmethod
    def db_tables_to_load(cls) -> Mapping[str, Any]:
        return {}

    @staticmethod
    def use_fixtures_manager(manager: FixturesManager | None) -> None:
        FixtureTestCase._fixtures_manager = manager

    @classmethod
    def fixtures_manager(cls) -> FixturesManager:
        manager = FixtureTestCase._fixtures_manager
        if manager is None:
            raise ConfigurationError("Call FixtureTestCase.use_fixtures_manager() before running fixture test cases")
        return manager

    @classmethod
    def setup_class(cls) -> None:
        cls.fixtures_manager().before_class(cls)

    def setup_method(self, method=None) -> None:
        self.fixtures_manager().before_test(self)

    def teardown_method(self, method=None) -> None:
        self.fixtures_manager().after_test(self)

    @classmethod
    def teardown_class(cls) -> None:
        cls.fixtures_manager().after_class(cls)


class BrowserTestCase(FixtureTestCase):
    """Test class whose methods drive a remote browser."""

    requires_browser: ClassVar[bool] = True

    @property
    def driver(self):
        if self.browser_session is None:
            raise ConfigurationError("No browser session attached; setup_method has not run")
        return self.browser_session.driver
