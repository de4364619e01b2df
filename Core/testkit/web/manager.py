from __future__ import annotations

import logging

from testkit.config.schema import RemoteEndpoint
from testkit.core.events import BeforeClass, BeforeTest, EndOfCase
from testkit.core.exceptions import InvalidStateError
from testkit.core.observer import FixtureObserver
from testkit.logging.audit import LifecycleAuditLogger
from testkit.web.session import BrowserSession, RemoteSessionFactory

log = logging.getLogger(__name__)


class BrowserSessionFixtureManager(FixtureObserver):
    """Provides a live browser session to every method of a browser case.

    Before each method the session is created when missing, recreated when
    the case does not share it, or stripped of its cookies when only the
    session is shared. Cases that do not require a browser are ignored.
    """

    fixture_name = "browser"

    def __init__(
        self,
        endpoint: RemoteEndpoint | None = None,
        session_factory=None,
        audit_logger: LifecycleAuditLogger | None = None,
    ) -> None:
        self.endpoint = endpoint or RemoteEndpoint()
        self.session_factory = session_factory or RemoteSessionFactory(self.endpoint)
        self.audit_logger = audit_logger
        self.session: BrowserSession | None = None
        self.driver_required: bool | None = None
        self.share_driver: bool | None = None
        self.share_cookies: bool | None = None
        self._case_name = ""

    def is_ready(self) -> bool:
        # a quit issued outside this manager leaves the wrapper but not its channel
        return self.session is not None and self.session.is_ready

    def on_before_class(self, event: BeforeClass) -> None:
        if not event.policy.requires_browser:
            self.driver_required = False
            self.share_driver = None
            self.share_cookies = None
            return
        self._case_name = event.case_type.__qualname__
        self.driver_required = True
        self.share_driver = event.policy.share_browser_session
        self.share_cookies = event.policy.share_cookies

    def on_before_test(self, event: BeforeTest) -> None:
        if not self.driver_required:
            return
        if not self.is_ready():
            self.create_session()
        elif not self.share_driver:
            self.destroy_session()
            self.create_session()
        elif not self.share_cookies:
            self.clear_cookies()
        else:
            log.debug("Reusing browser session %s", self.session.session_id)
        event.case.browser_session = self.session

    def on_end_of_case(self, event: EndOfCase) -> None:
        if self.driver_required and self.is_ready():
            self.destroy_session()
        self.driver_required = None
        self.share_driver = None
        self.share_cookies = None

    def create_session(self) -> BrowserSession:
        if self.is_ready():
            raise InvalidStateError("A browser session is already open; destroy it first")
        self.session = self.session_factory.open_session()
        self._audit("create")
        return self.session

    def destroy_session(self) -> None:
        session, self.session = self.session, None
        if session is None:
            return
        log.info("Closing browser session %s", session.session_id)
        self._audit("destroy")
        session.quit()

    def clear_cookies(self) -> None:
        if not self.is_ready():
            raise InvalidStateError("No live browser session to clear cookies on")
        self.session.delete_all_cookies()
        self._audit("clear_cookies")

    def list_cookies(self) -> list[dict]:
        if not self.is_ready():
            raise InvalidStateError("No live browser session to read cookies from")
        return self.session.get_cookies()

    def _audit(self, action: str) -> None:
        if self.audit_logger is not None:
            self.audit_logger.write(self.fixture_name, action, self._case_name)
