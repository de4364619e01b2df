from __future__ import annotations

import pytest

from testkit.core.orchestrator import FixturesManager
from testkit.web.manager import BrowserSessionFixtureManager
from tests.helpers import make_case_type, require_reachable_endpoint


@pytest.mark.integration
def test_remote_session_lifecycle(suite_config):
    require_reachable_endpoint(suite_config.browser.url)
    browser = BrowserSessionFixtureManager(endpoint=suite_config.browser)
    manager = FixturesManager()
    manager.register(browser)
    case_type = make_case_type("RemoteCase", requires_browser=True, share_browser_session=True, browser_session=None)

    manager.before_class(case_type)
    try:
        case = case_type()
        manager.before_test(case)
        assert browser.is_ready()
        case.browser_session.driver.get("about:blank")
        manager.before_test(case_type())
        assert browser.list_cookies() == []
    finally:
        manager.after_class(case_type)

    assert not browser.is_ready()
