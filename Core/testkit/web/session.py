from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver import ChromeOptions, FirefoxOptions
from selenium.webdriver.remote.client_config import ClientConfig
from selenium.webdriver.remote.remote_connection import RemoteConnection
from urllib3 import Timeout
from urllib3.exceptions import HTTPError

from testkit.config.schema import RemoteEndpoint
from testkit.core.exceptions import TransportError

log = logging.getLogger(__name__)


@contextmanager
def remote_call(action: str) -> Iterator[None]:
    try:
        yield
    except (WebDriverException, HTTPError, OSError) as exc:
        raise TransportError(f"Remote endpoint failed to {action}: {exc}") from exc


class BrowserSession:
    """A remote WebDriver session and the channel its commands travel on.

    ``quit`` drops the command channel, so a session object that outlives its
    remote counterpart reports itself as not ready.
    """

    def __init__(self, driver) -> None:
        self.driver = driver
        self.session_id: str | None = getattr(driver, "session_id", None)
        self.command_channel = getattr(driver, "command_executor", None)

    @property
    def is_ready(self) -> bool:
        return self.command_channel is not None

    def quit(self) -> None:
        channel, self.command_channel = self.command_channel, None
        if channel is None:
            return
        with remote_call("quit the session"):
            self.driver.quit()

    def get_cookies(self) -> list[dict]:
        with remote_call("list cookies"):
            return self.driver.get_cookies()

    def delete_all_cookies(self) -> None:
        with remote_call("delete cookies"):
            self.driver.delete_all_cookies()


class RemoteSessionFactory:
    """Opens sessions on a Selenium server or grid."""

    def __init__(self, endpoint: RemoteEndpoint) -> None:
        self.endpoint = endpoint

    def open_session(self) -> BrowserSession:
        connection = RemoteConnection(client_config=self.client_config())
        with remote_call(f"open a session at {self.endpoint.url}"):
            driver = webdriver.Remote(command_executor=connection, options=self.build_options())
        log.info("Opened %s session %s", self.endpoint.browser_name, driver.session_id)
        return BrowserSession(driver)

    def client_config(self) -> ClientConfig:
        endpoint = self.endpoint
        timeout = None
        if endpoint.connection_timeout is not None or endpoint.request_timeout is not None:
            timeout = Timeout(connect=endpoint.connection_timeout, read=endpoint.request_timeout)
        return ClientConfig(remote_server_addr=endpoint.url, timeout=timeout)

    def build_options(self):
        if self.endpoint.browser_name == "chrome":
            options = ChromeOptions()
            if self.endpoint.headless:
                options.add_argument("--headless=new")
            options.add_argument("--window-size=1440,1200")
        else:
            options = FirefoxOptions()
            if self.endpoint.headless:
                options.add_argument("-headless")
        for name, value in self.endpoint.capabilities.items():
            if name != "browserName":
                options.set_capability(name, value)
        return options
