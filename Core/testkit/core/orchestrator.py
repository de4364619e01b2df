from __future__ import annotations

import logging
import os
from typing import Any, Callable

from testkit.core.dispatcher import Dispatcher
from testkit.core.events import AfterClass, AfterTest, BeforeClass, BeforeTest, EndOfCase, PhaseEvent, case_name
from testkit.core.exceptions import ConfigurationError
from testkit.core.observer import FixtureObserver
from testkit.core.policy import SharingPolicy

log = logging.getLogger(__name__)


class FixturesManager:
    """Turns harness hooks into phase events for the registered fixture managers.

    The process id seen at construction is kept as ``initial_pid``. A test
    method run in a forked child sees a different id, which is how
    ``after_class`` tells a real end of case from the end of one isolated
    method.
    """

    def __init__(
        self,
        dispatcher: Dispatcher | None = None,
        pid_provider: Callable[[], int] = os.getpid,
    ) -> None:
        self.dispatcher = dispatcher or Dispatcher()
        self._pid_provider = pid_provider
        self.initial_pid = pid_provider()

    def register(self, observer: FixtureObserver) -> FixtureObserver:
        self.dispatcher.register(observer)
        return observer

    def current_pid(self) -> int:
        return self._pid_provider()

    def in_initial_process(self) -> bool:
        return self.current_pid() == self.initial_pid

    def before_class(self, case_type: type) -> SharingPolicy:
        policy = SharingPolicy.from_case(case_type)
        self._dispatch(BeforeClass(case_type=case_type, policy=policy))
        return policy

    def before_test(self, case: Any, isolated: bool | None = None) -> None:
        self._dispatch(BeforeTest(case=case, isolated=self._isolated(isolated)))

    def after_test(self, case: Any, isolated: bool | None = None) -> None:
        self._dispatch(AfterTest(case=case, isolated=self._isolated(isolated)))

    def after_class(self, case_type: type) -> bool:
        case_ended = self.in_initial_process()
        self._dispatch(AfterClass(case_type=case_type, case_ended=case_ended))
        self._dispatch(EndOfCase(case_type=case_type))
        return case_ended

    def _isolated(self, isolated: bool | None) -> bool:
        if isolated is None:
            return not self.in_initial_process()
        return isolated

    def _dispatch(self, event: PhaseEvent) -> None:
        if not self.dispatcher.observers:
            raise ConfigurationError("No fixture observers registered before the first phase")
        log.debug("Phase %s for %s (pid=%s)", type(event).__name__, case_name(event), self.current_pid())
        self.dispatcher.dispatch(event)
