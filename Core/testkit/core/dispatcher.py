from __future__ import annotations

import logging

from testkit.core.events import AfterClass, AfterTest, BeforeClass, BeforeTest, EndOfCase, PhaseEvent
from testkit.core.exceptions import InvalidStateError
from testkit.core.observer import FixtureObserver

log = logging.getLogger(__name__)


class Dispatcher:
    """Delivers phase events to observers in registration order.

    The first handler that raises stops the dispatch: observers registered
    after it never see the event.
    """

    def __init__(self) -> None:
        self._observers: list[FixtureObserver] = []

    @property
    def observers(self) -> tuple[FixtureObserver, ...]:
        return tuple(self._observers)

    def register(self, observer: FixtureObserver) -> None:
        if any(item is observer for item in self._observers):
            raise InvalidStateError(f"{type(observer).__name__} is already registered")
        self._observers.append(observer)

    def unregister(self, observer: FixtureObserver) -> None:
        for index, item in enumerate(self._observers):
            if item is observer:
                del self._observers[index]
                return
        raise InvalidStateError(f"{type(observer).__name__} is not registered")

    def dispatch(self, event: PhaseEvent) -> None:
        for observer in self._observers:
            log.debug("Dispatching %s to %s", type(event).__name__, type(observer).__name__)
            self._deliver(observer, event)

    @staticmethod
    def _deliver(observer: FixtureObserver, event: PhaseEvent) -> None:
        match event:
            case BeforeClass():
                observer.on_before_class(event)
            case BeforeTest():
                observer.on_before_test(event)
            case AfterTest():
                observer.on_after_test(event)
            case AfterClass():
                observer.on_after_class(event)
            case EndOfCase():
                observer.on_end_of_case(event)
            case _:
                raise TypeError(f"Unsupported phase event: {type(event).__name__}")
