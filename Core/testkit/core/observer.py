from __future__ import annotations

from testkit.core.events import AfterClass, AfterTest, BeforeClass, BeforeTest, EndOfCase


class FixtureObserver:
    """Receives lifecycle phases. Every handler is a no-op unless overridden."""

    def on_before_class(self, event: BeforeClass) -> None:
        return None

    def on_before_test(self, event: BeforeTest) -> None:
        return None

    def on_after_test(self, event: AfterTest) -> None:
        return None

    def on_after_class(self, event: AfterClass) -> None:
        return None

    def on_end_of_case(self, event: EndOfCase) -> None:
        return None
