from __future__ import annotations

from collections.abc import Sequence

from selenium.webdriver.common.by import By

from testkit.core.exceptions import InvalidArgumentError, InvalidStateError

STRATEGIES = frozenset(
    {
        By.ID,
        By.NAME,
        By.XPATH,
        By.CSS_SELECTOR,
        By.CLASS_NAME,
        By.TAG_NAME,
        By.LINK_TEXT,
        By.PARTIAL_LINK_TEXT,
    }
)


class ElementLocator:
    """Maps aliases to ``(strategy, value)`` pairs usable with ``find_element``.

        locator.add_location("login_form", ("id", "login-form"))
        driver.find_element(*locator.get_location("login_form"))
    """

    def __init__(self) -> None:
        self._locations: dict[str, tuple[str, str]] = {}

    def add_location(self, alias: str, location: Sequence[str], overwrite: bool = False) -> None:
        if not isinstance(alias, str) or not alias:
            raise InvalidArgumentError(f"Alias must be a non-empty string, got {alias!r}")
        if alias in self._locations and not overwrite:
            raise InvalidStateError(f"Alias '{alias}' already exists; pass overwrite=True to replace it")
        self._locations[alias] = self.parse(location)

    def get_location(self, alias: str) -> tuple[str, str]:
        try:
            return self._locations[alias]
        except KeyError as exc:
            raise InvalidStateError(f"Unknown location alias '{alias}'") from exc

    def has_location(self, alias: str) -> bool:
        return alias in self._locations

    @property
    def locations(self) -> dict[str, tuple[str, str]]:
        return dict(self._locations)

    def clear(self) -> None:
        self._locations = {}

    def resolve(self, location: str | Sequence[str]) -> tuple[str, str]:
        if isinstance(location, str):
            return self.get_location(location)
        return self.parse(location)

    @staticmethod
    def parse(location: Sequence[str]) -> tuple[str, str]:
        if not isinstance(location, Sequence) or isinstance(location, (str, bytes)) or len(location) != 2:
            raise InvalidArgumentError(f"Location must be a (strategy, value) pair, got {location!r}")
        strategy, value = location
        if not isinstance(strategy, str) or strategy not in STRATEGIES:
            raise InvalidArgumentError(f"Invalid location strategy {strategy!r}")
        if not isinstance(value, str) or not value:
            raise InvalidArgumentError(f"Location value must be a non-empty string, got {value!r}")
        return strategy, value
