from __future__ import annotations

import pytest

from testkit.core.exceptions import InvalidArgumentError, InvalidStateError
from testkit.web.locator import ElementLocator


def test_add_location_refuses_silent_overwrite():
    locator = ElementLocator()
    locator.add_location("x", ["id", "v"], False)

    with pytest.raises(InvalidStateError):
        locator.add_location("x", ["id", "w"], False)

    locator.add_location("x", ["id", "w"], True)
    assert locator.get_location("x") == ("id", "w")


@pytest.mark.parametrize(
    "location",
    [
        ["invalid_strategy", "valid_string_value"],
        ["name", ["array_instead_of_string_for_value"]],
        ["id", ""],
        ["", "value-is-ok-but-not-strategy"],
        ["id"],
        "id=login",
        None,
    ],
)
def test_add_location_rejects_malformed_locations(location):
    with pytest.raises(InvalidArgumentError):
        ElementLocator().add_location("alias", location)


def test_resolve_accepts_alias_or_pair():
    locator = ElementLocator()
    locator.add_location("logout", ("css selector", "#user .logout"))

    assert locator.resolve("logout") == ("css selector", "#user .logout")
    assert locator.resolve(["link text", "Logout"]) == ("link text", "Logout")
    assert locator.has_location("logout")
    assert locator.locations == {"logout": ("css selector", "#user .logout")}


def test_unknown_alias_and_clear():
    locator = ElementLocator()
    locator.add_location("form", ("tag name", "form"))
    locator.clear()

    assert not locator.has_location("form")
    with pytest.raises(InvalidStateError):
        locator.get_location("form")
