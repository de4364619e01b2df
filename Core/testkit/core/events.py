from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from testkit.core.policy import SharingPolicy


@dataclass(frozen=True, slots=True)
class BeforeClass:
    case_type: type
    policy: SharingPolicy


@dataclass(frozen=True, slots=True)
class BeforeTest:
    case: Any
    isolated: bool = False


@dataclass(frozen=True, slots=True)
class AfterTest:
    case: Any
    isolated: bool = False


@dataclass(frozen=True, slots=True)
class AfterClass:
    case_type: type
    case_ended: bool


@dataclass(frozen=True, slots=True)
class EndOfCase:
    case_type: type


PhaseEvent = Union[BeforeClass, BeforeTest, AfterTest, AfterClass, EndOfCase]


def case_name(event: PhaseEvent) -> str:
    if isinstance(event, (BeforeTest, AfterTest)):
        return type(event.case).__qualname__
    return event.case_type.__qualname__
