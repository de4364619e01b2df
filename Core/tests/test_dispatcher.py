from __future__ import annotations

import pytest

from testkit.core.dispatcher import Dispatcher
from testkit.core.events import AfterClass, BeforeTest, EndOfCase
from testkit.core.exceptions import InvalidStateError
from testkit.core.observer import FixtureObserver
from tests.helpers import CaseInstance, RecordingObserver, make_case_type


def test_dispatch_follows_registration_order():
    calls = []
    dispatcher = Dispatcher()
    for name in ("app", "db", "browser"):
        dispatcher.register(RecordingObserver(name, calls))

    event = BeforeTest(case=CaseInstance())
    dispatcher.dispatch(event)

    assert [name for name, _, _ in calls] == ["app", "db", "browser"]
    assert all(item is event for _, _, item in calls)


def test_failing_observer_stops_dispatch():
    calls = []
    dispatcher = Dispatcher()
    dispatcher.register(RecordingObserver("first", calls))
    dispatcher.register(RecordingObserver("second", calls, fail_on="end_of_case"))
    dispatcher.register(RecordingObserver("third", calls))

    with pytest.raises(RuntimeError, match="second failed"):
        dispatcher.dispatch(EndOfCase(case_type=make_case_type()))

    assert [name for name, _, _ in calls] == ["first", "second"]


def test_routes_each_event_to_its_handler():
    calls = []
    dispatcher = Dispatcher()
    dispatcher.register(RecordingObserver("only", calls))
    case_type = make_case_type()

    dispatcher.dispatch(AfterClass(case_type=case_type, case_ended=True))
    dispatcher.dispatch(EndOfCase(case_type=case_type))

    assert [phase for _, phase, _ in calls] == ["after_class", "end_of_case"]


def test_base_observer_ignores_every_phase():
    dispatcher = Dispatcher()
    dispatcher.register(FixtureObserver())
    dispatcher.dispatch(BeforeTest(case=CaseInstance()))


def test_register_rejects_duplicates_and_unregister_unknown():
    dispatcher = Dispatcher()
    observer = RecordingObserver("app")
    dispatcher.register(observer)

    with pytest.raises(InvalidStateError):
        dispatcher.register(observer)

    dispatcher.unregister(observer)
    assert dispatcher.observers == ()
    with pytest.raises(InvalidStateError):
        dispatcher.unregister(observer)


def test_unknown_event_type_is_rejected():
    dispatcher = Dispatcher()
    dispatcher.register(FixtureObserver())
    with pytest.raises(TypeError):
        dispatcher.dispatch("setUp")
