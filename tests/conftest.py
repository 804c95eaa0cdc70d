"""Shared fixtures for control mirror tests."""

import pytest

from binding.models import TypeTag
from binding.rebind import RebindController
from objectspace.local import Component, Control, ObjectSpace


class FakeTimer:
    def __init__(self, clock: "FakeClock", deadline: float, callback, args) -> None:
        self.clock = clock
        self.deadline = deadline
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Stands in for loop.call_later with a manually advanced clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback, *args) -> FakeTimer:
        timer = FakeTimer(self, self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [
                t for t in self.timers
                if not t.cancelled and not t.fired and t.deadline <= target
            ]
            if not due:
                break
            timer = min(due, key=lambda t: t.deadline)
            self.now = timer.deadline
            timer.fired = True
            timer.callback(*timer.args)
        self.now = target

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def space():
    """Object space with a mixer, a router and an unreachable amp."""
    space = ObjectSpace()

    mixer = Component("Mixer")
    mixer.add_control(Control("mute", TypeTag.BUTTON, False))
    mixer.add_control(Control("gain", TypeTag.KNOB, 0.0))
    mixer.add_control(Control("recall", TypeTag.TRIGGER, None))
    mixer.add_control(Control("label", TypeTag.TEXT, ""))
    space.add_component(mixer)

    router = Component("Router")
    router.add_control(Control("select", TypeTag.ENUM, "A"))
    router.add_control(Control("bypass", TypeTag.TOGGLE, True))
    space.add_component(router)

    space.add_component(Component("Amp", accessible=False))
    return space


@pytest.fixture
def make_controller(space, clock):
    def _make(count=5, identifiers=None, feedback=1.5, **kwargs):
        return RebindController(
            space,
            count=count,
            trigger_feedback_seconds=feedback,
            identifiers=identifiers or {},
            call_later=clock.call_later,
            **kwargs,
        )
    return _make
