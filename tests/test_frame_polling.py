from typing import Any

from playwright.sync_api import Error as PlaywrightError

from xpathfinder.frame_polling import poll_until, wait_for_element_in_frame
from xpathfinder.settings import SynthesisSettings


class FakeClock:
    def __init__(self) -> None:
        self.now = 0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeFrame:
    def __init__(self, states: list[str], found_after: int, broken: bool = False) -> None:
        self.states = states
        self.found_after = found_after
        self.broken = broken
        self.state_calls = 0
        self.lookups: list[str] = []

    def evaluate(self, script: str) -> str:
        if self.broken:
            raise PlaywrightError("Frame was detached")
        state = self.states[min(self.state_calls, len(self.states) - 1)]
        self.state_calls += 1
        return state

    def query_selector(self, selector: str) -> Any:
        self.lookups.append(selector)
        return object() if len(self.lookups) >= self.found_after else None


class FakeFrameElement:
    def __init__(self, frame: FakeFrame | None) -> None:
        self.frame = frame

    def content_frame(self) -> FakeFrame | None:
        return self.frame


class FakePage:
    def __init__(self, element: FakeFrameElement | None) -> None:
        self.element = element

    def query_selector(self, selector: str) -> FakeFrameElement | None:
        return self.element


def test_poll_until_stops_at_first_success() -> None:
    clock = FakeClock()
    outcomes = iter([False, False, True, True])
    assert poll_until(lambda: next(outcomes), max_attempts=10, interval=1, timeout=100, sleep=clock.sleep, clock=clock)
    assert clock.sleeps == [1, 1]


def test_poll_until_is_bounded_by_attempts() -> None:
    clock = FakeClock()
    calls: list[int] = []

    def check() -> bool:
        calls.append(1)
        return False

    assert not poll_until(check, max_attempts=4, interval=1, timeout=100, sleep=clock.sleep, clock=clock)
    assert len(calls) == 4
    assert clock.sleeps == [1, 1, 1]


def test_poll_until_is_bounded_by_time() -> None:
    clock = FakeClock()
    calls: list[int] = []

    def check() -> bool:
        calls.append(1)
        return False

    assert not poll_until(check, max_attempts=30, interval=2, timeout=5, sleep=clock.sleep, clock=clock)
    assert len(calls) == 4
    assert clock.sleeps == [2, 2, 1]


def _settings() -> SynthesisSettings:
    return SynthesisSettings(frame_poll_attempts=6, frame_poll_interval=0.5, frame_poll_timeout=60.0)


def test_waits_for_frame_to_load_and_contain_element() -> None:
    clock = FakeClock()
    frame = FakeFrame(["loading", "complete"], found_after=2)
    page = FakePage(FakeFrameElement(frame))

    found = wait_for_element_in_frame(page, "//iframe", "//button", _settings(), sleep=clock.sleep, clock=clock)

    assert found
    assert frame.lookups == ["xpath=//button", "xpath=//button"]
    assert len(clock.sleeps) == 2


def test_missing_frame_or_non_frame_element_fails_immediately() -> None:
    clock = FakeClock()
    assert not wait_for_element_in_frame(FakePage(None), "//iframe", "//button", _settings(), sleep=clock.sleep, clock=clock)
    assert not wait_for_element_in_frame(
        FakePage(FakeFrameElement(None)), "//div", "//button", _settings(), sleep=clock.sleep, clock=clock
    )
    assert clock.sleeps == []


def test_frame_errors_count_as_failed_attempts() -> None:
    clock = FakeClock()
    frame = FakeFrame(["complete"], found_after=1, broken=True)
    page = FakePage(FakeFrameElement(frame))

    assert not wait_for_element_in_frame(page, "//iframe", "//button", _settings(), sleep=clock.sleep, clock=clock)
    assert len(clock.sleeps) == 5


def test_element_never_appearing_exhausts_attempts() -> None:
    clock = FakeClock()
    frame = FakeFrame(["complete"], found_after=99)
    page = FakePage(FakeFrameElement(frame))

    assert not wait_for_element_in_frame(page, "//iframe", "//button", _settings(), sleep=clock.sleep, clock=clock)
    assert len(frame.lookups) == 6
