"""Tests for the focus session timer and its registry."""

import pytest

from voicepath.focus.session import (
    CHECK_IN,
    NEEDS_HELP,
    PAUSED,
    RUNNING,
    FocusSession,
    FocusSessionRegistry,
    format_time,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestFormatTime:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "00:00:00"), (59, "00:00:59"), (61, "00:01:01"), (3725, "01:02:05"), (-5, "00:00:00")],
    )
    def test_format(self, seconds, expected):
        assert format_time(seconds) == expected


class TestFocusSession:
    def test_tick_only_counts_while_running(self, clock):
        session = FocusSession(task_id=1, clock=clock)
        assert session.tick() is False
        assert session.elapsed_seconds == 0
        session.start()
        session.tick()
        session.tick()
        assert session.elapsed_seconds == 2
        session.pause()
        assert session.state == PAUSED
        session.tick()
        assert session.elapsed_seconds == 2

    def test_check_in_due_after_interval(self, clock):
        session = FocusSession(task_id=1, check_in_interval_minutes=1, clock=clock)
        session.start()
        clock.advance(59)
        assert session.tick() is False
        clock.advance(1)
        assert session.tick() is True
        assert session.state == CHECK_IN
        assert session.to_dict()["showCheckIn"] is True
        assert session.is_active is False

    def test_going_well_resumes_and_resets_clock(self, clock):
        session = FocusSession(task_id=1, clock=clock)
        session.start()
        clock.advance(60)
        session.tick()
        session.going_well()
        assert session.state == RUNNING
        clock.advance(30)
        assert session.tick() is False
        clock.advance(30)
        assert session.tick() is True

    def test_need_help_stops_timer(self, clock):
        session = FocusSession(task_id=1, clock=clock)
        session.start()
        session.need_help()
        assert session.state == NEEDS_HELP
        assert session.tick() is False
        assert session.to_dict()["openAssistant"] is True

    def test_interval_defaults_to_one_minute(self, clock):
        session = FocusSession(task_id=1, check_in_interval_minutes=0, clock=clock)
        assert session.check_in_interval_seconds == 60

    def test_resumes_from_saved_time(self, clock):
        session = FocusSession(task_id=1, elapsed_seconds=3599, clock=clock)
        session.start()
        session.tick()
        assert session.to_dict()["elapsed"] == "01:00:00"

    def test_minimize_and_resume(self, clock):
        session = FocusSession(task_id=1, clock=clock)
        session.minimize()
        assert session.to_dict()["minimized"] is True
        session.resume()
        assert session.minimized is False


class TestRegistry:
    def test_one_session_per_task(self, clock):
        registry = FocusSessionRegistry(default_interval_minutes=5, clock=clock)
        first = registry.open(7, elapsed_seconds=10)
        first.start()
        again = registry.open(7)
        assert again is first
        assert len(registry) == 1
        assert first.check_in_interval_minutes == 5
        assert first.elapsed_seconds == 10

    def test_close_and_active(self, clock):
        registry = FocusSessionRegistry(clock=clock)
        registry.open(1).start()
        registry.open(2)
        assert list(registry.active()) == [1]
        assert registry.close(1).task_id == 1
        assert 1 not in registry
        assert registry.close(1) is None
        assert registry.get(2) is not None
