from datetime import datetime, timedelta

from focus_tracker.clock import FrozenClock
from focus_tracker.services.timer_state import TimerStatus, effective_elapsed, interval_seconds, timer_status
from focus_tracker.models import TimerSession

T0 = datetime(2024, 1, 1, 0, 0, 0)


def test_paused_session_reports_stored_elapsed():
    assert effective_elapsed(42, False, T0, T0 + timedelta(hours=3)) == 42


def test_running_session_adds_current_interval():
    now = T0 + timedelta(minutes=5)
    assert effective_elapsed(100, True, T0, now) == 100 + 300


def test_partial_seconds_are_floored():
    assert effective_elapsed(0, True, T0, T0 + timedelta(seconds=10, milliseconds=999)) == 10


def test_clock_behind_start_time_counts_as_zero():
    assert interval_seconds(T0, T0 - timedelta(seconds=30)) == 0


def test_repeated_reads_with_fixed_clock_are_identical():
    clock = FrozenClock(T0 + timedelta(seconds=95))
    readings = {effective_elapsed(15, True, T0, clock.now()) for _ in range(50)}
    assert readings == {110}


def test_repeated_reads_with_moving_clock_never_decrease():
    clock = FrozenClock(T0)
    readings = []
    for _ in range(20):
        clock.advance(0.4)
        readings.append(effective_elapsed(0, True, T0, clock.now()))
    assert readings == sorted(readings)
    assert readings[-1] == 8


def test_status_from_session_fields():
    assert timer_status(None) is TimerStatus.NONE
    running = TimerSession(start_time=T0, is_running=True, elapsed_at_pause=0)
    paused = TimerSession(start_time=T0, is_running=False, elapsed_at_pause=10)
    stopped = TimerSession(start_time=T0, is_running=False, elapsed_at_pause=10, end_time=T0)
    assert timer_status(running) is TimerStatus.RUNNING
    assert timer_status(paused) is TimerStatus.PAUSED
    assert timer_status(stopped) is TimerStatus.STOPPED
