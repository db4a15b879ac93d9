import json
from datetime import timedelta

import pytest

from focus_tracker.clock import FrozenClock
from focus_tracker.errors import ConflictError, NotFoundError
from focus_tracker.services.local_mirror import LocalTimerMirror
from focus_tracker.services.timer_state import TimerStatus

from .conftest import T0


@pytest.fixture
def mirror_clock():
    return FrozenClock(T0)


@pytest.fixture
def mirror(tmp_path, mirror_clock):
    return LocalTimerMirror(tmp_path / "timer.json", mirror_clock)


def test_offline_scenario_matches_server_formula(mirror, mirror_clock):
    mirror.start("task-1", duration_limit=1500)
    mirror_clock.advance(minutes=12)
    assert mirror.pause().elapsed_at_pause == 720
    mirror_clock.advance(minutes=8)
    mirror.resume()
    mirror_clock.advance(minutes=5)
    assert mirror.effective_elapsed() == 1020
    stopped = mirror.stop()
    assert stopped.total_duration == 1020
    assert mirror.status is TimerStatus.STOPPED


def test_mirror_enforces_transitions(mirror, mirror_clock):
    with pytest.raises(NotFoundError):
        mirror.pause()
    mirror.start("task-1")
    with pytest.raises(ConflictError):
        mirror.start("task-2")
    with pytest.raises(NotFoundError):
        mirror.resume()
    mirror_clock.advance(5)
    mirror.pause()
    with pytest.raises(NotFoundError):
        mirror.pause()
    assert mirror.session.elapsed_at_pause == 5


def test_state_survives_restart(tmp_path, mirror, mirror_clock):
    mirror.start("task-1")
    mirror_clock.advance(30)
    mirror.pause()
    mirror_clock.advance(10)
    mirror.resume()

    mirror_clock.advance(20)
    restored = LocalTimerMirror(tmp_path / "timer.json", mirror_clock)
    assert restored.status is TimerStatus.RUNNING
    assert restored.effective_elapsed() == 50


def test_reconcile_adopts_server_record(tmp_path, mirror, mirror_clock):
    mirror.start("local-task")
    server_payload = {
        "id": "server-id",
        "taskId": "server-task",
        "startTime": "2024-01-01T00:00:00Z",
        "isRunning": False,
        "elapsedAtPause": 300,
        "durationLimit": None,
        "endTime": None,
    }
    mirror_clock.advance(hours=1)
    session = mirror.reconcile(server_payload)
    assert session.id == "server-id"
    assert mirror.status is TimerStatus.PAUSED
    assert mirror.effective_elapsed() == 300

    saved = json.loads((tmp_path / "timer.json").read_text(encoding="utf-8"))
    assert saved["session"]["task_id"] == "server-task"

    assert mirror.reconcile(None) is None
    assert mirror.status is TimerStatus.NONE
