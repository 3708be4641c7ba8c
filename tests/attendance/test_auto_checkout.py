from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from fakes import GYM_A, GYM_B, InMemoryAttendance, InMemoryGyms

from gym_attendance.attendance.auto_checkout import AutoCheckoutService
from gym_attendance.common.clock import Clock
from gym_attendance.gyms.model import Gym


def _open(repo, *, gym_id=GYM_A, member_id="row-1", at: datetime):
    return repo.insert_session(
        gym_id=gym_id, member_id=member_id, membership_id="ms-1", work_date=at.date(), check_in_time=at
    )


def test_forgotten_checkout_is_closed_at_end_of_yesterday():
    repo = InMemoryAttendance()
    forgotten = _open(repo, at=datetime(2026, 1, 31, 18, 0))
    svc = AutoCheckoutService(repo)

    result = svc.run_for_gym(GYM_A, now=datetime(2026, 2, 1, 0, 5))

    assert result.success is True
    assert result.count == 1
    assert result.message == "Auto-checkout completed for 1 members"
    closed = repo.get_by_id(forgotten.session_id)
    assert closed.check_out_time == datetime(2026, 1, 31, 23, 59, 59, 999000)
    assert closed.auto_checkout is True


def test_todays_open_sessions_are_left_alone():
    repo = InMemoryAttendance()
    today = _open(repo, at=datetime(2026, 2, 1, 7, 30))
    svc = AutoCheckoutService(repo)

    result = svc.run_for_gym(GYM_A, now=datetime(2026, 2, 1, 9, 0))

    assert result.count == 0
    assert result.message == "No pending checkouts found"
    assert repo.get_by_id(today.session_id).is_open


def test_second_run_changes_nothing():
    repo = InMemoryAttendance()
    _open(repo, at=datetime(2026, 1, 30, 18, 0))
    _open(repo, member_id="row-2", at=datetime(2026, 1, 31, 6, 0))
    svc = AutoCheckoutService(repo)
    now = datetime(2026, 2, 1, 1, 0)

    first = svc.run_for_gym(GYM_A, now=now)
    snapshot = repo.all()
    second = svc.run_for_gym(GYM_A, now=now)

    assert first.count == 2
    assert second.count == 0
    assert repo.all() == snapshot


def test_sweep_is_scoped_to_one_gym():
    repo = InMemoryAttendance()
    other = _open(repo, gym_id=GYM_B, at=datetime(2026, 1, 31, 18, 0))
    svc = AutoCheckoutService(repo)

    svc.run_for_gym(GYM_A, now=datetime(2026, 2, 1, 1, 0))

    assert repo.get_by_id(other.session_id).is_open


def test_manually_closed_sessions_are_not_touched():
    repo = InMemoryAttendance()
    s = _open(repo, at=datetime(2026, 1, 31, 18, 0))
    repo.update_session(s.session_id, check_out_time=datetime(2026, 1, 31, 20, 0), notes="Manual checkout by admin")
    svc = AutoCheckoutService(repo)

    result = svc.run_for_gym(GYM_A, now=datetime(2026, 2, 1, 1, 0))

    assert result.count == 0
    closed = repo.get_by_id(s.session_id)
    assert closed.check_out_time == datetime(2026, 1, 31, 20, 0)
    assert closed.auto_checkout is False


def test_store_failure_is_reported():
    repo = InMemoryAttendance()
    repo.broken = True
    svc = AutoCheckoutService(repo)

    result = svc.run_for_gym(GYM_A, now=datetime(2026, 2, 1, 1, 0))

    assert result.success is False
    assert result.count == 0
    assert result.message.startswith("Error running auto-checkout:")


def test_cutoff_follows_configured_zone():
    tz = ZoneInfo("Asia/Ho_Chi_Minh")
    svc = AutoCheckoutService(InMemoryAttendance(), clock=Clock(tz))

    # 2026-01-31 20:00 UTC is already 2026-02-01 03:00 in Ho Chi Minh City.
    result = svc.run_for_gym(GYM_A, now=datetime(2026, 1, 31, 20, 0, tzinfo=ZoneInfo("UTC")))

    assert result.cutoff.date() == date(2026, 1, 31)
    assert result.cutoff.tzinfo == tz


def test_run_for_all_gyms():
    repo = InMemoryAttendance()
    _open(repo, gym_id=GYM_A, at=datetime(2026, 1, 31, 18, 0))
    _open(repo, gym_id=GYM_B, member_id="row-2", at=datetime(2026, 1, 31, 19, 0))
    _open(repo, gym_id=GYM_B, member_id="row-3", at=datetime(2026, 1, 31, 20, 0))
    gyms = InMemoryGyms([Gym(gym_id=GYM_A, name="Downtown"), Gym(gym_id=GYM_B, name="Riverside")])
    svc = AutoCheckoutService(repo, gyms)

    results = svc.run_for_all_gyms(now=datetime(2026, 2, 1, 0, 10))

    assert [(r.gym_id, r.count) for r in results] == [(GYM_A, 1), (GYM_B, 2)]
    assert all(not s.is_open for s in repo.all())


def test_run_for_all_gyms_needs_gym_repository():
    svc = AutoCheckoutService(InMemoryAttendance())

    with pytest.raises(RuntimeError):
        svc.run_for_all_gyms(now=datetime(2026, 2, 1) + timedelta(hours=1))


def test_stale_session_closed_and_todays_kept():
    repo = InMemoryAttendance()
    now = datetime(2026, 2, 1, 6, 0)
    stale = _open(repo, at=now - timedelta(days=3))
    fresh = _open(repo, member_id="row-2", at=now - timedelta(hours=1))
    svc = AutoCheckoutService(repo)

    result = svc.run_for_gym(GYM_A, now=now)

    assert result.count == 1
    assert repo.get_by_id(stale.session_id).check_out_time == datetime(2026, 1, 31, 23, 59, 59, 999000)
    assert repo.get_by_id(fresh.session_id).is_open
