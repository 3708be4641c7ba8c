from __future__ import annotations

from datetime import date, timedelta

import pytest

from fakes import make_member, make_membership

from gym_attendance.attendance.eligibility import require_membership, select_membership
from gym_attendance.core.exceptions import NoActiveMembership

TODAY = date(2026, 2, 1)


def test_no_memberships():
    assert select_membership([], TODAY) is None


def test_only_active_and_unexpired_qualify():
    memberships = [
        make_membership("expired", end_date=TODAY - timedelta(days=1)),
        make_membership("frozen", end_date=TODAY + timedelta(days=10), status="frozen"),
        make_membership("trial", end_date=TODAY + timedelta(days=10), status="trial"),
        make_membership("ok", end_date=TODAY),
    ]

    assert select_membership(memberships, TODAY).membership_id == "ok"


def test_latest_start_wins_then_latest_end():
    memberships = [
        make_membership("a", start_date=TODAY - timedelta(days=10), end_date=TODAY + timedelta(days=100)),
        make_membership("b", start_date=TODAY - timedelta(days=2), end_date=TODAY + timedelta(days=5)),
        make_membership("c", start_date=TODAY - timedelta(days=2), end_date=TODAY + timedelta(days=20)),
    ]

    assert select_membership(memberships, TODAY).membership_id == "c"


def test_selection_does_not_depend_on_order():
    a = make_membership("a", start_date=TODAY - timedelta(days=10), end_date=TODAY + timedelta(days=100))
    b = make_membership("b", start_date=TODAY - timedelta(days=1), end_date=TODAY + timedelta(days=5))

    assert select_membership([a, b], TODAY) == select_membership([b, a], TODAY)


def test_require_membership_raises_with_member_attached():
    member = make_member("MEM001")

    with pytest.raises(NoActiveMembership) as exc:
        require_membership(member, TODAY)

    assert exc.value.member is member
