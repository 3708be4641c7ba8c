from __future__ import annotations

from datetime import datetime

import pytest

from fakes import InMemoryAttendance, InMemoryMembers


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 1, 10, 0, 0)


@pytest.fixture
def members() -> InMemoryMembers:
    return InMemoryMembers()


@pytest.fixture
def attendance_repo(members) -> InMemoryAttendance:
    return InMemoryAttendance(members)
