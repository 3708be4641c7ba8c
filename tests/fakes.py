from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from gym_attendance.attendance.model import AttendanceSession, SessionListRow, ToggleOutcome
from gym_attendance.core.enums import AttendanceAction, MemberStatus, SessionFilterStatus
from gym_attendance.core.exceptions import PersistenceError
from gym_attendance.gyms.model import Gym
from gym_attendance.members.model import Member, MemberDetails, Membership, Profile

GYM_A = "gym-a"
GYM_B = "gym-b"


class InMemoryMembers:
    def __init__(self, members: Iterable[MemberDetails] = ()):
        self._members = list(members)
        self.enriched_lookups = 0

    def add(self, member: MemberDetails) -> MemberDetails:
        self._members.append(member)
        return member

    def find_by_code(self, member_code: str, *, gym_ids=None) -> Optional[Member]:
        for m in self._members:
            if m.member_code == member_code and (gym_ids is None or m.gym_id in gym_ids):
                return Member(id=m.id, member_code=m.member_code, gym_id=m.gym_id, status=m.status)
        return None

    def find_with_memberships(self, member_code: str, *, gym_id: str, status=MemberStatus.ACTIVE):
        self.enriched_lookups += 1
        for m in self._members:
            if m.member_code == member_code and m.gym_id == gym_id and m.status == status.value:
                return m
        return None

    def by_id(self, member_id: str) -> Optional[MemberDetails]:
        return next((m for m in self._members if m.id == member_id), None)


class InMemoryAttendance:
    """Attendance store kept in a dict; ``broken = True`` makes every call fail."""

    def __init__(self, members: Optional[InMemoryMembers] = None):
        self._rows: dict[int, AttendanceSession] = {}
        self._id = 0
        self._members = members
        self.broken = False

    def _check(self) -> None:
        if self.broken:
            raise PersistenceError("connection refused")

    def all(self) -> list[AttendanceSession]:
        return sorted(self._rows.values(), key=lambda s: s.session_id)

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        self._check()
        return self._rows.get(int(session_id))

    def find_latest_session(self, member_id: str, work_date: date) -> Optional[AttendanceSession]:
        self._check()
        same_day = [s for s in self._rows.values() if s.member_id == member_id and s.work_date == work_date]
        if not same_day:
            return None
        return max(same_day, key=lambda s: (s.check_in_time, s.session_id))

    def insert_session(self, *, gym_id, member_id, membership_id, work_date, check_in_time, notes=None):
        self._check()
        self._id += 1
        row = AttendanceSession(
            session_id=self._id,
            gym_id=gym_id,
            member_id=member_id,
            membership_id=membership_id,
            work_date=work_date,
            check_in_time=check_in_time,
            notes=notes,
        )
        self._rows[row.session_id] = row
        return row

    def update_session(self, session_id: int, *, check_out_time, auto_checkout=False, notes=None):
        self._check()
        row = self._rows.get(int(session_id))
        if row is None or not row.is_open:
            return None
        row = replace(row, check_out_time=check_out_time, auto_checkout=auto_checkout, notes=notes or row.notes)
        self._rows[row.session_id] = row
        return row

    def toggle_session(self, *, gym_id, member_id, membership_id, work_date, now) -> ToggleOutcome:
        latest = self.find_latest_session(member_id, work_date)
        if latest is not None and latest.is_open:
            closed = self.update_session(latest.session_id, check_out_time=now)
            return ToggleOutcome(AttendanceAction.CHECK_OUT, closed)
        opened = self.insert_session(
            gym_id=gym_id,
            member_id=member_id,
            membership_id=membership_id,
            work_date=work_date,
            check_in_time=now,
        )
        return ToggleOutcome(AttendanceAction.CHECK_IN, opened)

    def find_open_sessions_before(self, gym_id: str, cutoff: datetime):
        self._check()
        return [s for s in self.all() if s.gym_id == gym_id and s.is_open and s.check_in_time < cutoff]

    def bulk_close_sessions(self, session_ids, cutoff: datetime) -> int:
        self._check()
        closed = 0
        for sid in session_ids:
            row = self._rows.get(int(sid))
            if row is not None and row.is_open:
                self._rows[row.session_id] = replace(row, check_out_time=cutoff, auto_checkout=True)
                closed += 1
        return closed

    def list_sessions(self, filters):
        self._check()
        out = []
        for s in sorted(self._rows.values(), key=lambda s: s.check_in_time, reverse=True):
            if filters.gym_id and s.gym_id != filters.gym_id:
                continue
            if filters.status == SessionFilterStatus.CHECKED_IN and not s.is_open:
                continue
            if filters.status == SessionFilterStatus.CHECKED_OUT and (s.is_open or s.auto_checkout):
                continue
            if filters.status == SessionFilterStatus.AUTO_CHECKOUT and not s.auto_checkout:
                continue
            member = self._members.by_id(s.member_id) if self._members else None
            out.append(
                SessionListRow(
                    session=s,
                    member_code=member.member_code if member else "",
                    first_name=member.profile.first_name if member else None,
                    last_name=member.profile.last_name if member else None,
                )
            )
        return out[: filters.limit]


class InMemoryGyms:
    def __init__(self, gyms: Iterable[Gym] = ()):
        self._gyms = list(gyms)

    def list_all(self) -> list[Gym]:
        return list(self._gyms)


def make_member(
    code: str,
    *,
    gym_id: str = GYM_A,
    status: str = "active",
    first_name: Optional[str] = "Alice",
    last_name: Optional[str] = "Nguyen",
    memberships: Iterable[Membership] = (),
) -> MemberDetails:
    return MemberDetails(
        id=f"row-{gym_id}-{code}",
        member_code=code,
        gym_id=gym_id,
        status=status,
        profile=Profile(first_name=first_name, last_name=last_name, phone="0900000000"),
        memberships=tuple(memberships),
    )


def make_membership(
    membership_id: str,
    *,
    end_date: date,
    start_date: Optional[date] = None,
    status: str = "active",
) -> Membership:
    return Membership(
        membership_id=membership_id,
        status=status,
        start_date=start_date or end_date - timedelta(days=30),
        end_date=end_date,
    )
