from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceAction, ErrorKind, SessionFilterStatus
from ..members.model import MemberDetails, Membership, membership_to_dict


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class AttendanceSession:
    """One in/out cycle of a member on a calendar day.

    ``check_out_time`` is None while the member is inside. ``auto_checkout`` is
    only ever set by the reconciliation sweep.
    """

    session_id: int
    gym_id: str
    member_id: str
    membership_id: Optional[str]
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    auto_checkout: bool = False
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "gym_id": self.gym_id,
            "member_id": self.member_id,
            "membership_id": self.membership_id,
            "date": self.work_date.isoformat(),
            "check_in_time": _iso(self.check_in_time),
            "check_out_time": _iso(self.check_out_time),
            "auto_checkout": self.auto_checkout,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class SessionListRow:
    """Read-model for the attendance listing (session joined with member data)."""

    session: AttendanceSession
    member_code: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    package_name: Optional[str] = None
    package_type: Optional[str] = None

    def to_dict(self) -> dict:
        data = self.session.to_dict()
        data.update(
            {
                "member_code": self.member_code,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "phone": self.phone,
                "package_name": self.package_name,
                "package_type": self.package_type,
            }
        )
        return data


@dataclass(frozen=True)
class SessionFilters:
    gym_id: Optional[str] = None
    member_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: SessionFilterStatus = SessionFilterStatus.ALL
    package_type: Optional[str] = None
    search: Optional[str] = None
    limit: int = DEFAULT_HISTORY_LIMIT


@dataclass(frozen=True)
class ToggleOutcome:
    action: AttendanceAction
    session: AttendanceSession


@dataclass(frozen=True)
class AttendanceResult:
    """Outcome of one scan. Refusals are values, not exceptions."""

    success: bool
    message: str
    action: Optional[AttendanceAction] = None
    member: Optional[MemberDetails] = None
    membership: Optional[Membership] = None
    session: Optional[AttendanceSession] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, *, member: Optional[MemberDetails] = None) -> "AttendanceResult":
        return cls(success=False, message=message, error_kind=kind, member=member)

    def to_dict(self) -> dict:
        data: dict = {"success": self.success, "message": self.message}
        if self.action is not None:
            data["action"] = self.action.value
        if self.member is not None:
            data["member"] = self.member.to_dict()
        if self.membership is not None:
            data["membership"] = membership_to_dict(self.membership)
        if self.session is not None:
            data["attendance"] = self.session.to_dict()
        if self.error_kind is not None:
            data["error_kind"] = self.error_kind.value
        return data


@dataclass(frozen=True)
class AutoCheckoutResult:
    success: bool
    count: int
    message: str
    gym_id: Optional[str] = None
    cutoff: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "count": self.count,
            "message": self.message,
            "gym_id": self.gym_id,
            "cutoff": _iso(self.cutoff),
        }
