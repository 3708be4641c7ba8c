from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.constants import UNKNOWN_FIRST_NAME, UNKNOWN_LAST_NAME
from ..core.enums import MembershipStatus, MemberStatus


@dataclass(frozen=True)
class Profile:
    """Contact profile of a member."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or UNKNOWN_FIRST_NAME} {self.last_name or UNKNOWN_LAST_NAME}"


@dataclass(frozen=True)
class Membership:
    """Time-bounded entitlement of one member."""

    membership_id: str
    status: str
    start_date: date
    end_date: date
    package_name: Optional[str] = None
    package_type: Optional[str] = None

    def is_current(self, today: date) -> bool:
        return self.status == MembershipStatus.ACTIVE.value and self.end_date >= today


@dataclass(frozen=True)
class Member:
    """Member as returned by the status-unfiltered lookup.

    ``id`` is the internal row id; ``member_code`` is the human-readable code
    printed on cards and QR codes (unique within a gym).
    """

    id: str
    member_code: str
    gym_id: str
    status: str

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE.value


@dataclass(frozen=True)
class MemberDetails:
    """Member enriched with profile and memberships."""

    id: str
    member_code: str
    gym_id: str
    status: str
    profile: Profile = field(default_factory=Profile)
    memberships: tuple[Membership, ...] = ()

    @property
    def first_name(self) -> str:
        return self.profile.first_name or UNKNOWN_FIRST_NAME

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "member_id": self.member_code,
            "gym_id": self.gym_id,
            "status": self.status,
            "first_name": self.profile.first_name,
            "last_name": self.profile.last_name,
            "phone": self.profile.phone,
        }


def membership_to_dict(m: Membership) -> dict:
    return {
        "id": m.membership_id,
        "status": m.status,
        "start_date": m.start_date.isoformat(),
        "end_date": m.end_date.isoformat(),
        "package_name": m.package_name,
        "package_type": m.package_type,
    }
