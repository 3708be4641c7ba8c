from __future__ import annotations

from enum import Enum


class MemberStatus(str, Enum):
    """Lifecycle status of a member account."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    PENDING = "pending"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    EXPIRED = "expired"
    FROZEN = "frozen"
    CANCELLED = "cancelled"
    PENDING = "pending"


class AttendanceAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class ErrorKind(str, Enum):
    """Refusal / failure kinds surfaced in attendance results."""

    INVALID_INPUT = "InvalidInput"
    MEMBER_NOT_FOUND = "MemberNotFound"
    MEMBER_INACTIVE = "MemberInactive"
    TENANT_MISMATCH = "TenantMismatch"
    NO_ACTIVE_MEMBERSHIP = "NoActiveMembership"
    PERSISTENCE_FAILURE = "PersistenceFailure"


class SessionFilterStatus(str, Enum):
    """Status filter for the attendance listing."""

    ALL = "all"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    AUTO_CHECKOUT = "auto_checkout"
