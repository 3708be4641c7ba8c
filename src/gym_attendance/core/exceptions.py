from __future__ import annotations

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AttendanceRefused(DomainError):
    """An expected refusal of a scan.

    Raised inside the attendance engine and converted into a result value
    at the service boundary.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, *, member=None):
        super().__init__(message)
        self.message = message
        self.member = member


class MemberNotFound(AttendanceRefused):
    kind = ErrorKind.MEMBER_NOT_FOUND

    def __init__(self, member_code: str):
        super().__init__(
            f'Member ID "{member_code}" not found. Please check your member ID.'
        )
        self.member_code = member_code


class MemberInactive(AttendanceRefused):
    kind = ErrorKind.MEMBER_INACTIVE

    def __init__(self, member_code: str, status: str):
        super().__init__(f'Member "{member_code}" exists but is {status}. Please contact reception.')
        self.member_code = member_code
        self.status = status


class TenantMismatch(AttendanceRefused):
    kind = ErrorKind.TENANT_MISMATCH

    def __init__(self, member_code: str, expected_gym_id: str, actual_gym_id: str):
        super().__init__(
            "This QR code was issued for a different gym. "
            "Please use the code issued by this gym or contact reception."
        )
        self.member_code = member_code
        self.expected_gym_id = expected_gym_id
        self.actual_gym_id = actual_gym_id


class NoActiveMembership(AttendanceRefused):
    kind = ErrorKind.NO_ACTIVE_MEMBERSHIP

    def __init__(self, member=None):
        super().__init__("No active membership found. Please contact reception.", member=member)


class PersistenceError(Exception):
    """Raised when the backing store rejects a read or write."""
