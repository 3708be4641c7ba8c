from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.clock import Clock
from ..common.validators import require_non_empty
from ..core.enums import AttendanceAction, ErrorKind
from ..core.exceptions import AttendanceRefused, NotFoundError, PersistenceError, ValidationError
from ..members.repository import MemberRepository
from ..qr.codec import QRCodec
from .eligibility import require_membership
from .model import AttendanceResult, AttendanceSession, SessionFilters, SessionListRow
from .repository import AttendanceRepository
from .resolver import MemberResolver

logger = logging.getLogger(__name__)

RETRY_HINT = "Please try again or contact reception."


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        members: MemberRepository,
        *,
        codec: Optional[QRCodec] = None,
        clock: Optional[Clock] = None,
    ):
        self._attendance = attendance
        self._resolver = MemberResolver(members, codec or QRCodec())
        self._clock = clock or Clock()

    def process_attendance(
        self,
        raw_input: str,
        *,
        gym_ids: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceResult:
        """Check a member in or out from a scanned QR payload or a typed member code.

        Never raises: refusals and store failures come back as a result with
        ``error_kind`` set.
        """

        now = self._clock.localize(now or self._clock.now())
        today = self._clock.today(now)

        try:
            code = require_non_empty(raw_input, "Member ID")
            member = self._resolver.resolve(code, gym_ids=gym_ids)
            membership = require_membership(member, today)

            # The store re-reads today's latest session and writes in one transaction.
            outcome = self._attendance.toggle_session(
                gym_id=member.gym_id,
                member_id=member.id,
                membership_id=membership.membership_id,
                work_date=today,
                now=now,
            )
        except ValidationError as e:
            return AttendanceResult.failure(ErrorKind.INVALID_INPUT, str(e))
        except AttendanceRefused as e:
            logger.info("attendance refused (%s): %s", e.kind.value, e.message)
            return AttendanceResult.failure(e.kind, e.message, member=e.member)
        except PersistenceError as e:
            logger.exception("attendance store failure")
            return AttendanceResult.failure(
                ErrorKind.PERSISTENCE_FAILURE,
                f"Error processing attendance ({e}). {RETRY_HINT}",
            )
        except Exception:
            logger.exception("unexpected error while processing attendance")
            return AttendanceResult.failure(ErrorKind.PERSISTENCE_FAILURE, f"Error processing attendance. {RETRY_HINT}")

        if outcome.action == AttendanceAction.CHECK_IN:
            message = f"Welcome {member.first_name}! Check-in successful."
        else:
            message = f"Goodbye {member.first_name}! Check-out successful. See you next time."

        logger.info(
            "member %s (gym %s) %s, session %s",
            member.member_code,
            member.gym_id,
            outcome.action.value,
            outcome.session.session_id,
        )
        return AttendanceResult(
            success=True,
            message=message,
            action=outcome.action,
            member=member,
            membership=membership,
            session=outcome.session,
        )

    def manual_checkout(
        self,
        session_id: int,
        *,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        """Operator closes a session on the member's behalf."""

        now = self._clock.localize(now or self._clock.now())

        session = self._attendance.get_by_id(int(session_id))
        if session is None:
            raise NotFoundError(f"Attendance record {session_id} not found")
        if not session.is_open:
            raise ValidationError("Member is already checked out")

        notes = f"Manual checkout: {reason.strip()}" if reason and reason.strip() else "Manual checkout by admin"
        updated = self._attendance.update_session(session.session_id, check_out_time=now, auto_checkout=False, notes=notes)
        if updated is None:
            raise ValidationError("Member is already checked out")

        logger.info("session %s closed manually (%s)", session.session_id, notes)
        return updated

    def list_sessions(self, filters: Optional[SessionFilters] = None) -> Sequence[SessionListRow]:
        return self._attendance.list_sessions(filters or SessionFilters())
