from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession, SessionFilters, SessionListRow, ToggleOutcome


class AttendanceRepository(Protocol):
    """Attendance-session store shared by every scanner of a gym."""

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_latest_session(self, member_id: str, work_date: date) -> Optional[AttendanceSession]:
        """Most recent session of ``member_id`` dated ``work_date`` (open or closed)."""
        raise NotImplementedError

    def insert_session(
        self,
        *,
        gym_id: str,
        member_id: str,
        membership_id: Optional[str],
        work_date: date,
        check_in_time: datetime,
        notes: Optional[str] = None,
    ) -> AttendanceSession:
        raise NotImplementedError

    def update_session(
        self,
        session_id: int,
        *,
        check_out_time: datetime,
        auto_checkout: bool = False,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceSession]:
        """Close a session iff it is still open.

        Returns the updated session, or None when it was already closed (or missing).
        """
        raise NotImplementedError

    def toggle_session(
        self,
        *,
        gym_id: str,
        member_id: str,
        membership_id: Optional[str],
        work_date: date,
        now: datetime,
    ) -> ToggleOutcome:
        """Close today's open session, or open a new one, in a single transaction.

        The latest session dated ``work_date`` decides: open -> check-out at ``now``;
        none or closed -> check-in at ``now``.
        """
        raise NotImplementedError

    def find_open_sessions_before(self, gym_id: str, cutoff: datetime) -> Sequence[AttendanceSession]:
        """Open sessions of ``gym_id`` checked in strictly before ``cutoff``."""
        raise NotImplementedError

    def bulk_close_sessions(self, session_ids: Sequence[int], cutoff: datetime) -> int:
        """Close the still-open sessions among ``session_ids`` at ``cutoff`` with auto_checkout set.

        Returns the number of rows closed.
        """
        raise NotImplementedError

    def list_sessions(self, filters: SessionFilters) -> Sequence[SessionListRow]:
        raise NotImplementedError
