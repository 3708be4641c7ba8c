from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceAction, SessionFilterStatus
from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_db_datetime
from .model import AttendanceSession, SessionFilters, SessionListRow, ToggleOutcome
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = """
    a.id, a.gym_id, a.member_id, a.membership_id, a.date,
    a.check_in_time, a.check_out_time, a.auto_checkout, a.notes
"""


def _to_session(r: Dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["id"]),
        gym_id=str(r["gym_id"]),
        member_id=str(r["member_id"]),
        membership_id=str(r["membership_id"]) if r.get("membership_id") else None,
        work_date=r["date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        auto_checkout=bool(r.get("auto_checkout")),
        notes=r.get("notes"),
    )


def _is_deadlock(e: PersistenceError) -> bool:
    cause = e.__cause__
    return isinstance(cause, mysql.connector.Error) and cause.errno == errorcode.ER_LOCK_DEADLOCK


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_id(cur, session_id: int) -> Optional[AttendanceSession]:
        cur.execute(f"SELECT {_SESSION_COLUMNS} FROM member_attendance a WHERE a.id=%s", (int(session_id),))
        r = fetchone(cur)
        return _to_session(r) if r else None

    @staticmethod
    def _select_latest(cur, member_id: str, work_date: date, *, for_update: bool = False) -> Optional[AttendanceSession]:
        cur.execute(
            f"""
            SELECT {_SESSION_COLUMNS}
            FROM member_attendance a
            WHERE a.member_id=%s AND a.date=%s
            ORDER BY a.check_in_time DESC, a.id DESC
            LIMIT 1
            {"FOR UPDATE" if for_update else ""}
            """,
            (member_id, work_date),
        )
        r = fetchone(cur)
        return _to_session(r) if r else None

    @staticmethod
    def _insert(cur, *, gym_id, member_id, membership_id, work_date, check_in_time, notes=None) -> int:
        cur.execute(
            """
            INSERT INTO member_attendance(gym_id, member_id, membership_id, date, check_in_time, auto_checkout, notes)
            VALUES(%s,%s,%s,%s,%s,0,%s)
            """,
            (gym_id, member_id, membership_id, work_date, to_db_datetime(check_in_time), notes),
        )
        return int(cur.lastrowid)

    @staticmethod
    def _close_if_open(cur, session_id: int, *, check_out_time: datetime, auto_checkout: bool, notes: Optional[str]) -> bool:
        cur.execute(
            """
            UPDATE member_attendance
            SET check_out_time=%s, auto_checkout=%s, notes=COALESCE(%s, notes)
            WHERE id=%s AND check_out_time IS NULL
            """,
            (to_db_datetime(check_out_time), 1 if auto_checkout else 0, notes, int(session_id)),
        )
        return cur.rowcount > 0

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, session_id)

    def find_latest_session(self, member_id: str, work_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_latest(cur, member_id, work_date)

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
        with db_cursor(self._conn_factory) as (_, cur):
            new_id = self._insert(
                cur,
                gym_id=gym_id,
                member_id=member_id,
                membership_id=membership_id,
                work_date=work_date,
                check_in_time=check_in_time,
                notes=notes,
            )
            return self._select_by_id(cur, new_id)

    def update_session(
        self,
        session_id: int,
        *,
        check_out_time: datetime,
        auto_checkout: bool = False,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._close_if_open(cur, session_id, check_out_time=check_out_time, auto_checkout=auto_checkout, notes=notes):
                return None
            return self._select_by_id(cur, session_id)

    def _toggle_in_transaction(
        self,
        *,
        gym_id: str,
        member_id: str,
        membership_id: Optional[str],
        work_date: date,
        now: datetime,
    ) -> ToggleOutcome:
        with db_cursor(self._conn_factory) as (_, cur):
            # Locks the member's rows for the day (next-key lock when none exist yet).
            latest = self._select_latest(cur, member_id, work_date, for_update=True)

            if latest is not None and latest.is_open:
                if self._close_if_open(cur, latest.session_id, check_out_time=now, auto_checkout=False, notes=None):
                    return ToggleOutcome(AttendanceAction.CHECK_OUT, self._select_by_id(cur, latest.session_id))

            try:
                new_id = self._insert(
                    cur,
                    gym_id=gym_id,
                    member_id=member_id,
                    membership_id=membership_id,
                    work_date=work_date,
                    check_in_time=now,
                )
            except mysql.connector.IntegrityError as e:
                if e.errno != errorcode.ER_DUP_ENTRY:
                    raise
                # uq_attendance_open_per_day: another scanner opened today's session first.
                current = self._select_latest(cur, member_id, work_date)
                return ToggleOutcome(AttendanceAction.CHECK_IN, current)

            return ToggleOutcome(AttendanceAction.CHECK_IN, self._select_by_id(cur, new_id))

    def toggle_session(
        self,
        *,
        gym_id: str,
        member_id: str,
        membership_id: Optional[str],
        work_date: date,
        now: datetime,
    ) -> ToggleOutcome:
        kwargs = dict(gym_id=gym_id, member_id=member_id, membership_id=membership_id, work_date=work_date, now=now)
        try:
            return self._toggle_in_transaction(**kwargs)
        except PersistenceError as e:
            if not _is_deadlock(e):
                raise
            logger.warning("toggle deadlock for member %s on %s, re-reading", member_id, work_date.isoformat())

        # Two first scans that both gap-locked an empty day deadlock on INSERT;
        # the surviving transaction's open session is this scan's check-in.
        current = self.find_latest_session(member_id, work_date)
        if current is not None and current.is_open:
            return ToggleOutcome(AttendanceAction.CHECK_IN, current)
        return self._toggle_in_transaction(**kwargs)

    def find_open_sessions_before(self, gym_id: str, cutoff: datetime) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM member_attendance a
                WHERE a.gym_id=%s AND a.check_out_time IS NULL AND a.check_in_time < %s
                ORDER BY a.check_in_time ASC
                """,
                (str(gym_id), to_db_datetime(cutoff)),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def bulk_close_sessions(self, session_ids: Sequence[int], cutoff: datetime) -> int:
        ids = [int(i) for i in session_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE member_attendance
                SET check_out_time=%s, auto_checkout=1
                WHERE id IN ({in_clause(ids)}) AND check_out_time IS NULL
                """,
                (to_db_datetime(cutoff), *ids),
            )
            return int(cur.rowcount)

    def list_sessions(self, filters: SessionFilters) -> Sequence[SessionListRow]:
        clauses: list[str] = []
        params: list[object] = []

        if filters.gym_id:
            clauses.append("a.gym_id=%s")
            params.append(str(filters.gym_id))
        if filters.member_id:
            clauses.append("a.member_id=%s")
            params.append(str(filters.member_id))
        if filters.date_from:
            clauses.append("a.date >= %s")
            params.append(filters.date_from)
        if filters.date_to:
            clauses.append("a.date <= %s")
            params.append(filters.date_to)

        if filters.status == SessionFilterStatus.CHECKED_IN:
            clauses.append("a.check_out_time IS NULL")
        elif filters.status == SessionFilterStatus.CHECKED_OUT:
            clauses.append("a.check_out_time IS NOT NULL AND a.auto_checkout=0")
        elif filters.status == SessionFilterStatus.AUTO_CHECKOUT:
            clauses.append("a.auto_checkout=1")

        if filters.package_type:
            clauses.append("ms.package_type=%s")
            params.append(filters.package_type)
        if filters.search:
            like = f"%{filters.search}%"
            clauses.append("(p.first_name LIKE %s OR p.last_name LIKE %s OR m.member_id LIKE %s OR p.phone LIKE %s)")
            params.extend([like, like, like, like])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(filters.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS},
                       m.member_id AS member_code,
                       p.first_name, p.last_name, p.phone,
                       ms.package_name, ms.package_type
                FROM member_attendance a
                JOIN members m ON m.id = a.member_id
                LEFT JOIN profiles p ON p.id = m.profile_id
                LEFT JOIN memberships ms ON ms.id = a.membership_id
                {where}
                ORDER BY a.check_in_time DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                SessionListRow(
                    session=_to_session(r),
                    member_code=r["member_code"],
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    phone=r.get("phone"),
                    package_name=r.get("package_name"),
                    package_type=r.get("package_type"),
                )
                for r in fetchall(cur)
            ]
