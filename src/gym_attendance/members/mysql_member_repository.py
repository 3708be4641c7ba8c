from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MemberStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Member, MemberDetails, Membership, Profile
from .repository import MemberRepository


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_code(self, member_code: str, *, gym_ids: Optional[Sequence[str]] = None) -> Optional[Member]:
        clauses = ["member_id=%s"]
        params: list[object] = [member_code]
        if gym_ids is not None:
            if not gym_ids:
                return None
            clauses.append(f"gym_id IN ({in_clause(gym_ids)})")
            params.extend(str(g) for g in gym_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, member_id, gym_id, status
                FROM members
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at ASC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Member(id=str(r["id"]), member_code=r["member_id"], gym_id=str(r["gym_id"]), status=r["status"])

    def find_with_memberships(
        self,
        member_code: str,
        *,
        gym_id: str,
        status: MemberStatus = MemberStatus.ACTIVE,
    ) -> Optional[MemberDetails]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT m.id, m.member_id, m.gym_id, m.status,
                       p.first_name, p.last_name, p.phone
                FROM members m
                LEFT JOIN profiles p ON p.id = m.profile_id
                WHERE m.member_id=%s AND m.gym_id=%s AND m.status=%s
                """,
                (member_code, str(gym_id), status.value),
            )
            r = fetchone(cur)
            if not r:
                return None

            cur.execute(
                """
                SELECT id, status, start_date, end_date, package_name, package_type
                FROM memberships
                WHERE member_id=%s
                ORDER BY id ASC
                """,
                (r["id"],),
            )
            memberships = tuple(
                Membership(
                    membership_id=str(ms["id"]),
                    status=ms["status"],
                    start_date=ms["start_date"],
                    end_date=ms["end_date"],
                    package_name=ms.get("package_name"),
                    package_type=ms.get("package_type"),
                )
                for ms in fetchall(cur)
            )

            return MemberDetails(
                id=str(r["id"]),
                member_code=r["member_id"],
                gym_id=str(r["gym_id"]),
                status=r["status"],
                profile=Profile(first_name=r.get("first_name"), last_name=r.get("last_name"), phone=r.get("phone")),
                memberships=memberships,
            )
