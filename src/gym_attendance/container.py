from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.auto_checkout import AutoCheckoutService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.clock import Clock
from .database.connection import DBConfig, DatabaseConnection
from .gyms.mysql_gym_repository import MySQLGymRepository
from .gyms.repository import GymRepository
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .qr.codec import QRCodec
from .qr.service import MemberQRService


@dataclass(frozen=True)
class Container:
    gyms_repo: GymRepository
    members_repo: MemberRepository
    attendance_repo: AttendanceRepository

    attendance_service: AttendanceService
    auto_checkout_service: AutoCheckoutService
    member_qr_service: MemberQRService


def wire_container(
    *,
    gyms_repo: GymRepository,
    members_repo: MemberRepository,
    attendance_repo: AttendanceRepository,
    clock: Optional[Clock] = None,
    codec: Optional[QRCodec] = None,
) -> Container:
    clock = clock or Clock()
    codec = codec or QRCodec()

    return Container(
        gyms_repo=gyms_repo,
        members_repo=members_repo,
        attendance_repo=attendance_repo,
        attendance_service=AttendanceService(attendance_repo, members_repo, codec=codec, clock=clock),
        auto_checkout_service=AutoCheckoutService(attendance_repo, gyms_repo, clock=clock),
        member_qr_service=MemberQRService(members_repo, codec, clock=clock),
    )


def build_container(
    *,
    db_config: dict,
    timezone: Optional[str] = None,
    qr_secret: Optional[str] = None,
    qr_require_signature: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        gyms_repo=MySQLGymRepository(conn),
        members_repo=MySQLMemberRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        clock=Clock.from_name(timezone),
        codec=QRCodec(secret=qr_secret, require_signature=qr_require_signature),
    )


def build_container_from_settings(settings) -> Container:
    return build_container(
        db_config=dict(getattr(settings, "DB_CONFIG")),
        timezone=getattr(settings, "TIMEZONE", "") or None,
        qr_secret=getattr(settings, "QR_SIGNING_SECRET", "") or None,
        qr_require_signature=bool(getattr(settings, "QR_REQUIRE_SIGNATURE", False)),
    )
