from __future__ import annotations

from dataclasses import dataclass

from .attendance.feed import AttendanceFeed
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.recorder import AttendanceRecorder
from .attendance.repository import AttendanceRepository
from .core.constants import TOKEN_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .geofence.evaluator import GeofenceEvaluator
from .geofence.mysql_campus_repository import MySQLCampusRepository
from .geofence.repository import CampusRepository
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .scanner.decoder import Decoder, QRDecoder
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .validation.pipeline import ValidationPipeline


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    campus_repo: CampusRepository
    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    token_ttl_seconds: int
    validation_pipeline: ValidationPipeline
    decoder: Decoder
    recorder: AttendanceRecorder
    feed: AttendanceFeed


def assemble(
    *,
    users_repo: UserRepository,
    campus_repo: CampusRepository,
    roster_repo: RosterRepository,
    attendance_repo: AttendanceRepository,
    allow_dev_mode: bool = False,
    token_ttl_seconds: int = TOKEN_TTL_SECONDS,
    decoder: Decoder | None = None,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""
    return Container(
        users_repo=users_repo,
        campus_repo=campus_repo,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo),
        token_ttl_seconds=int(token_ttl_seconds),
        validation_pipeline=ValidationPipeline(),
        decoder=decoder or QRDecoder(),
        recorder=AttendanceRecorder(
            attendance_repo,
            campus_repo,
            evaluator=GeofenceEvaluator(),
            allow_dev_mode=allow_dev_mode,
        ),
        feed=AttendanceFeed(attendance_repo),
    )


def build_container(*, db_config: dict, allow_dev_mode: bool = False, token_ttl_seconds: int = TOKEN_TTL_SECONDS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        campus_repo=MySQLCampusRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        allow_dev_mode=allow_dev_mode,
        token_ttl_seconds=token_ttl_seconds,
    )
