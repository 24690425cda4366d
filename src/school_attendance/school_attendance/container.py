from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activity.mysql_activity_repository import MySQLActivityRepository
from .activity.tracker import ActivityTracker
from .attendance.factory import WriteStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import AttendanceAccessPolicy
from .attendance.service import AttendanceRecorder
from .database.connection import DBConfig, DatabaseConnection
from .notifications.email_notifier import EmailNotifier, SmtpSettings
from .notifications.notifier import Notifier
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    attendance_repo: MySQLAttendanceRepository
    activity_repo: MySQLActivityRepository

    notifier: Notifier
    activity_tracker: ActivityTracker
    auth_service: AuthService
    attendance_recorder: AttendanceRecorder


def build_container(*, db_config: dict, smtp: Optional[SmtpSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    activity_repo = MySQLActivityRepository(conn)

    notifier = EmailNotifier(smtp or SmtpSettings())
    activity_tracker = ActivityTracker(activity_repo)
    auth_service = AuthService(users_repo)
    attendance_recorder = AttendanceRecorder(
        attendance_repo,
        users_repo,
        notifier,
        activity_tracker,
        users=users_repo,
        policy=AttendanceAccessPolicy(),
        strategy_factory=WriteStrategyFactory(),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        activity_repo=activity_repo,
        notifier=notifier,
        activity_tracker=activity_tracker,
        auth_service=auth_service,
        attendance_recorder=attendance_recorder,
    )
