from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceStore
from .attendance.service import TimeTrackingService
from .billing.calculator.standard_calculator import StandardBillingCalculator
from .core.constants import DEFAULT_PAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .jobs.mysql_job_repository import MySQLJobRepository
from .reports.service import AttendanceReportService
from .sites.mysql_site_repository import MySQLSiteRepository
from .users.mysql_user_repository import MySQLWorkerRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_store: MySQLAttendanceStore
    jobs_repo: MySQLJobRepository
    sites_repo: MySQLSiteRepository
    workers_repo: MySQLWorkerRepository

    time_tracking_service: TimeTrackingService
    report_service: AttendanceReportService


def build_container(*, db_config: dict, default_page_size: int = DEFAULT_PAGE_SIZE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_store = MySQLAttendanceStore(conn)
    jobs_repo = MySQLJobRepository(conn)
    sites_repo = MySQLSiteRepository(conn)
    workers_repo = MySQLWorkerRepository(conn)

    time_tracking_service = TimeTrackingService(
        attendance_store,
        jobs_repo,
        sites_repo,
        workers_repo,
        calculator=StandardBillingCalculator(),
    )
    report_service = AttendanceReportService(attendance_store, default_limit=default_page_size)

    return Container(
        conn=conn,
        attendance_store=attendance_store,
        jobs_repo=jobs_repo,
        sites_repo=sites_repo,
        workers_repo=workers_repo,
        time_tracking_service=time_tracking_service,
        report_service=report_service,
    )
