from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..billing.calculator.base import BillingCalculator
from ..billing.calculator.standard_calculator import StandardBillingCalculator
from ..common.datetime_utils import format_human_date, now_utc
from ..core.constants import ALREADY_CHECKED_IN_MESSAGE, NO_ACTIVE_CHECK_IN_MESSAGE
from ..core.enums import CHECK_IN_ALLOWED_STATUSES, JOB_STATUS_REJECTIONS
from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..geofence.validator import GeofenceResult, validate_geofence
from ..jobs.model import Job
from ..jobs.repository import JobRepository
from ..sites.repository import SiteRepository
from ..users.repository import WorkerRepository
from .model import AttendanceSession
from .repository import AttendanceStore

logger = logging.getLogger(__name__)

GeofenceCheck = Callable[..., GeofenceResult]


@dataclass(frozen=True)
class CheckInLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


class TimeTrackingService:
    """Drives the per-worker check-in/check-out state machine.

    NoActiveSession --check_in--> CheckedIn --check_out--> NoActiveSession

    The open-session lookup in ``check_in`` only produces a friendly error;
    the store's uniqueness guarantee is what prevents double check-ins.
    """

    def __init__(
        self,
        attendance: AttendanceStore,
        jobs: JobRepository,
        sites: SiteRepository,
        workers: WorkerRepository,
        *,
        calculator: BillingCalculator | None = None,
        geofence: GeofenceCheck = validate_geofence,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._jobs = jobs
        self._sites = sites
        self._workers = workers
        self._calculator = calculator or StandardBillingCalculator()
        self._geofence = geofence
        self._clock = clock

    def check_in(
        self,
        worker_id: str,
        company_id: str,
        job_id: str,
        location: CheckInLocation,
        notes: Optional[str] = None,
    ) -> AttendanceSession:
        if self._attendance.find_open_session(worker_id):
            raise ConflictError(ALREADY_CHECKED_IN_MESSAGE)

        job = self._jobs.get_by_id(job_id, company_id)
        if not job:
            raise NotFoundError("Job not found or does not belong to your company")

        self._ensure_job_open(job)

        now = self._clock()
        self._ensure_within_schedule(job, now)

        if not self._jobs.is_worker_assigned(job_id, worker_id):
            raise BadRequestError("You are not assigned to this job")

        self._ensure_on_site(worker_id, company_id, job, location)

        worker = self._workers.get_by_id(worker_id, company_id)
        hourly_rate = worker.hourly_rate if worker else None

        try:
            session = self._attendance.create_session(
                worker_id=worker_id,
                job_id=job_id,
                check_in_time=now,
                hourly_rate=hourly_rate,
                notes=notes,
            )
        except ConflictError:
            logger.warning("Concurrent check-in rejected for worker %s on job %s", worker_id, job_id)
            raise

        logger.info("Worker %s checked in to job %s (session %s)", worker_id, job_id, session.session_id)
        return replace(session, job_name=job.name, job_number=job.job_number)

    def check_out(self, worker_id: str, notes: Optional[str] = None) -> AttendanceSession:
        active = self._attendance.find_open_session(worker_id)
        if not active:
            raise BadRequestError(NO_ACTIVE_CHECK_IN_MESSAGE)

        check_out_time = self._clock()
        billing = self._calculator.compute(active.check_in_time, check_out_time, active.hourly_rate)

        closed = self._attendance.close_session(
            session_id=active.session_id,
            worker_id=worker_id,
            check_out_time=check_out_time,
            duration_hours=billing.duration_hours,
            billable_amount=billing.billable_amount,
            notes=notes,
        )
        if not closed:
            logger.warning("Session %s of worker %s was closed or deleted before check-out", active.session_id, worker_id)
            raise BadRequestError(NO_ACTIVE_CHECK_IN_MESSAGE)

        logger.info(
            "Worker %s checked out from job %s. Duration: %s hours",
            worker_id,
            closed.job_id,
            closed.duration_hours,
        )
        return closed

    def get_active_session(self, worker_id: str) -> Optional[AttendanceSession]:
        return self._attendance.find_open_session(worker_id)

    def _ensure_job_open(self, job: Job) -> None:
        if job.status in CHECK_IN_ALLOWED_STATUSES:
            return
        if job.status is None:
            raise BadRequestError("This job is not available.")
        message = JOB_STATUS_REJECTIONS.get(job.status, f"This job is not available (Status: {job.status.value}).")
        raise BadRequestError(message)

    def _ensure_within_schedule(self, job: Job, now: datetime) -> None:
        today = now.date()
        if job.start_date and today < job.start_date:
            raise BadRequestError(f"This job hasn't started yet. It begins on {format_human_date(job.start_date)}.")
        if job.end_date and today > job.end_date:
            raise BadRequestError(f"This job has expired. It ended on {format_human_date(job.end_date)}.")

    def _ensure_on_site(self, worker_id: str, company_id: str, job: Job, location: CheckInLocation) -> None:
        if not job.site_id:
            return
        site = self._sites.get_by_id(job.site_id, company_id)
        if not site or not site.has_geofence:
            return

        logger.info(
            "Geofence check - worker coords: [%s, %s], site coords: [%s, %s], radius: %sm, accuracy: %s",
            location.latitude,
            location.longitude,
            site.latitude,
            site.longitude,
            site.radius_m,
            location.accuracy,
        )
        result = self._geofence(
            location.latitude,
            location.longitude,
            site.latitude,
            site.longitude,
            site.radius_m,
            location.accuracy,
        )
        if result.accepted:
            logger.info(
                "Worker %s location verified for job %s. Distance: %.0fm (radius: %sm)",
                worker_id,
                job.job_id,
                result.distance_meters or 0,
                site.radius_m,
            )
            return

        logger.warning(
            "Geofence violation - worker %s, job %s, distance %.0fm, accuracy %s, allowed %sm",
            worker_id,
            job.job_id,
            result.distance_meters,
            location.accuracy,
            site.radius_m,
        )
        message = (
            "You are too far from the job site. "
            f"You must be within {site.radius_m:g}m of the site location to check in. "
            f"Current distance: {round(result.distance_meters)}m."
        )
        if location.accuracy and location.accuracy > site.radius_m:
            message += (
                f" GPS accuracy is about {round(location.accuracy)}m. "
                "Try improving GPS (open Maps, wait 30s, or move outdoors) and retry."
            )
        raise BadRequestError(message)
