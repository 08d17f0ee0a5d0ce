from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.timetracking.timetracking.attendance.service import TimeTrackingService
from src.timetracking.timetracking.core.enums import JobStatus
from src.timetracking.timetracking.jobs.model import Job
from src.timetracking.timetracking.sites.model import Site
from src.timetracking.timetracking.users.model import Worker
from tests.fakes import (
    COMPANY_ID,
    JOB_ID,
    OTHER_WORKER_ID,
    SITE_ID,
    SITE_LAT,
    SITE_LON,
    WORKER_ID,
    FixedClock,
    InMemoryAttendanceStore,
    InMemoryJobs,
    InMemorySites,
    InMemoryWorkers,
)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 10, 17, 8, 0, 0))


@pytest.fixture
def job() -> Job:
    return Job(
        job_id=JOB_ID,
        company_id=COMPANY_ID,
        name="Harbour St fit-out",
        status=JobStatus.IN_PROGRESS,
        job_number="J-1001",
        site_id=SITE_ID,
        start_date=date(2026, 10, 1),
        end_date=date(2026, 12, 31),
    )


@pytest.fixture
def jobs(job) -> InMemoryJobs:
    return InMemoryJobs({job.job_id: job}, {(JOB_ID, WORKER_ID), (JOB_ID, OTHER_WORKER_ID)})


@pytest.fixture
def sites() -> InMemorySites:
    return InMemorySites(
        {SITE_ID: Site(site_id=SITE_ID, company_id=COMPANY_ID, name="Harbour St", latitude=SITE_LAT, longitude=SITE_LON, radius_m=100.0)}
    )


@pytest.fixture
def workers() -> InMemoryWorkers:
    return InMemoryWorkers(
        {
            WORKER_ID: Worker(worker_id=WORKER_ID, company_id=COMPANY_ID, hourly_rate=Decimal("25.00")),
            OTHER_WORKER_ID: Worker(worker_id=OTHER_WORKER_ID, company_id=COMPANY_ID, hourly_rate=None),
        }
    )


@pytest.fixture
def store() -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore(
        {WORKER_ID: COMPANY_ID, OTHER_WORKER_ID: COMPANY_ID},
        job_details={JOB_ID: ("Harbour St fit-out", "J-1001", "1 Harbour St, Sydney NSW")},
        worker_names={WORKER_ID: "Sam Carter", OTHER_WORKER_ID: "alex@example.com"},
    )


@pytest.fixture
def make_service(jobs, sites, workers, clock):
    def _make(attendance=None, **kwargs) -> TimeTrackingService:
        return TimeTrackingService(
            attendance if attendance is not None else InMemoryAttendanceStore(),
            jobs,
            sites,
            workers,
            clock=kwargs.pop("clock", clock),
            **kwargs,
        )

    return _make


@pytest.fixture
def service(make_service, store) -> TimeTrackingService:
    return make_service(store)
