from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import (
    optional_number,
    optional_text,
    optional_uuid,
    parse_positive_int,
    require_number,
    require_uuid,
)
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_NOTES_LENGTH, MAX_PAGE_SIZE
from ..core.exceptions import BadRequestError, DomainError
from .model import AttendanceSession, BillableTotals, SessionPage
from .service import CheckInLocation

logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def session_to_dict(s: AttendanceSession) -> dict:
    return {
        "id": s.session_id,
        "user_id": s.worker_id,
        "job_id": s.job_id,
        "check_in_time": _iso(s.check_in_time),
        "check_out_time": _iso(s.check_out_time),
        "duration_hours": _number(s.duration_hours),
        "hourly_rate": _number(s.hourly_rate),
        "billable_amount": _number(s.billable_amount),
        "notes": s.notes,
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
        "job_name": s.job_name,
        "job_number": s.job_number,
        "worker_name": s.worker_name,
        "site_address": s.site_address,
    }


def page_to_dict(p: SessionPage) -> dict:
    return {
        "logs": [session_to_dict(s) for s in p.items],
        "total": p.total,
        "page": p.page,
        "limit": p.limit,
    }


def totals_to_dict(t: BillableTotals) -> dict:
    return {"total_hours": float(t.total_hours), "total_amount": float(t.total_amount)}


def _ok(data: Any, message: Optional[str] = None, status: int = 200):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return jsonify(body), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestError("Request body must be a JSON object")
    return data


def _parse_range_arg(name: str, *, required: bool, end_of_day: bool = False):
    raw = request.args.get(name)
    if not raw:
        if required:
            raise BadRequestError(f"{name} is required")
        return None
    try:
        return parse_iso_datetime(raw, end_of_day=end_of_day)
    except ValueError:
        raise BadRequestError(f"Invalid {name}") from None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        logger.warning("App error: %s (status=%s, path=%s, method=%s)", e, e.status_code, request.path, request.method)
        return jsonify({"success": False, "error": str(e)}), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.error(
            "Unexpected error (operation=%s, worker=%s, job=%s, path=%s, method=%s)",
            g.get("operation"),
            g.get("worker_id"),
            g.get("job_id"),
            request.path,
            request.method,
            exc_info=e,
        )
        return jsonify({"success": False, "error": "Internal server error"}), 500


def register(app: Flask, container) -> None:
    tracking = container.time_tracking_service
    reports = container.report_service
    page_size = int(app.config.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE))
    max_page_size = int(app.config.get("MAX_PAGE_SIZE", MAX_PAGE_SIZE))

    register_error_handlers(app)

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session or "company_id" not in session:
                return jsonify({"success": False, "error": "Authentication required"}), 401
            g.worker_id = str(session["user_id"])
            g.company_id = str(session["company_id"])
            return view(*args, **kwargs)

        return wrapper

    def _pagination() -> tuple[int, int]:
        page = parse_positive_int(request.args.get("page"), "page", default=1)
        limit = parse_positive_int(request.args.get("limit"), "limit", default=page_size, maximum=max_page_size)
        return page, limit

    @app.route("/api/check-ins/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in():
        g.operation = "check-in"
        data = _json_body()
        job_id = require_uuid(data.get("job_id", data.get("jobId")), "job_id")
        g.job_id = job_id
        location = CheckInLocation(
            latitude=require_number(data.get("latitude"), "latitude", minimum=-90, maximum=90),
            longitude=require_number(data.get("longitude"), "longitude", minimum=-180, maximum=180),
            accuracy=optional_number(data.get("accuracy"), "accuracy", minimum=0),
        )
        notes = optional_text(data.get("notes"), "notes", max_length=MAX_NOTES_LENGTH)

        result = tracking.check_in(g.worker_id, g.company_id, job_id, location, notes)
        return _ok(session_to_dict(result), "Checked in successfully", 201)

    @app.route("/api/check-ins/check-out", methods=["POST"], endpoint="check_out")
    @login_required
    def check_out():
        g.operation = "check-out"
        data = _json_body()
        notes = optional_text(data.get("notes"), "notes", max_length=MAX_NOTES_LENGTH)

        result = tracking.check_out(g.worker_id, notes)
        return _ok(session_to_dict(result), "Checked out successfully")

    @app.route("/api/check-ins/active", methods=["GET"], endpoint="active_check_in")
    @login_required
    def active_check_in():
        g.operation = "active"
        active = tracking.get_active_session(g.worker_id)
        return _ok(session_to_dict(active) if active else None)

    @app.route("/api/check-ins/history", methods=["GET"], endpoint="check_in_history")
    @login_required
    def check_in_history():
        g.operation = "history"
        page, limit = _pagination()
        result = reports.get_worker_history(g.worker_id, page=page, limit=limit)
        return _ok(page_to_dict(result))

    @app.route("/api/check-ins", methods=["GET"], endpoint="list_check_ins")
    @login_required
    def list_check_ins():
        g.operation = "list"
        page, limit = _pagination()
        result = reports.list_sessions(
            g.company_id,
            worker_id=optional_uuid(request.args.get("user_id"), "user_id"),
            job_id=optional_uuid(request.args.get("job_id"), "job_id"),
            start=_parse_range_arg("start_date", required=False),
            end=_parse_range_arg("end_date", required=False, end_of_day=True),
            active_only=request.args.get("active_only") == "true",
            page=page,
            limit=limit,
        )
        return _ok(page_to_dict(result))

    @app.route("/api/check-ins/billables", methods=["GET"], endpoint="check_in_billables")
    @login_required
    def check_in_billables():
        g.operation = "billables"
        worker_id = optional_uuid(request.args.get("user_id"), "user_id") or g.worker_id
        totals = reports.get_billable_totals(
            worker_id,
            _parse_range_arg("start_date", required=True),
            _parse_range_arg("end_date", required=True, end_of_day=True),
        )
        return _ok(totals_to_dict(totals))
