from __future__ import annotations

from flask import Flask, current_app, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, login_required
from ..common.validators import parse_status
from ..core.exceptions import ValidationError
from ..container import Container
from .model import BatchEntry, BatchRequest


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_batch_request(data) -> BatchRequest:
    """Build a BatchRequest from the POST /api/attendance body."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    raw_entries = data.get("attendanceData")
    if not isinstance(raw_entries, list) or not raw_entries:
        raise ValidationError("Attendance data must be a non-empty array")

    entries = []
    for item in raw_entries:
        if not isinstance(item, dict):
            raise ValidationError("Each attendance entry must be an object")
        remarks = item.get("remarks")
        entries.append(
            BatchEntry(
                student_id=str(item.get("studentId") or "").strip(),
                status=parse_status(item.get("status")),
                remarks=str(remarks) if remarks not in (None, "") else None,
            )
        )

    return BatchRequest(
        day=parse_iso_date(data.get("date") or ""),
        class_label=str(data.get("class") or ""),
        subject=str(data.get("subject") or ""),
        entries=entries,
        update_mode=_as_bool(data.get("update", False)),
    )


def register(app: Flask, container: Container) -> None:
    def _debug() -> bool:
        return bool(current_app.config.get("DEBUG", False))

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        try:
            actor = container.auth_service.resolve_actor(session.get("user_id"))
            batch = parse_batch_request(request.get_json(silent=True))
            report = container.attendance_recorder.record_batch(batch, actor)
        except Exception as e:
            return error_response(e, debug=_debug())

        return jsonify(report.to_response()), 201 if report.created else 200

    @app.route("/api/attendance/student", methods=["GET"], endpoint="student_attendance")
    @login_required
    def student_attendance():
        try:
            actor = container.auth_service.resolve_actor(session.get("user_id"))
            marks, stats = container.attendance_recorder.get_student_attendance(
                actor,
                student_id=request.args.get("studentId", ""),
                start=parse_iso_date(request.args.get("startDate", "")),
                end=parse_iso_date(request.args.get("endDate", "")),
                subject=request.args.get("subject") or None,
            )
        except Exception as e:
            return error_response(e, debug=_debug())

        return jsonify({"success": True, "attendance": [m.to_dict() for m in marks], "stats": stats.to_dict()}), 200

    @app.route("/api/attendance/class", methods=["GET"], endpoint="class_attendance")
    @login_required
    def class_attendance():
        try:
            actor = container.auth_service.resolve_actor(session.get("user_id"))
            marks = container.attendance_recorder.get_class_attendance(
                actor,
                class_label=request.args.get("class", ""),
                subject=request.args.get("subject", ""),
                day=parse_iso_date(request.args.get("date", "")),
            )
        except Exception as e:
            return error_response(e, debug=_debug())

        return jsonify({"success": True, "data": [m.to_dict() for m in marks]}), 200

    @app.route("/api/attendance/<int:mark_id>", methods=["PUT"], endpoint="update_attendance")
    @login_required
    def update_attendance(mark_id: int):
        try:
            data = request.get_json(silent=True) or {}
            if not isinstance(data, dict):
                raise ValidationError("Request body must be a JSON object")
            actor = container.auth_service.resolve_actor(session.get("user_id"))
            mark = container.attendance_recorder.update_mark(
                actor,
                mark_id=mark_id,
                status=data.get("status"),
                remarks=data.get("remarks"),
            )
        except Exception as e:
            return error_response(e, debug=_debug())

        return jsonify({"success": True, "message": "Attendance updated successfully", "attendance": mark.to_dict()}), 200
