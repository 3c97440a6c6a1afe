from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_api
from ..common.serialization import to_json_value
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError


def _parse_date(value: str):
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD")


def _summary_json(summary) -> dict:
    data = to_json_value(summary)
    data["attendance_status"] = summary.attendance_status.value
    return data


def register(app: Flask, container: Container) -> None:
    base = "/api/attendance/summaries/<int:employee_id>/<work_date>"

    @app.route(base, methods=["GET"], endpoint="api_summary_get")
    @json_api
    def api_summary_get(employee_id: int, work_date: str):
        summary = container.summary_service.get(employee_id, _parse_date(work_date))
        if not summary:
            raise NotFoundError("Summary not computed yet")
        return jsonify({"success": True, "summary": _summary_json(summary)})

    @app.route(base + "/recompute", methods=["POST"], endpoint="api_summary_recompute")
    @json_api
    def api_summary_recompute(employee_id: int, work_date: str):
        summary = container.summary_service.recompute(employee_id, _parse_date(work_date))
        return jsonify({"success": True, "summary": _summary_json(summary)})

    @app.route(base + "/finalize", methods=["POST"], endpoint="api_summary_finalize")
    @json_api
    def api_summary_finalize(employee_id: int, work_date: str):
        summary = container.summary_service.finalize(employee_id, _parse_date(work_date))
        return jsonify({"success": True, "summary": _summary_json(summary)})
