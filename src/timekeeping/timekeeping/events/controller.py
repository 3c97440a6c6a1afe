from __future__ import annotations

from datetime import datetime

from flask import Flask, jsonify, request

from ..common.http import int_arg, json_api
from ..common.serialization import to_json_value
from ..container import Container
from ..core.enums import EventKind
from ..core.exceptions import ValidationError


def _datetime_field(data: dict, name: str) -> datetime:
    value = data.get(name)
    if not value:
        raise ValidationError(f"{name} is required")
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO datetime (YYYY-MM-DDTHH:MM:SS)")


def _event_kind_field(data: dict) -> EventKind:
    try:
        return EventKind(data.get("event_kind"))
    except ValueError:
        raise ValidationError(f"Unknown event_kind: {data.get('event_kind')}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/events", methods=["POST"], endpoint="api_event_create")
    @json_api
    def api_event_create():
        data = request.get_json(silent=True) or {}
        employee_id = int_arg(data.get("employee_id"), "employee_id")
        if employee_id is None:
            raise ValidationError("employee_id is required")

        event_id = container.event_service.record_manual_event(
            employee_id=employee_id,
            event_time=_datetime_field(data, "event_time"),
            event_kind=_event_kind_field(data),
            created_by=int_arg(data.get("created_by"), "created_by"),
            notes=data.get("notes"),
        )
        event = container.event_service.get(event_id)
        summary = container.summary_service.recompute(event.employee_id, event.event_date)
        return (
            jsonify({"success": True, "event": to_json_value(event), "summary": to_json_value(summary)}),
            201,
        )

    @app.route("/api/attendance/events/<int:event_id>/correct", methods=["POST"], endpoint="api_event_correct")
    @json_api
    def api_event_correct(event_id: int):
        data = request.get_json(silent=True) or {}
        before = container.event_service.get(event_id)

        event = container.event_service.correct_event(
            event_id=event_id,
            new_time=_datetime_field(data, "new_time"),
            reason=data.get("reason") or "",
            corrected_by=int_arg(data.get("corrected_by"), "corrected_by"),
        )
        days = {(before.employee_id, before.event_date), (event.employee_id, event.event_date)}
        container.summary_service.recompute_many(days)
        return jsonify({"success": True, "event": to_json_value(event)})

    @app.route("/api/attendance/events/<int:event_id>", methods=["GET"], endpoint="api_event_get")
    @json_api
    def api_event_get(event_id: int):
        return jsonify({"success": True, "event": to_json_value(container.event_service.get(event_id))})

