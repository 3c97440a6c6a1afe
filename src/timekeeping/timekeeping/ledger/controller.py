from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import int_arg, json_api
from ..common.serialization import to_json_value
from ..container import Container
from ..core.enums import EventKind
from ..core.exceptions import ValidationError
from .model import LedgerFilter
from .query import DEFAULT_PER_PAGE


def _text_arg(name: str) -> Optional[str]:
    # "" and "all" both mean "no filter" for the HR screens.
    value = (request.args.get(name) or "").strip()
    return None if value in ("", "all") else value


def _date_arg(name: str):
    value = _text_arg(name)
    if value is None:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def _filter_from_request() -> LedgerFilter:
    kind = _text_arg("event_kind")
    try:
        event_kind = EventKind(kind) if kind is not None else None
    except ValueError:
        raise ValidationError(f"Unknown event_kind: {kind}")

    criteria = LedgerFilter(
        identity_token=_text_arg("identity_token"),
        device_id=_text_arg("device_id"),
        event_kind=event_kind,
        date_from=_date_arg("date_from"),
        date_to=_date_arg("date_to"),
    )
    if criteria.date_from and criteria.date_to and criteria.date_from > criteria.date_to:
        raise ValidationError("date_from must not be after date_to")
    return criteria


def register(app: Flask, container: Container) -> None:
    @app.route("/api/ledger/stats", methods=["GET"], endpoint="api_ledger_stats")
    @json_api
    def api_ledger_stats():
        return jsonify({"success": True, "stats": to_json_value(container.poller.stats())})

    @app.route("/api/ledger/preview", methods=["GET"], endpoint="api_ledger_preview")
    @json_api
    def api_ledger_preview():
        """Dry run of the processing pipeline: nothing is written."""

        limit = int_arg(request.args.get("limit"), "limit")
        batch = container.pipeline.prepare(limit)
        return jsonify(
            {
                "success": True,
                "stats": to_json_value(batch.stats),
                "processable_sequence_ids": [e.sequence_id for e in batch.processable],
            }
        )

    @app.route("/api/ledger/sync", methods=["POST"], endpoint="api_ledger_sync")
    @json_api
    def api_ledger_sync():
        data = request.get_json(silent=True) or {}
        result = container.materializer.run(
            int_arg(data.get("limit"), "limit"),
            from_sequence_id=int_arg(data.get("from_sequence_id"), "from_sequence_id"),
        )
        return jsonify({"success": True, "result": to_json_value(result)})

    @app.route("/api/ledger/events", methods=["GET"], endpoint="api_ledger_events")
    @json_api
    def api_ledger_events():
        criteria = _filter_from_request()
        page = container.ledger_query.search(
            criteria,
            page=int_arg(request.args.get("page"), "page", 1),
            per_page=int_arg(request.args.get("per_page"), "per_page", DEFAULT_PER_PAGE),
        )
        return jsonify(
            {
                "success": True,
                "data": to_json_value(page.records),
                "meta": {
                    "current_page": page.page,
                    "per_page": page.per_page,
                    "total": page.total,
                    "last_page": page.last_page,
                },
                "filters": to_json_value(criteria),
            }
        )

    @app.route("/api/ledger/events/<int:sequence_id>", methods=["GET"], endpoint="api_ledger_event_detail")
    @json_api
    def api_ledger_event_detail(sequence_id: int):
        detail = container.ledger_query.detail(sequence_id)
        return jsonify(
            {
                "success": True,
                "data": {
                    "ledger_event": to_json_value(detail.record),
                    "attendance_event": to_json_value(detail.attendance_event),
                },
                "related": {
                    "previous": to_json_value(detail.previous),
                    "next": to_json_value(detail.next),
                    "same_day": to_json_value(detail.same_day),
                },
            }
        )
