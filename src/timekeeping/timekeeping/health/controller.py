from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import int_arg, json_api
from ..common.serialization import to_json_value
from ..container import Container
from ..core.constants import DEFAULT_HEALTH_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    @app.route("/api/ledger/health/check", methods=["POST"], endpoint="api_ledger_health_check")
    @json_api
    def api_ledger_health_check():
        log = container.health_monitor.run_check()
        return jsonify({"success": True, "health": to_json_value(log)})

    @app.route("/api/ledger/health", methods=["GET"], endpoint="api_ledger_health")
    @json_api
    def api_ledger_health():
        limit = int_arg(request.args.get("limit"), "limit", DEFAULT_HEALTH_HISTORY_LIMIT)
        logs = container.health_monitor.recent(limit)
        return jsonify({"success": True, "logs": to_json_value(logs)})
