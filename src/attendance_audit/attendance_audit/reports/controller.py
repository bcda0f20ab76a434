from __future__ import annotations

import csv
import io
import json

from flask import Flask, jsonify, request

from ..common.logging_config import get_logger
from ..common.params import PARAM_ALIASES, first_present
from ..core.enums import CacheScope
from ..core.exceptions import ValidationError
from ..container import Container

logger = get_logger("reports.controller")

_FALSY = {"0", "false", "no", "off"}


def _request_params() -> dict:
    """Query string merged with a JSON body; body values win."""
    params = request.args.to_dict()
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        params.update(body)
    return params


def _csv_cell(value):
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return value


def register(app: Flask, container: Container) -> None:
    def _write_report_csv(payload: dict):
        """One CSV row per group member, prefixed by its group name."""

        rows: list[dict] = []
        fieldnames: list[str] = ["groupName"]
        for group in payload.get("data", []):
            for member in group.get("employees", []):
                for key in member:
                    if key not in fieldnames:
                        fieldnames.append(key)
                rows.append({"groupName": group.get("groupName"), **{k: _csv_cell(v) for k, v in member.items()}})

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        date_range = payload.get("dateRange", {})
        start = str(date_range.get("from", "")).replace("-", "")
        end = str(date_range.get("to", "")).replace("-", "")
        filename = f"audit_report_{payload.get('grouping', 'none')}_{start}_{end}.csv"

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "X-Cache": "HIT" if payload.get("cached") else "MISS",
            },
        )

    @app.route("/api/reports/audit", methods=["GET", "POST"], endpoint="api_audit_report")
    def api_audit_report():
        params = _request_params()
        try:
            payload = container.report_service.generate_report(params)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("audit report failed")
            return jsonify({"success": False, "message": "Failed to generate audit report"}), 500

        if str(params.get("format") or "").strip().lower() == "csv":
            return _write_report_csv(payload)
        return jsonify({"success": True, **payload})

    @app.route(
        "/api/cache/invalidate/employee/<employee_id>",
        methods=["POST"],
        endpoint="api_cache_invalidate_employee",
    )
    def api_cache_invalidate_employee(employee_id: str):
        include_groups = str(request.args.get("groups", "1")).strip().lower() not in _FALSY
        try:
            removed = container.report_service.invalidate_employee(employee_id, include_groups=include_groups)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("employee cache invalidation failed")
            return jsonify({"success": False, "message": "Cache invalidation failed"}), 500
        return jsonify({"success": True, "deleted": removed, "employeeId": employee_id})

    @app.route("/api/cache/invalidate/organization", methods=["POST"], endpoint="api_cache_invalidate_organization")
    def api_cache_invalidate_organization():
        params = _request_params()
        try:
            removed = container.report_service.invalidate_organization(
                first_present(params, PARAM_ALIASES["division_id"]),
                first_present(params, PARAM_ALIASES["section_id"]),
                first_present(params, PARAM_ALIASES["sub_section_id"]),
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("organization cache invalidation failed")
            return jsonify({"success": False, "message": "Cache invalidation failed"}), 500
        return jsonify({"success": True, "deleted": removed})

    @app.route("/api/cache/invalidate", methods=["POST"], endpoint="api_cache_invalidate")
    def api_cache_invalidate():
        scope = _request_params().get("scope") or CacheScope.ALL.value
        try:
            removed = container.report_service.invalidate_all(scope)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("cache invalidation failed")
            return jsonify({"success": False, "message": "Cache invalidation failed"}), 500
        return jsonify({"success": True, "deleted": removed, "scope": str(scope).lower()})

    @app.route("/api/cache/stats", methods=["GET"], endpoint="api_cache_stats")
    def api_cache_stats():
        cache = container.report_cache
        if cache is None:
            return jsonify({"success": True, "data": {"enabled": False}})
        return jsonify({"success": True, "data": {"enabled": True, **cache.stats()}})

    @app.route("/api/cache/stats/reset", methods=["POST"], endpoint="api_cache_stats_reset")
    def api_cache_stats_reset():
        if container.report_cache is not None:
            container.report_cache.reset_stats()
        return jsonify({"success": True})
