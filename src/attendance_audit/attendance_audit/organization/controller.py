from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.logging_config import get_logger
from ..common.params import PARAM_ALIASES, first_present
from ..container import Container

logger = get_logger("organization.controller")


def register(app: Flask, container: Container) -> None:
    def _respond(load):
        try:
            data = load()
        except Exception:
            logger.exception("hierarchy lookup failed")
            return jsonify({"success": False, "message": "Failed to load organization hierarchy"}), 500
        return jsonify({"success": True, "data": data, "count": len(data)})

    @app.route("/api/hierarchy/divisions", methods=["GET"], endpoint="api_divisions")
    def api_divisions():
        return _respond(container.organization_service.list_divisions)

    @app.route("/api/hierarchy/sections", methods=["GET"], endpoint="api_sections")
    def api_sections():
        division_id = first_present(request.args, PARAM_ALIASES["division_id"])
        return _respond(lambda: container.organization_service.list_sections(division_id))

    @app.route("/api/hierarchy/subsections", methods=["GET"], endpoint="api_subsections")
    def api_subsections():
        section_id = first_present(request.args, PARAM_ALIASES["section_id"])
        return _respond(lambda: container.organization_service.list_subsections(section_id))

    @app.route("/api/cache/invalidate/hierarchy", methods=["POST"], endpoint="api_cache_invalidate_hierarchy")
    def api_cache_invalidate_hierarchy():
        try:
            removed = container.organization_service.invalidate()
        except Exception:
            logger.exception("hierarchy cache invalidation failed")
            return jsonify({"success": False, "message": "Cache invalidation failed"}), 500
        return jsonify({"success": True, "deleted": removed})
