from __future__ import annotations

from flask import Flask, current_app, jsonify, request, session

from ..common.http import error_response, login_required
from ..core.constants import DEFAULT_ACTIVITY_LIMIT
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activities/recent", methods=["GET"], endpoint="recent_activities")
    @login_required
    def recent_activities():
        try:
            limit = int(request.args.get("limit") or DEFAULT_ACTIVITY_LIMIT)
        except ValueError:
            limit = DEFAULT_ACTIVITY_LIMIT

        try:
            items = container.activity_tracker.recent(session["user_id"], limit=limit)
        except Exception as e:
            return error_response(e, debug=bool(current_app.config.get("DEBUG")))
        return jsonify({"success": True, "data": [a.to_dict() for a in items]}), 200
