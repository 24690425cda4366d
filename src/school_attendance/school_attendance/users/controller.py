from __future__ import annotations

from flask import Flask, current_app, jsonify, request, session

from ..common.http import error_response, login_required
from ..core.enums import ActivityType
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return error_response(e, debug=bool(current_app.config.get("DEBUG")))

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        container.activity_tracker.track(
            user_id=s_user.user_id,
            activity_type=ActivityType.LOGIN,
            message=f"{s_user.full_name} logged in",
        )
        return jsonify({"success": True, "user": s_user.to_dict()}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        user_id = session.get("user_id")
        session.clear()
        container.activity_tracker.track(
            user_id=user_id,
            activity_type=ActivityType.LOGOUT,
            message="Logged out",
        )
        return jsonify({"success": True, "message": "Logged out"}), 200
