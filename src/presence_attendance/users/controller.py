from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..container import Container
from ..core.exceptions import AuthenticationError
from .service import SessionUser

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = request.get_json(silent=True) or {}
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        except Exception:
            logger.exception("login failed")
            return jsonify({"success": False, "message": "Server error during login"}), 500

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        return jsonify({"success": True, "user": s_user.to_dict()})

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    def api_me():
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Unauthorized"}), 401

        user = container.users_repo.get_by_id(int(session["user_id"]))
        if user is None or not user.is_active:
            session.clear()
            return jsonify({"success": False, "message": "Unauthorized"}), 401

        s_user = SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)
        return jsonify({"success": True, "user": s_user.to_dict()})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def api_logout():
        session.clear()
        return jsonify({"success": True, "message": "Logged out"})
