from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, session

from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def api_login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Unauthorized"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/campuses/<int:campus_id>", methods=["GET"], endpoint="api_campus")
    @api_login_required
    def api_campus(campus_id: int):
        try:
            campus = container.campus_repo.get_by_id(campus_id)
        except Exception as e:
            logger.exception("campus lookup failed")
            return jsonify({"success": False, "message": f"Server error: {e}"}), 500

        if campus is None:
            return jsonify({"success": False, "message": "Campus not found"}), 404
        return jsonify({"success": True, "data": campus.to_dict()})
