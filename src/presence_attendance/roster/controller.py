from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import optional_int, require_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def api_login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Unauthorized"}), 401
            if session.get("role") not in {Role.TEACHER.value, Role.ADMIN.value}:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/roster", methods=["GET"], endpoint="api_roster")
    @api_login_required
    def api_roster():
        try:
            section_id = require_int(request.args.get("section_id"), "section_id")
            year_level = optional_int(request.args.get("year_level"), "year_level")
            entries = container.roster_repo.list_for_section(section_id, year_level=year_level)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception as e:
            logger.exception("roster lookup failed")
            return jsonify({"success": False, "message": f"Server error: {e}"}), 500

        return jsonify({"success": True, "data": [e.to_dict() for e in entries]})
