from __future__ import annotations

import io
import logging
from functools import wraps

from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import format_countdown, now_ms, parse_iso_date
from ..common.validators import optional_int, require_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DecodeError, TokenExpiredError, ValidationError
from ..scanner.image_fallback import decode_image
from ..tokens.issuer import TokenIssuer
from ..tokens.location import FixedCoordinateProvider, UnavailableCoordinateProvider
from ..tokens.qr_image import render_token_png
from .model import MarkResult

logger = logging.getLogger(__name__)

STAFF_ROLES = {Role.TEACHER.value, Role.ADMIN.value}


def _error(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def _validation_error(e: ValidationError):
    if isinstance(e, TokenExpiredError):
        return _error(str(e), 400, expired_at=e.expires_at, current_time=e.now)
    return _error(str(e), 400)


def _parse_day(value):
    if not value:
        return None
    try:
        return parse_iso_date(value.strip())
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    def api_login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return _error("Unauthorized", 401)
            return view(*args, **kwargs)

        return wrapper

    def staff_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if session.get("role") not in STAFF_ROLES:
                return _error("Forbidden", 403)
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_mark_attendance")
    @api_login_required
    @staff_required
    def api_mark_attendance():
        data = request.get_json(silent=True)
        if not data:
            return _error("Invalid JSON payload", 400)

        try:
            record = container.recorder.mark_request(data)
        except ValidationError as e:
            return _validation_error(e)
        except Exception as e:
            logger.exception("mark attendance failed")
            return _error(f"Server error: {e}", 500)

        return jsonify(MarkResult.from_record(record).to_dict()), 201

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_today_attendance")
    @api_login_required
    @staff_required
    def api_today_attendance():
        try:
            teacher_id = optional_int(request.args.get("teacher_id"), "teacher_id")
            course_id = optional_int(request.args.get("course_id"), "course_id")
            if not teacher_id or not course_id:
                raise ValidationError("Missing required parameters: teacher_id and course_id")
            section_id = optional_int(request.args.get("section_id"), "section_id")
            day = _parse_day(request.args.get("date"))

            rows = container.feed.today(teacher_id, course_id, section_id, day)
        except ValidationError as e:
            return _validation_error(e)
        except Exception as e:
            logger.exception("today attendance query failed")
            return _error(f"Server error: {e}", 500)

        return jsonify({"success": True, "data": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/course/<int:course_id>", methods=["GET"], endpoint="api_course_attendance")
    @api_login_required
    @staff_required
    def api_course_attendance(course_id: int):
        try:
            teacher_id = optional_int(request.args.get("teacher_id"), "teacher_id")
            day = _parse_day(request.args.get("date"))
            rows = container.feed.for_course(course_id, teacher_id=teacher_id, day=day)
        except ValidationError as e:
            return _validation_error(e)
        except Exception as e:
            logger.exception("course attendance query failed")
            return _error(f"Server error: {e}", 500)

        return jsonify({"success": True, "data": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/student/<int:student_id>", methods=["GET"], endpoint="api_student_attendance")
    @api_login_required
    def api_student_attendance(student_id: int):
        try:
            if session.get("role") not in STAFF_ROLES and int(session["user_id"]) != student_id:
                raise AuthorizationError("You can only view your own attendance")
            rows = container.feed.for_student(student_id)
        except AuthorizationError as e:
            return _error(str(e), 403)
        except Exception as e:
            logger.exception("student attendance query failed")
            return _error(f"Server error: {e}", 500)

        return jsonify({"success": True, "data": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/decode-image", methods=["POST"], endpoint="api_decode_image")
    @api_login_required
    @staff_required
    def api_decode_image():
        """Still-image fallback: decode an uploaded photo and run the scanner checks on it."""
        if "image" not in request.files:
            return _error("Missing image file", 400)

        try:
            section_id = require_int(request.form.get("section_id"), "section_id")
            year_level = optional_int(request.form.get("year_level"), "year_level")

            symbol = decode_image(request.files["image"].stream, decoder=container.decoder)
            roster = container.roster_repo.list_for_section(section_id, year_level=year_level)
            scan = container.validation_pipeline.validate(symbol.data, roster)
        except DecodeError as e:
            return _error(str(e), 400)
        except ValidationError as e:
            return _validation_error(e)
        except Exception as e:
            logger.exception("image decode failed")
            return _error(f"Server error: {e}", 500)

        body = scan.summary()
        body["success"] = True
        body["qr_payload"] = scan.payload.data
        return jsonify(body)

    def _issue_for_session_user():
        lat = request.args.get("lat", type=float)
        lng = request.args.get("lng", type=float)
        if lat is None or lng is None:
            provider = UnavailableCoordinateProvider(request.args.get("location_error") or "Geolocation not supported")
        else:
            provider = FixedCoordinateProvider(lat, lng)
        issuer = TokenIssuer(ttl_seconds=container.token_ttl_seconds)
        token = issuer.issue(int(session["user_id"]), provider)
        return token, issuer.location_error

    @app.route("/api/me/attendance-token", methods=["GET"], endpoint="api_my_attendance_token")
    @api_login_required
    def api_my_attendance_token():
        token, location_error = _issue_for_session_user()
        remaining = max(0, (token.expires_at - now_ms()) // 1000)
        return jsonify(
            {
                "success": True,
                "qr_payload": token.to_payload(),
                "location_error": location_error,
                "seconds_remaining": remaining,
                "countdown": format_countdown(remaining),
            }
        )

    @app.route("/api/me/attendance-qr", methods=["GET"], endpoint="api_my_attendance_qr")
    @api_login_required
    def api_my_attendance_qr():
        token, location_error = _issue_for_session_user()
        try:
            png = render_token_png(token)
        except Exception as e:
            logger.exception("QR render failed")
            return _error(str(e), 500)

        response = send_file(
            io.BytesIO(png),
            mimetype="image/png",
            download_name=f"attendance_{token.holder_id}.png",
        )
        response.headers["X-Token-Expires-At"] = str(token.expires_at)
        if location_error:
            response.headers["X-Location-Error"] = location_error
        return response
