from __future__ import annotations

import io
import json

import pytest

from presence_attendance.common.datetime_utils import now_ms
from presence_attendance.container import assemble
from presence_attendance.geofence.model import Coordinates
from presence_attendance.main import create_app
from presence_attendance.scanner.decoder import DecodedSymbol
from presence_attendance.tokens.model import AttendanceToken
from presence_attendance.tokens.qr_image import render_qr_png


class FixedDecoder:
    def __init__(self, data=None):
        self.data = data

    def decode(self, raster):
        return DecodedSymbol(self.data) if self.data else None


@pytest.fixture
def decoder():
    return FixedDecoder()


@pytest.fixture
def app(users_repo, campus_repo, roster_repo, attendance_repo, decoder):
    container = assemble(
        users_repo=users_repo,
        campus_repo=campus_repo,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        allow_dev_mode=True,
        decoder=decoder,
    )
    return create_app(container=container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def _login_as(client, user_id: int, role: str) -> None:
    with client.session_transaction() as s:
        s["user_id"] = user_id
        s["role"] = role


def _fresh_payload(holder_id=7, location=Coordinates(14.5995, 120.9842)):
    return AttendanceToken.mint(holder_id, issued_at=now_ms(), location=location).to_payload()


def _mark_body(**overrides):
    body = {
        "student_id": 7,
        "teacher_id": 2,
        "course_id": 10,
        "section_id": 5,
        "campus_id": 1,
        "qr_payload": _fresh_payload(),
        "teacher_location": None,
        "dev_mode": False,
    }
    body.update(overrides)
    return body


def test_login_sets_session(client):
    resp = client.post("/api/auth/login", json={"username": "teacher", "password": "teacher123"})

    assert resp.status_code == 200
    assert resp.get_json()["user"] == {"id": 2, "name": "Tess Teacher", "role": "teacher"}
    with client.session_transaction() as s:
        assert s["role"] == "teacher"


def test_login_with_wrong_password(client):
    resp = client.post("/api/auth/login", json={"username": "teacher", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Invalid username or password"}


def test_mark_requires_login(client):
    resp = client.post("/api/attendance/mark", json=_mark_body())

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Unauthorized"}


def test_students_cannot_mark(client):
    _login_as(client, 7, "student")
    assert client.post("/api/attendance/mark", json=_mark_body()).status_code == 403


def test_mark_then_today(client, attendance_repo):
    _login_as(client, 2, "teacher")

    resp = client.post("/api/attendance/mark", json=_mark_body())

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "Attendance marked successfully"
    assert body["status"] == "present"
    assert body["attendance_id"] == 1

    today = client.get("/api/attendance/today?teacher_id=2&course_id=10").get_json()
    assert today["success"] is True
    assert [row["student_code"] for row in today["data"]] == ["2024-001"]


def test_mark_out_of_range(client):
    _login_as(client, 2, "teacher")

    resp = client.post("/api/attendance/mark", json=_mark_body(qr_payload=_fresh_payload(location=Coordinates(0, 0))))

    assert resp.status_code == 201
    assert resp.get_json()["status"] == "out_of_range"


def test_mark_dev_mode(client):
    _login_as(client, 2, "teacher")

    resp = client.post(
        "/api/attendance/mark",
        json=_mark_body(qr_payload=_fresh_payload(location=Coordinates(0, 0)), dev_mode=True),
    )

    assert resp.get_json()["status"] == "present"


def test_mark_expired_token(client, attendance_repo):
    _login_as(client, 2, "teacher")
    stale = AttendanceToken.mint(7, issued_at=now_ms() - 600_000, location=Coordinates(0, 0)).to_payload()

    resp = client.post("/api/attendance/mark", json=_mark_body(qr_payload=stale))

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "QR code has expired"
    assert body["expired_at"] == stale["expires_at"]
    assert body["current_time"] >= stale["expires_at"]
    assert attendance_repo.records == []


def test_mark_missing_fields(client):
    _login_as(client, 2, "teacher")

    resp = client.post("/api/attendance/mark", json=_mark_body(campus_id=None))

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Missing required fields: student_id, teacher_id, course_id, campus_id"


def test_mark_invalid_json(client):
    _login_as(client, 2, "teacher")

    resp = client.post("/api/attendance/mark", data="not json", content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid JSON payload"


def test_today_requires_teacher_and_course(client):
    _login_as(client, 2, "teacher")

    resp = client.get("/api/attendance/today?teacher_id=2")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Missing required parameters: teacher_id and course_id"


def test_today_rejects_bad_date(client):
    _login_as(client, 2, "teacher")
    resp = client.get("/api/attendance/today?teacher_id=2&course_id=10&date=19/10/2026")
    assert resp.status_code == 400


def test_student_history_is_private(client):
    _login_as(client, 7, "student")

    assert client.get("/api/attendance/student/7").status_code == 200
    assert client.get("/api/attendance/student/8").status_code == 403


def test_course_feed(client):
    _login_as(client, 2, "teacher")
    client.post("/api/attendance/mark", json=_mark_body())
    client.post("/api/attendance/mark", json=_mark_body())

    data = client.get("/api/attendance/course/10?teacher_id=2").get_json()["data"]

    assert [row["id"] for row in data] == [2, 1]


def test_my_token_without_location(client):
    _login_as(client, 7, "student")

    body = client.get("/api/me/attendance-token").get_json()

    payload = body["qr_payload"]
    assert payload["student_id"] == 7
    assert payload["location"] == {"lat": 0.0, "lng": 0.0}
    assert payload["expires_at"] - payload["ts"] == 300_000
    assert body["location_error"] == "Location error: Geolocation not supported"
    assert body["countdown"] in {"5:00", "4:59"}


def test_my_qr_png(client):
    _login_as(client, 7, "student")

    resp = client.get("/api/me/attendance-qr?lat=14.5995&lng=120.9842")

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")
    assert int(resp.headers["X-Token-Expires-At"]) > now_ms()
    assert "X-Location-Error" not in resp.headers


def test_decode_image(client, decoder):
    _login_as(client, 2, "teacher")
    decoder.data = json.dumps(_fresh_payload())

    resp = client.post(
        "/api/attendance/decode-image",
        data={"section_id": "5", "image": (io.BytesIO(render_qr_png("x")), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["valid"] is True
    assert body["student"]["name"] == "Ana Cruz"
    assert body["qr_payload"]["type"] == "attendance"


def test_decode_image_not_enrolled(client, decoder):
    _login_as(client, 2, "teacher")
    decoder.data = "2024-100"

    resp = client.post(
        "/api/attendance/decode-image",
        data={"section_id": "5", "image": (io.BytesIO(render_qr_png("x")), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert "not enrolled" in resp.get_json()["message"]


def test_decode_image_without_code(client):
    _login_as(client, 2, "teacher")

    resp = client.post(
        "/api/attendance/decode-image",
        data={"section_id": "5", "image": (io.BytesIO(render_qr_png("x")), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No QR code found in image"


def test_decode_image_missing_file(client):
    _login_as(client, 2, "teacher")
    resp = client.post("/api/attendance/decode-image", data={"section_id": "5"}, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_roster_lookup(client):
    _login_as(client, 2, "teacher")

    body = client.get("/api/roster?section_id=5").get_json()

    assert [e["student_id"] for e in body["data"]] == ["2024-001", "2024-002"]


def test_roster_requires_section(client):
    _login_as(client, 2, "teacher")
    assert client.get("/api/roster").status_code == 400


def test_campus_lookup(client):
    _login_as(client, 7, "student")

    assert client.get("/api/campuses/1").get_json()["data"]["geo_radius_m"] == 50
    assert client.get("/api/campuses/2").status_code == 404


def test_me_and_logout(client):
    client.post("/api/auth/login", json={"username": "teacher", "password": "teacher123"})

    assert client.get("/api/auth/me").get_json()["user"]["id"] == 2

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_me_for_deactivated_account(client):
    _login_as(client, 20, "student")
    assert client.get("/api/auth/me").status_code == 401
