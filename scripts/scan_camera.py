"""Operator kiosk: scan attendance QR codes from a webcam and mark them.

    python scripts/scan_camera.py --server http://localhost:5000 \
        --username teacher --password teacher123 \
        --teacher-id 2 --course-id 10 --section-id 3 --campus-id 1
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from presence_attendance.common.logging_config import configure_logging
from presence_attendance.core.enums import ScanState
from presence_attendance.core.exceptions import CameraUnavailableError, DomainError
from presence_attendance.roster.loader import RosterLoader
from presence_attendance.scanner.client import AttendanceApiClient
from presence_attendance.scanner.frame_source import OpenCVFrameSource
from presence_attendance.scanner.loop import ScanNotice, ScannerLoop
from presence_attendance.validation.pipeline import ValidationPipeline


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan attendance QR codes from a camera")
    parser.add_argument("--server", default="http://localhost:5000")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--teacher-id", type=int, required=True)
    parser.add_argument("--course-id", type=int, required=True)
    parser.add_argument("--section-id", type=int, required=True)
    parser.add_argument("--year-level", type=int, default=None)
    parser.add_argument("--campus-id", type=int, required=True)
    parser.add_argument("--camera", type=int, default=0)
    parser.add_argument("--fps", type=int, default=30)
    parser.add_argument("--dev-mode", action="store_true", help="skip the geofence (server must allow it)")
    parser.add_argument("--yes", action="store_true", help="mark without asking for confirmation")
    return parser.parse_args(argv)


def _print_notice(notice: ScanNotice) -> None:
    print(f"[{notice.level}] {notice.message}")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging("INFO")

    client = AttendanceApiClient(args.server)
    try:
        user = client.login(args.username, args.password)
    except DomainError as e:
        print(f"Login failed: {e}")
        return 1
    print(f"Logged in as {user.get('name') or args.username}")

    roster = RosterLoader(client.fetch_roster)
    roster.request(args.section_id, args.year_level)

    loop = ScannerLoop(
        OpenCVFrameSource(args.camera),
        ValidationPipeline(),
        roster.snapshot,
        fps=args.fps,
        on_notice=_print_notice,
    )

    try:
        while True:
            try:
                state = loop.run()
            except CameraUnavailableError:
                return 2
            except Exception as e:
                print(f"[error] scan failed: {e}")
                continue

            if state != ScanState.CONFIRMING:
                continue

            session = loop.session
            student = session.matched_entry
            label = f"{student.name} ({student.student_code})" if student else session.student_id
            if not args.yes:
                answer = input(f"Mark {label} present? [y/N/q] ").strip().lower()
                if answer == "q":
                    loop.cancel()
                    return 0
                if answer != "y":
                    loop.cancel()
                    continue

            body = session.mark_body(
                teacher_id=args.teacher_id,
                course_id=args.course_id,
                section_id=args.section_id,
                campus_id=args.campus_id,
                dev_mode=args.dev_mode,
            )
            try:
                result = loop.confirm(lambda _s: client.mark(body))
            except DomainError:
                loop.cancel()
                continue
            print(f"{label}: {result.status.value if result.status else 'marked'} (id={result.attendance_id})")
    except KeyboardInterrupt:
        return 0
    finally:
        loop.cancel()
        roster.close()


if __name__ == "__main__":
    sys.exit(main())
