"""Example: holder-side token rotation without Flask.

Writes the current attendance QR to ``attendance_qr.png`` and rewrites it
every time the token rotates. Ctrl+C to stop.
"""

import sys
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from presence_attendance.common.logging_config import configure_logging
from presence_attendance.tokens.issuer import RotatingTokenIssuer
from presence_attendance.tokens.location import FixedCoordinateProvider
from presence_attendance.tokens.qr_image import render_token_png

OUTPUT = Path("attendance_qr.png")


def write_qr(token):
    OUTPUT.write_bytes(render_token_png(token))
    print(f"new token for {token.holder_id}, expires_at={token.expires_at}")


def main():
    configure_logging("INFO")
    rotating = RotatingTokenIssuer(3, FixedCoordinateProvider(14.5995, 120.9842), on_rotate=write_qr)
    write_qr(rotating.token)

    with rotating:
        try:
            while True:
                print(f"\rexpires in {rotating.countdown}", end="", flush=True)
                time.sleep(1)
        except KeyboardInterrupt:
            print()


if __name__ == "__main__":
    main()
