"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOKEN_TYPE = "attendance"
TOKEN_TTL_SECONDS = 300
TOKEN_TTL_MS = TOKEN_TTL_SECONDS * 1000

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_GEO_RADIUS_M = 50

DEFAULT_SCAN_FPS = 30
DEFAULT_CAMERA_INDEX = 0

DEFAULT_HISTORY_LIMIT = 200
