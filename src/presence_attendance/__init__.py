"""Presence Attendance package.

Proof-of-presence attendance: rotating QR tokens on the holder device, a
camera scanner on the operator device, and a Flask API that re-validates,
geofences and records each mark. Organized by feature modules with thin
controllers over service/repository layers.
"""
