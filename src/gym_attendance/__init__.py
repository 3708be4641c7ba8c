"""Gym attendance engine.

Member check-in/check-out by QR code or typed member code, the nightly
auto-checkout sweep, and member QR code issuing. Organized by feature modules
(members, attendance, qr, ...) with a thin Flask controller layer over
service/repository layers. The Flask factory lives in ``gym_attendance.main``.
"""
