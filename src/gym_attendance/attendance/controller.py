from __future__ import annotations

import hmac
import io
import logging
from functools import wraps

from flask import Flask, jsonify, request, send_file
from PIL import Image

from ..common.clock import parse_iso_date
from ..common.validators import optional_str
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ErrorKind, SessionFilterStatus
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from ..container import Container
from .model import AttendanceResult, SessionFilters

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.MEMBER_NOT_FOUND: 404,
    ErrorKind.MEMBER_INACTIVE: 403,
    ErrorKind.TENANT_MISMATCH: 403,
    ErrorKind.NO_ACTIVE_MEMBERSHIP: 403,
    ErrorKind.PERSISTENCE_FAILURE: 503,
}


def _result_response(result: AttendanceResult):
    status = 200 if result.success else _STATUS_BY_KIND.get(result.error_kind, 400)
    return jsonify(result.to_dict()), status


def register(app: Flask, container: Container) -> None:
    def operator_required(view):
        """Operator endpoints need the shared key in the ``X-API-Key`` header."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            expected = app.config.get("OPERATOR_API_KEY") or ""
            given = request.headers.get("X-API-Key", "")
            if not expected or not hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8", "replace")):
                return jsonify({"success": False, "message": "Operator key required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _scope(value):
        gym_id = optional_str(value)
        return [gym_id] if gym_id else None

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok", "service": "gym-attendance"})

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    def api_attendance_scan():
        """Kiosk scan: QR payload or typed member code -> check-in / check-out."""
        data = request.get_json(silent=True) or {}
        result = container.attendance_service.process_attendance(
            str(data.get("code") or ""),
            gym_ids=_scope(data.get("gym_id")),
        )
        return _result_response(result)

    @app.route("/api/attendance/scan/image", methods=["POST"], endpoint="api_attendance_scan_image")
    def api_attendance_scan_image():
        """Accept an uploaded photo, decode the QR code in it and process it like a scan."""
        if "image" not in request.files:
            return jsonify({"success": False, "message": "Missing image file", "error_kind": ErrorKind.INVALID_INPUT.value}), 400

        from pyzbar.pyzbar import decode as pyzbar_decode

        try:
            img = Image.open(request.files["image"].stream).convert("RGB")
            decoded = pyzbar_decode(img)
        except Exception:
            logger.warning("uploaded scan image could not be read", exc_info=True)
            decoded = []

        if not decoded:
            return jsonify({"success": False, "message": "No QR code detected in the image", "error_kind": ErrorKind.INVALID_INPUT.value}), 400

        # Undecodable bytes end up as an unknown member code.
        scanned = decoded[0].data.decode("utf-8", errors="replace")
        result = container.attendance_service.process_attendance(scanned, gym_ids=_scope(request.form.get("gym_id")))
        return _result_response(result)

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @operator_required
    def api_attendance_list():
        args = request.args
        try:
            limit = int(args.get("limit") or DEFAULT_HISTORY_LIMIT)
            if limit <= 0:
                raise ValueError("limit must be a positive integer")
            filters = SessionFilters(
                gym_id=optional_str(args.get("gym_id")),
                member_id=optional_str(args.get("member_id")),
                date_from=parse_iso_date(args["date_from"]) if args.get("date_from") else None,
                date_to=parse_iso_date(args["date_to"]) if args.get("date_to") else None,
                status=SessionFilterStatus(args.get("status") or SessionFilterStatus.ALL.value),
                package_type=optional_str(args.get("package_type")) if args.get("package_type") != "all" else None,
                search=optional_str(args.get("search")),
                limit=limit,
            )
        except ValueError as e:
            return jsonify({"success": False, "message": f"Invalid filter: {e}"}), 400

        try:
            rows = container.attendance_service.list_sessions(filters)
        except PersistenceError as e:
            return jsonify({"success": False, "message": str(e)}), 503
        return jsonify({"success": True, "data": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/<int:session_id>/checkout", methods=["POST"], endpoint="api_attendance_manual_checkout")
    @operator_required
    def api_attendance_manual_checkout(session_id: int):
        data = request.get_json(silent=True) or {}
        try:
            session = container.attendance_service.manual_checkout(session_id, reason=optional_str(data.get("reason")))
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except PersistenceError as e:
            return jsonify({"success": False, "message": str(e)}), 503
        return jsonify({"success": True, "message": "Member checked out successfully", "attendance": session.to_dict()})

    @app.route("/api/attendance/auto-checkout", methods=["POST"], endpoint="api_attendance_auto_checkout")
    @operator_required
    def api_attendance_auto_checkout():
        data = request.get_json(silent=True) or {}
        gym_id = optional_str(data.get("gym_id"))

        if gym_id:
            result = container.auto_checkout_service.run_for_gym(gym_id)
            return jsonify(result.to_dict()), 200 if result.success else 503

        try:
            results = container.auto_checkout_service.run_for_all_gyms()
        except PersistenceError as e:
            return jsonify({"success": False, "count": 0, "message": str(e)}), 503

        ok = all(r.success for r in results)
        total = sum(r.count for r in results)
        body = {
            "success": ok,
            "count": total,
            "message": f"Auto-checkout completed for {total} members in {len(results)} gyms",
            "gyms": [r.to_dict() for r in results],
        }
        return jsonify(body), 200 if ok else 207

    @app.route("/api/members/<gym_id>/<member_code>/qr.png", endpoint="api_member_qr_png")
    @operator_required
    def api_member_qr_png(gym_id: str, member_code: str):
        try:
            png = container.member_qr_service.png_for(gym_id=gym_id, member_code=member_code)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except PersistenceError as e:
            return jsonify({"success": False, "message": str(e)}), 503
        return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"{member_code}.png")

    @app.route("/api/members/<gym_id>/<member_code>/qr", endpoint="api_member_qr")
    @operator_required
    def api_member_qr(gym_id: str, member_code: str):
        try:
            payload, data_uri = container.member_qr_service.data_uri_for(gym_id=gym_id, member_code=member_code)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except PersistenceError as e:
            return jsonify({"success": False, "message": str(e)}), 503
        return jsonify({"success": True, "payload": payload.to_dict(), "data": payload.to_json(), "image": data_uri})
