from __future__ import annotations

from flask import Blueprint, abort, current_app, jsonify, request, session as flask_session

from ..shared import access
from ..shared.constants import MAX_RECORD_ID
from ..services.switch_state import SwitchRoleValidationError, hide_banner as hide_course_banner

bp = Blueprint("banner", __name__, url_prefix="/switchrole")


def _parse_course_id(payload) -> int:
    raw = payload.get("courseid") if payload else None
    if raw is None or raw == "":
        raise SwitchRoleValidationError("courseid is required.")
    if isinstance(raw, bool) or not (
        isinstance(raw, int) or str(raw).strip().removeprefix("-").isdecimal()
    ):
        raise SwitchRoleValidationError("courseid must be an integer.")
    course_id = int(raw)
    if course_id <= 0 or course_id > MAX_RECORD_ID:
        raise SwitchRoleValidationError("courseid is out of range.")
    return course_id


@bp.post("/hide-banner")
def hide_banner():
    user_id = flask_session.get("user_id")
    if not user_id:
        return jsonify({"ok": False, "error": "Authentication required."}), 401
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.form
    try:
        course_id = _parse_course_id(payload)
    except SwitchRoleValidationError as exc:
        current_app.logger.info(f"[BANNER] hide rejected user={user_id} reason={exc}")
        return jsonify({"ok": False, "error": str(exc)}), 400
    if not access.find_course(course_id):
        abort(404)
    hide_course_banner(flask_session, course_id)
    return jsonify({"result": True})
