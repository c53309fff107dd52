from __future__ import annotations

from functools import wraps

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session as flask_session,
    url_for,
)

from ..app import db
from ..models import Course, Role, User
from ..shared import access
from ..shared.constants import CONTEXT_COURSE

bp = Blueprint("course", __name__)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user_id = flask_session.get("user_id")
        user = db.session.get(User, user_id) if user_id else None
        if not user:
            return redirect(url_for("auth.login", next=request.full_path))
        return fn(*args, **kwargs, current_user=user)

    return wrapper


def _safe_return_url(target: str | None, course: Course) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("course.view", course_id=course.id)


@bp.get("/course/<int:course_id>")
@login_required
def view(course_id: int, current_user):
    course = access.find_course(course_id)
    if not course:
        abort(404)
    g.page_layout = request.args.get("layout") or "course"
    return render_template("course/view.html", course=course)


@bp.get("/course/switchrole")
@login_required
def switch_role(current_user):
    course = access.find_course(request.args.get("id", type=int))
    if not course:
        abort(404)
    role_id = request.args.get("switchrole", type=int)
    if role_id is None or role_id < 0:
        abort(400)
    if role_id:
        course_roles = {r.id for r in access.get_user_course_roles(current_user.id, course.id)}
        allowed = access.get_switchable_roles(flask_session, course.id)
        if role_id not in course_roles or role_id not in allowed:
            current_app.logger.info(
                f"[SWITCHROLE] refused user={current_user.id} course={course.id} role={role_id}"
            )
            flash("You cannot switch to that role.", "error")
            return redirect(_safe_return_url(request.args.get("returnurl"), course))
    access.role_switch(flask_session, course.id, role_id)
    current_app.logger.info(
        f"[SWITCHROLE] user={current_user.id} course={course.id} role={role_id}"
    )
    return redirect(_safe_return_url(request.args.get("returnurl"), course))


@bp.route("/enrol/<int:course_id>", methods=["GET", "POST"])
@login_required
def enrol_index(course_id: int, current_user):
    course = access.find_course(course_id)
    if not course:
        abort(404)
    if request.method == "POST":
        if not course.self_enrol_enabled:
            abort(403)
        student = Role.query.filter_by(shortname="student").one_or_none()
        if student is None:
            abort(404)
        access.assign_role(current_user.id, student.id, CONTEXT_COURSE, course.id)
        db.session.commit()
        current_app.logger.info(
            f"[ENROL] self user={current_user.id} course={course.id}"
        )
        flash("You are enrolled in this course.", "success")
        return redirect(url_for("course.view", course_id=course.id))
    return render_template("course/enrol.html", course=course)
