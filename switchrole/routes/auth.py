from __future__ import annotations

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session as flask_session,
    url_for,
)

from ..app import db
from ..models import User

bp = Blueprint("auth", __name__)


def _safe_next(target: str | None) -> str | None:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        password = request.form.get("password", "")
        user = User.query.filter(db.func.lower(User.email) == email).first()
        if not user or not user.check_password(password):
            current_app.logger.info(f"[AUTH-FAIL] login email={email}")
            flash("Invalid email or password.", "error")
            return redirect(url_for("auth.login"))
        flask_session.clear()
        flask_session["user_id"] = user.id
        flask_session["user_email"] = user.email
        current_app.logger.info(f"[AUTH] login user={user.id}")
        site_home = url_for("course.view", course_id=current_app.config["SITE_COURSE_ID"])
        return redirect(_safe_next(request.args.get("next")) or site_home)
    return render_template("login.html")


@bp.get("/logout")
def logout():
    flask_session.clear()
    flash("Signed out.", "success")
    return redirect(url_for("auth.login"))
