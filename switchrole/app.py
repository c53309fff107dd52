import logging
import os

from flask import Flask, current_app, g, request, session
from flask.json.tag import JSONTag
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from .models import User, Course, Role, RoleAssignment  # noqa: E402,F401
from .shared.constants import (  # noqa: E402
    DEFAULT_EXCLUDED_ENDPOINTS,
    DEFAULT_EXCLUDED_LAYOUTS,
)
from .shared import access  # noqa: E402
from .shared.context import build_page_context  # noqa: E402


class TagSet(JSONTag):
    """Serialize ``set`` session values as JSON lists at the cookie boundary."""

    __slots__ = ()
    key = " st"

    def check(self, value):
        return isinstance(value, set)

    def to_json(self, value):
        return [self.serializer.tag(item) for item in sorted(value)]

    def to_python(self, value):
        return set(value)


def create_app():
    app = Flask(__name__, template_folder="templates")
    app.secret_key = os.getenv("SECRET_KEY", "dev")
    app.config["PREFERRED_URL_SCHEME"] = "https"
    serializer = app.session_interface.serializer
    if TagSet.key not in serializer.tags:
        serializer.register(TagSet, index=0)

    DB_USER = os.getenv("DB_USER", "switchrole")
    DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
    DB_HOST = os.getenv("DB_HOST", "db")
    DB_NAME = os.getenv("DB_NAME", "switchrole")
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}/{DB_NAME}",
    )

    app.config["SQLALCHEMY_DATABASE_URI"] = DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SITE_COURSE_ID"] = int(os.getenv("SITE_COURSE_ID", "1"))
    app.config["SWITCHROLE_OFFER_SELF_ENROL"] = (
        os.getenv("SWITCHROLE_OFFER_SELF_ENROL", "1") == "1"
    )
    # Hosts may extend both sets after create_app() returns.
    app.config["SWITCHROLE_EXCLUDED_ENDPOINTS"] = set(DEFAULT_EXCLUDED_ENDPOINTS)
    app.config["SWITCHROLE_EXCLUDED_LAYOUTS"] = set(DEFAULT_EXCLUDED_LAYOUTS)

    logging.getLogger("switchrole").setLevel(logging.INFO)

    db.init_app(app)

    @app.before_request
    def after_require_login() -> None:
        """Resolve the page context and apply any pending role switch."""

        from .services.orchestrator import handle_role_switch

        g.page_context = None
        g.pop("page_layout", None)
        user_id = session.get("user_id")
        course_id = (request.view_args or {}).get("course_id")
        if course_id is None:
            course_id = request.values.get("id", type=int)
        if not user_id or course_id is None:
            return None
        user = db.session.get(User, user_id)
        course = access.find_course(course_id)
        if not user or not course:
            return None
        ctx = build_page_context(user, course, session, request)
        g.page_context = ctx
        handle_role_switch(ctx, request.values)
        return None

    def switchrole_banner():
        """Return the banner markup for the current page, or an empty string."""

        from .services.banner import render_banner, should_show_banner

        ctx = g.get("page_context")
        if ctx is None:
            return ""
        ctx.layout = g.get("page_layout", ctx.layout)
        if not should_show_banner(ctx):
            return ""
        return render_banner(ctx)

    app.jinja_env.globals["switchrole_banner"] = switchrole_banner

    @app.context_processor
    def inject_user():
        user = None
        user_id = session.get("user_id")
        if user_id:
            user = db.session.get(User, user_id)
        return {"current_user": user}

    @app.get("/health")
    def health():  # pragma: no cover - simple healthcheck
        return "OK", 200

    from .routes.auth import bp as auth_bp
    from .routes.course import bp as course_bp
    from .routes.banner import bp as banner_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(course_bp)
    app.register_blueprint(banner_bp)

    with app.app_context():
        if not os.getenv("FLASK_SKIP_SEED"):
            seed_site_course_safely()

    return app


def seed_site_course_safely() -> None:
    """Create the site-level course if the table exists and it is missing."""

    try:
        from sqlalchemy import inspect

        from .models import CourseCategory

        insp = inspect(db.engine)
        if "courses" not in insp.get_table_names():
            return

        site_id = current_app.config["SITE_COURSE_ID"]
        if db.session.get(Course, site_id):
            return

        category = db.session.query(CourseCategory).order_by(CourseCategory.id).first()
        if category is None:
            category = CourseCategory(name="Miscellaneous")
            db.session.add(category)
            db.session.flush()
        db.session.add(
            Course(
                id=site_id,
                fullname="Site home",
                shortname="site",
                category_id=category.id,
            )
        )
        db.session.commit()
        logging.info("Seeded site course id=%s.", site_id)
    except Exception as exc:  # pragma: no cover
        db.session.rollback()
        logging.error("Site course seed failed: %s", exc)
