import os
import pathlib
import sys
from types import SimpleNamespace

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from switchrole.app import create_app, db, seed_site_course_safely
from switchrole.models import Course, CourseCategory, Role, User
from switchrole.shared.access import assign_role
from switchrole.shared.constants import CONTEXT_COURSE, CONTEXT_SYSTEM
from switchrole.shared.context import PageContext


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "slow" in item.keywords or "quarantine" in item.keywords:
            continue
        item.add_marker("full")
        if "no_smoke" in item.keywords:
            continue
        item.add_marker("smoke")


@pytest.fixture
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    application = create_app()
    with application.app_context():
        db.create_all()
        seed_site_course_safely()
        yield application
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, full_name=None, password="pw", **kwargs):
    user = User(email=email, full_name=full_name or email, **kwargs)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    return user


def make_course(category, fullname, **kwargs):
    course = Course(
        fullname=fullname,
        shortname=fullname.replace(" ", "")[:20],
        category_id=category.id,
        **kwargs,
    )
    db.session.add(course)
    db.session.flush()
    return course


@pytest.fixture
def world(app):
    """A manager with a system role who is also enrolled as a student."""

    category = CourseCategory(name="Science")
    db.session.add(category)
    db.session.flush()
    course = make_course(category, "Biology 101", self_enrol_enabled=True)

    manager = Role(shortname="manager", name="Manager", sort_order=1, can_view_courses=True)
    editingteacher = Role(
        shortname="editingteacher", name="Teacher", sort_order=3, switchable=True
    )
    teacher = Role(
        shortname="teacher", name="Non-editing teacher", sort_order=4, switchable=True
    )
    student = Role(shortname="student", name="Student", sort_order=5, switchable=True)
    auditor = Role(shortname="auditor", name="Auditor", sort_order=6, switchable=False)
    db.session.add_all([manager, editingteacher, teacher, student, auditor])
    db.session.flush()

    user = make_user("admin@example.com", "Ada Admin")
    assign_role(user.id, manager.id, CONTEXT_SYSTEM)
    assign_role(user.id, student.id, CONTEXT_COURSE, course.id)
    db.session.commit()

    return SimpleNamespace(
        category=category,
        course=course,
        site_course=db.session.get(Course, app.config["SITE_COURSE_ID"]),
        user=user,
        roles=SimpleNamespace(
            manager=manager,
            editingteacher=editingteacher,
            teacher=teacher,
            student=student,
            auditor=auditor,
        ),
    )


def make_ctx(user, course, session=None, **kwargs):
    kwargs.setdefault("url", f"/course/{course.id}")
    kwargs.setdefault("endpoint", "course.view")
    kwargs.setdefault("site_course_id", 1)
    return PageContext(
        user=user,
        course=course,
        session=session if session is not None else {},
        **kwargs,
    )


def login(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
