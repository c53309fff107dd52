import pytest
from werkzeug.exceptions import NotFound

from switchrole.app import db
from switchrole.models import CourseCategory
from switchrole.services.roles import (
    CourseRole,
    get_active_switched_role,
    get_course_roles,
    get_switchable_roles,
    has_elevated_role,
)
from switchrole.shared.access import assign_role, role_switch, unassign_role
from switchrole.shared.constants import CONTEXT_CATEGORY, CONTEXT_COURSE, CONTEXT_SYSTEM

from conftest import make_course, make_ctx, make_user


def _enrol(user, role, course):
    assign_role(user.id, role.id, CONTEXT_COURSE, course.id)
    db.session.commit()


def test_get_course_roles(world):
    roles = world.roles
    ctx = make_ctx(world.user, world.course)
    assert get_course_roles(ctx) == {
        roles.student.id: CourseRole(roles.student.id, "student", "Student")
    }

    _enrol(world.user, roles.teacher, world.course)
    ctx = make_ctx(world.user, world.course)
    assert list(get_course_roles(ctx)) == [roles.teacher.id, roles.student.id]

    # Switching role does not change the real course roles.
    role_switch(ctx.session, world.course.id, roles.student.id)
    ctx.reset_cache()
    assert set(get_course_roles(ctx)) == {roles.teacher.id, roles.student.id}


def test_course_roles_are_cached_per_context(world):
    ctx = make_ctx(world.user, world.course)
    assert set(get_course_roles(ctx)) == {world.roles.student.id}

    _enrol(world.user, world.roles.teacher, world.course)
    assert set(get_course_roles(ctx)) == {world.roles.student.id}

    ctx.reset_cache()
    assert set(get_course_roles(ctx)) == {world.roles.student.id, world.roles.teacher.id}
    other = make_ctx(world.user, world.course)
    assert set(get_course_roles(other)) == {world.roles.student.id, world.roles.teacher.id}


def test_get_switchable_roles(world):
    roles = world.roles

    ctx = make_ctx(world.user, world.course)
    assert {rid: r.name for rid, r in get_switchable_roles(ctx).items()} == {
        roles.student.id: "Student"
    }

    _enrol(world.user, roles.teacher, world.course)
    ctx = make_ctx(world.user, world.course)
    assert {rid: r.name for rid, r in get_switchable_roles(ctx).items()} == {
        roles.teacher.id: "Non-editing teacher",
        roles.student.id: "Student",
    }

    # Once switched to student there is nothing left to switch to.
    role_switch(ctx.session, world.course.id, roles.student.id)
    ctx.reset_cache()
    assert get_switchable_roles(ctx) == {}


def test_switchable_roles_exclude_roles_the_host_does_not_allow(world):
    _enrol(world.user, world.roles.auditor, world.course)
    ctx = make_ctx(world.user, world.course)
    assert world.roles.auditor.id in get_course_roles(ctx)
    assert world.roles.auditor.id not in get_switchable_roles(ctx)


def test_switchable_roles_empty_without_course_roles(world):
    outsider = make_user("outsider@example.com")
    assign_role(outsider.id, world.roles.manager.id, CONTEXT_SYSTEM)
    db.session.commit()
    assert get_switchable_roles(make_ctx(outsider, world.course)) == {}


def test_get_active_switched_role(world):
    student = world.roles.student
    ctx = make_ctx(world.user, world.course)
    assert get_active_switched_role(ctx) == 0

    role_switch(ctx.session, world.course.id, student.id)
    ctx.reset_cache()
    assert get_active_switched_role(ctx) == student.id


def test_active_switched_role_ignores_roles_not_held(world):
    ctx = make_ctx(world.user, world.course)
    role_switch(ctx.session, world.course.id, world.roles.teacher.id)
    assert get_active_switched_role(ctx) == 0


def test_active_switched_role_is_per_course(world):
    other = make_course(world.category, "Chemistry 101")
    _enrol(world.user, world.roles.student, other)
    session = {}
    role_switch(session, other.id, world.roles.student.id)
    assert get_active_switched_role(make_ctx(world.user, world.course, session)) == 0
    assert get_active_switched_role(make_ctx(world.user, other, session)) == world.roles.student.id


def test_has_elevated_role(world):
    ctx = make_ctx(world.user, world.course)
    assert has_elevated_role(ctx)

    unassign_role(world.user.id, world.roles.manager.id, CONTEXT_SYSTEM)
    db.session.commit()
    assert not has_elevated_role(make_ctx(world.user, world.course))


def test_has_elevated_role_from_parent_category(world):
    parent = CourseCategory(name="Faculty")
    db.session.add(parent)
    db.session.flush()
    world.category.parent_id = parent.id
    user = make_user("catmanager@example.com")
    assign_role(user.id, world.roles.manager.id, CONTEXT_CATEGORY, parent.id)
    db.session.commit()

    assert has_elevated_role(make_ctx(user, world.course))

    unrelated = CourseCategory(name="Arts")
    db.session.add(unrelated)
    db.session.flush()
    other = make_user("artsmanager@example.com")
    assign_role(other.id, world.roles.manager.id, CONTEXT_CATEGORY, unrelated.id)
    db.session.commit()
    assert not has_elevated_role(make_ctx(other, world.course))


def test_guest_never_has_elevated_role(world):
    guest = make_user("guest@example.com", is_guest=True)
    assign_role(guest.id, world.roles.manager.id, CONTEXT_SYSTEM)
    db.session.commit()
    assert not has_elevated_role(make_ctx(guest, world.course))


def test_missing_category_is_fatal(world):
    orphan = make_course(world.category, "Orphaned")
    orphan.category_id = 999
    db.session.commit()
    with pytest.raises(NotFound):
        has_elevated_role(make_ctx(world.user, orphan))
