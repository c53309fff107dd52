"""Host access layer: capabilities, role storage and role switching.

The banner services only talk to the host through these functions, so a
different host can swap this module without touching the decision logic.
"""

from __future__ import annotations

from typing import Iterable, MutableMapping

from flask import abort
from sqlalchemy import and_, or_

from ..app import db
from ..models import Course, CourseCategory, Role, RoleAssignment
from .constants import (
    CONTEXT_CATEGORY,
    CONTEXT_COURSE,
    CONTEXT_SYSTEM,
    MAX_RECORD_ID,
    ROLE_SWITCHES_KEY,
)


def find_course(course_id: int | None) -> Course | None:
    if course_id is None or not 0 < course_id <= MAX_RECORD_ID:
        return None
    return db.session.get(Course, course_id)


def get_category(category_id: int) -> CourseCategory:
    """Return the category or abort with 404 when it does not exist."""
    category = db.session.get(CourseCategory, category_id)
    if category is None:
        abort(404, description=f"Course category {category_id} not found")
    return category


def get_user_course_roles(user_id: int, course_id: int) -> list[Role]:
    """Roles assigned to the user directly in the course context."""
    return (
        db.session.query(Role)
        .join(RoleAssignment, RoleAssignment.role_id == Role.id)
        .filter(
            RoleAssignment.user_id == user_id,
            RoleAssignment.context_level == CONTEXT_COURSE,
            RoleAssignment.instance_id == course_id,
        )
        .order_by(Role.sort_order, Role.id)
        .all()
    )


def has_course_view_capability(user_id: int, category_ids: Iterable[int]) -> bool:
    """True when a course:view role is held at system level or on a category."""
    category_ids = list(category_ids)
    query = (
        db.session.query(RoleAssignment.id)
        .join(Role, RoleAssignment.role_id == Role.id)
        .filter(RoleAssignment.user_id == user_id, Role.can_view_courses.is_(True))
    )
    system_clause = RoleAssignment.context_level == CONTEXT_SYSTEM
    if category_ids:
        category_clause = and_(
            RoleAssignment.context_level == CONTEXT_CATEGORY,
            RoleAssignment.instance_id.in_(category_ids),
        )
        query = query.filter(or_(system_clause, category_clause))
    else:
        query = query.filter(system_clause)
    return query.first() is not None


def get_switched_role(session: MutableMapping, course_id: int) -> int:
    switches = session.get(ROLE_SWITCHES_KEY) or {}
    try:
        return int(switches.get(str(course_id), 0) or 0)
    except (TypeError, ValueError):
        return 0


def is_role_switched(session: MutableMapping, course_id: int) -> bool:
    return get_switched_role(session, course_id) != 0


def role_switch(session: MutableMapping, course_id: int, role_id: int) -> None:
    """Switch the session into ``role_id`` for the course; 0 switches back."""
    switches = dict(session.get(ROLE_SWITCHES_KEY) or {})
    if role_id:
        switches[str(course_id)] = int(role_id)
    else:
        switches.pop(str(course_id), None)
    session[ROLE_SWITCHES_KEY] = switches


def get_switchable_roles(session: MutableMapping, course_id: int) -> dict[int, Role]:
    """Roles the host allows switching into for this course.

    A session already switched in the course acts with the switched role's
    capabilities, which never include switching again.
    """
    if is_role_switched(session, course_id):
        return {}
    roles = (
        Role.query.filter(Role.switchable.is_(True))
        .order_by(Role.sort_order, Role.id)
        .all()
    )
    return {role.id: role for role in roles}


def assign_role(user_id: int, role_id: int, context_level: str, instance_id: int = 0):
    """Create the assignment if it does not already exist."""
    existing = RoleAssignment.query.filter_by(
        user_id=user_id,
        role_id=role_id,
        context_level=context_level,
        instance_id=instance_id,
    ).one_or_none()
    if existing:
        return existing
    assignment = RoleAssignment(
        user_id=user_id,
        role_id=role_id,
        context_level=context_level,
        instance_id=instance_id,
    )
    db.session.add(assignment)
    return assignment


def unassign_role(user_id: int, role_id: int, context_level: str, instance_id: int = 0) -> int:
    return RoleAssignment.query.filter_by(
        user_id=user_id,
        role_id=role_id,
        context_level=context_level,
        instance_id=instance_id,
    ).delete(synchronize_session=False)
