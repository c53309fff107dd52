from __future__ import annotations

from dataclasses import dataclass

from ..shared import access
from ..shared.context import PageContext


@dataclass(frozen=True)
class CourseRole:
    role_id: int
    shortname: str
    name: str


def _as_course_role(role) -> CourseRole:
    return CourseRole(role_id=role.id, shortname=role.shortname, name=role.display_name)


def get_course_roles(ctx: PageContext) -> dict[int, CourseRole]:
    """Return the user's course-level roles keyed by role id.

    Role switches do not change this set; it reflects real assignments only.
    """

    if ctx.course_roles is None:
        roles = access.get_user_course_roles(ctx.user.id, ctx.course.id)
        ctx.course_roles = {role.id: _as_course_role(role) for role in roles}
    return ctx.course_roles


def get_switchable_roles(ctx: PageContext) -> dict[int, CourseRole]:
    """Return the course roles the user may switch into right now."""

    if ctx.switchable_roles is None:
        course_roles = get_course_roles(ctx)
        allowed = access.get_switchable_roles(ctx.session, ctx.course.id) if course_roles else {}
        ctx.switchable_roles = {
            role_id: role for role_id, role in course_roles.items() if role_id in allowed
        }
    return ctx.switchable_roles


def get_active_switched_role(ctx: PageContext) -> int:
    """Return the switched role id when it is one of the user's course roles."""

    if ctx.active_switched_role is None:
        role_id = access.get_switched_role(ctx.session, ctx.course.id)
        if role_id and role_id not in get_course_roles(ctx):
            role_id = 0
        ctx.active_switched_role = role_id
    return ctx.active_switched_role


def has_elevated_role(ctx: PageContext) -> bool:
    """True if the user can view the course through a role above the course."""

    if ctx.user is None or ctx.user.is_guest:
        return False
    category = access.get_category(ctx.course.category_id)
    return access.has_course_view_capability(ctx.user.id, category.lineage_ids())
