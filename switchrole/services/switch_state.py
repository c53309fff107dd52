"""Durable last-role preference and the per-session hidden banner set."""

from __future__ import annotations

import logging
from typing import MutableMapping

from ..app import db
from ..models import UserPreference
from ..shared.constants import HIDDEN_BANNERS_KEY, LAST_COURSE_ROLE

logger = logging.getLogger("switchrole.state")


class SwitchRoleValidationError(ValueError):
    """Raised when a role id or course id fails validation."""


def preference_key(course_id: int) -> str:
    return f"{LAST_COURSE_ROLE}{int(course_id)}"


def set_last_role(user, course, role_id: int) -> None:
    """Remember ``role_id`` for the user in the course; 0 forgets it."""

    try:
        role_id = int(role_id)
    except (TypeError, ValueError):
        raise SwitchRoleValidationError(f"Invalid role id: {role_id!r}")
    if role_id < 0:
        raise SwitchRoleValidationError(f"Invalid role id: {role_id}")

    key = preference_key(course.id)
    if role_id == 0:
        UserPreference.unset(user.id, key)
        logger.info("[SWITCHROLE] cleared last role user=%s course=%s", user.id, course.id)
    else:
        UserPreference.set_value(user.id, key, str(role_id))
        logger.info(
            "[SWITCHROLE] stored last role user=%s course=%s role=%s",
            user.id,
            course.id,
            role_id,
        )
    db.session.commit()


def get_last_role(user, course) -> int:
    value = UserPreference.get_value(user.id, preference_key(course.id))
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


def _hidden_set(session: MutableMapping) -> set:
    hidden = session.get(HIDDEN_BANNERS_KEY)
    if hidden is None:
        return set()
    return set(hidden)


def hide_banner(session: MutableMapping, course_id: int) -> None:
    hidden = _hidden_set(session)
    hidden.add(int(course_id))
    session[HIDDEN_BANNERS_KEY] = hidden
    logger.info("[BANNER] hidden course=%s", course_id)


def is_banner_hidden(session: MutableMapping, course_id: int) -> bool:
    return int(course_id) in _hidden_set(session)


