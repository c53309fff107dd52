"""Export and erasure of stored last-role preferences.

Only course-scoped preferences are stored, so every call works on course ids.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from ..app import db
from ..models import Course, Role, UserPreference
from ..shared.constants import LAST_COURSE_ROLE
from ..shared.strings import get_string
from .switch_state import preference_key

logger = logging.getLogger("switchrole.privacy")

_KEY_RE = re.compile(r"^" + re.escape(LAST_COURSE_ROLE) + r"(\d+)$")


def get_metadata() -> list[dict]:
    return [
        {
            "type": "user_preference",
            "name": f"{LAST_COURSE_ROLE}ID",
            "summary": get_string("privacy:metadata:preference:lastcourserole"),
        }
    ]


def _course_id_from_key(name: str) -> int | None:
    match = _KEY_RE.match(name or "")
    return int(match.group(1)) if match else None


def get_courses_for_user(user_id: int) -> list[int]:
    """Ids of existing courses where the user has a stored preference."""

    names = [
        name
        for (name,) in db.session.query(UserPreference.name).filter(
            UserPreference.user_id == user_id,
            UserPreference.name.like(f"{LAST_COURSE_ROLE}%"),
        )
    ]
    course_ids = {cid for cid in map(_course_id_from_key, names) if cid}
    if not course_ids:
        return []
    return [
        cid
        for (cid,) in db.session.query(Course.id)
        .filter(Course.id.in_(course_ids))
        .order_by(Course.id)
    ]


def get_users_in_course(course_id: int) -> list[int]:
    return [
        uid
        for (uid,) in db.session.query(UserPreference.user_id)
        .filter(UserPreference.name == preference_key(course_id))
        .order_by(UserPreference.user_id)
    ]


def export_user_data(user_id: int, course_ids: Iterable[int]) -> list[dict]:
    """Return one record per stored preference in the given courses."""

    keys = {preference_key(cid): cid for cid in course_ids}
    if not keys:
        return []
    prefs = UserPreference.query.filter(
        UserPreference.user_id == user_id,
        UserPreference.name.in_(list(keys)),
    ).all()
    exported = []
    for pref in sorted(prefs, key=lambda p: keys[p.name]):
        course = db.session.get(Course, keys[pref.name])
        if course is None:
            continue
        role = db.session.get(Role, int(pref.value))
        rolename = role.display_name if role else pref.value
        exported.append(
            {
                "course_id": course.id,
                "course_name": course.fullname,
                "preference": pref.name,
                "role_id": int(pref.value),
                "description": get_string(
                    "privacy:request:preference:lastcourserole",
                    rolename=rolename,
                    coursename=course.fullname,
                ),
            }
        )
    return exported


def delete_data_for_all_users_in_course(course_id: int) -> int:
    deleted = UserPreference.query.filter(
        UserPreference.name == preference_key(course_id)
    ).delete(synchronize_session=False)
    db.session.commit()
    if deleted:
        logger.info("[PRIVACY] deleted %s preferences course=%s", deleted, course_id)
    return deleted


def delete_data_for_user(user_id: int, course_ids: Iterable[int]) -> int:
    keys = [preference_key(cid) for cid in course_ids]
    if not keys:
        return 0
    deleted = UserPreference.query.filter(
        UserPreference.user_id == user_id,
        UserPreference.name.in_(keys),
    ).delete(synchronize_session=False)
    db.session.commit()
    logger.info("[PRIVACY] deleted %s preferences user=%s", deleted, user_id)
    return deleted


def delete_data_for_users(course_id: int, user_ids: Iterable[int]) -> int:
    user_ids = list(user_ids)
    if not user_ids:
        return 0
    deleted = UserPreference.query.filter(
        UserPreference.name == preference_key(course_id),
        UserPreference.user_id.in_(user_ids),
    ).delete(synchronize_session=False)
    db.session.commit()
    logger.info(
        "[PRIVACY] deleted %s preferences course=%s users=%s",
        deleted,
        course_id,
        user_ids,
    )
    return deleted
