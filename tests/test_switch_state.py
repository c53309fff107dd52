import pytest

from switchrole.app import db
from switchrole.models import UserPreference
from switchrole.services.switch_state import (
    SwitchRoleValidationError,
    get_last_role,
    hide_banner,
    is_banner_hidden,
    preference_key,
    set_last_role,
)
from switchrole.shared.constants import HIDDEN_BANNERS_KEY, LAST_COURSE_ROLE

from conftest import make_course


def test_preference_key_format(world):
    assert preference_key(world.course.id) == f"{LAST_COURSE_ROLE}{world.course.id}"


def test_set_and_get_last_role(world):
    student = world.roles.student
    assert get_last_role(world.user, world.course) == 0

    set_last_role(world.user, world.course, student.id)
    assert get_last_role(world.user, world.course) == student.id
    pref = UserPreference.query.filter_by(
        user_id=world.user.id, name=preference_key(world.course.id)
    ).one()
    assert pref.value == str(student.id)

    set_last_role(world.user, world.course, world.roles.teacher.id)
    assert get_last_role(world.user, world.course) == world.roles.teacher.id
    assert UserPreference.query.filter_by(user_id=world.user.id).count() == 1


def test_set_last_role_zero_deletes_preference(world):
    set_last_role(world.user, world.course, world.roles.student.id)
    set_last_role(world.user, world.course, 0)

    assert get_last_role(world.user, world.course) == 0
    assert (
        UserPreference.query.filter_by(
            user_id=world.user.id, name=preference_key(world.course.id)
        ).first()
        is None
    )


def test_set_last_role_zero_without_preference_is_noop(world):
    set_last_role(world.user, world.course, 0)
    assert UserPreference.query.count() == 0


def test_last_role_is_scoped_per_course(world):
    other = make_course(world.category, "Physics 101")
    db.session.commit()
    set_last_role(world.user, world.course, world.roles.student.id)
    assert get_last_role(world.user, other) == 0


@pytest.mark.parametrize("bad", [-1, "abc", None])
def test_set_last_role_rejects_invalid_ids(world, bad):
    with pytest.raises(SwitchRoleValidationError):
        set_last_role(world.user, world.course, bad)
    assert UserPreference.query.count() == 0


def test_hide_banner_is_idempotent():
    session = {}
    assert not is_banner_hidden(session, 2)
    hide_banner(session, 2)
    hide_banner(session, 2)
    assert is_banner_hidden(session, 2)
    assert session[HIDDEN_BANNERS_KEY] == {2}


def test_hide_banner_first_middle_last():
    session = {}
    for course_id in (3, 4, 5):
        hide_banner(session, course_id)
    assert is_banner_hidden(session, 3)
    assert is_banner_hidden(session, 4)
    assert is_banner_hidden(session, 5)
    assert not is_banner_hidden(session, 6)


def test_hidden_set_read_from_serialized_list():
    session = {HIDDEN_BANNERS_KEY: [7, 8]}
    assert is_banner_hidden(session, 8)
    hide_banner(session, 9)
    assert session[HIDDEN_BANNERS_KEY] == {7, 8, 9}
