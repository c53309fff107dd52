from __future__ import annotations

from markupsafe import Markup

STRINGS = {
    "pluginname": "Switch role banner",
    "canselfenrol": (
        "You are currently viewing this course with your site or course category "
        "role but can enrol yourself in this course."
    ),
    "viewingasadmin": (
        "You are currently viewing this course with your site or course category role."
    ),
    "viewingasrole": (
        "You are currently viewing this course with your <b>{role}</b> course role."
    ),
    "switchroleto": "Switch role to...",
    "switchrolereturn": "Return to my normal role",
    "enrolme": "Enrol me",
    "hidebanner": "Dismiss",
    "privacy:metadata:preference:lastcourserole": (
        "Records the last role the user switched to in a course"
    ),
    "privacy:request:preference:lastcourserole": (
        'You last switched to the "{rolename}" role for "{coursename}"'
    ),
}


def get_string(key: str, **params) -> str:
    """Return the message for ``key`` with ``params`` substituted."""
    return STRINGS[key].format(**params)


def get_markup(key: str, **params) -> Markup:
    """Like ``get_string`` but for messages carrying inline HTML."""
    return Markup(STRINGS[key]).format(**params)
