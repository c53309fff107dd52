"""Banner display policy and presentation.

``build_banner`` picks exactly one ``Banner`` variant for the page; the
template then renders it by switching on ``banner.mode`` alone.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union

from flask import current_app, render_template, url_for
from markupsafe import Markup

from ..shared.context import PageContext
from ..shared.strings import get_markup, get_string
from .roles import (
    get_active_switched_role,
    get_course_roles,
    get_switchable_roles,
    has_elevated_role,
)
from .switch_state import is_banner_hidden


class BannerMode(enum.Enum):
    ACTIVE_SWITCH = "active_switch"
    SELF_ENROL = "self_enrol"
    SWITCHABLE_ROLES = "switchable_roles"


@dataclass(frozen=True)
class SwitchTarget:
    role_id: int
    label: str


@dataclass(frozen=True)
class ActiveSwitchBanner:
    course_id: int
    role_name: str
    switch_url: str
    return_url: str
    mode: BannerMode = field(default=BannerMode.ACTIVE_SWITCH, init=False)


@dataclass(frozen=True)
class SelfEnrolBanner:
    course_id: int
    enrol_url: Optional[str]
    mode: BannerMode = field(default=BannerMode.SELF_ENROL, init=False)


@dataclass(frozen=True)
class SwitchableRolesBanner:
    course_id: int
    targets: tuple
    switch_url: str
    return_url: str
    mode: BannerMode = field(default=BannerMode.SWITCHABLE_ROLES, init=False)


Banner = Union[ActiveSwitchBanner, SelfEnrolBanner, SwitchableRolesBanner]


def is_excluded_page(ctx: PageContext) -> bool:
    if ctx.is_site_course:
        return True
    if ctx.endpoint in current_app.config["SWITCHROLE_EXCLUDED_ENDPOINTS"]:
        return True
    return ctx.layout in current_app.config["SWITCHROLE_EXCLUDED_LAYOUTS"]


def _offers_self_enrol(ctx: PageContext) -> bool:
    return bool(
        current_app.config.get("SWITCHROLE_OFFER_SELF_ENROL")
        and ctx.course.self_enrol_enabled
    )


def should_show_banner(ctx: PageContext) -> bool:
    if is_excluded_page(ctx):
        return False
    if is_banner_hidden(ctx.session, ctx.course.id):
        return False
    if not has_elevated_role(ctx):
        return False
    if not get_course_roles(ctx):
        return _offers_self_enrol(ctx)
    if not get_switchable_roles(ctx) and not get_active_switched_role(ctx):
        return False
    return True


def build_banner(ctx: PageContext) -> Banner:
    course_id = ctx.course.id
    switched_role = get_active_switched_role(ctx)
    if switched_role:
        return ActiveSwitchBanner(
            course_id=course_id,
            role_name=get_course_roles(ctx)[switched_role].name,
            switch_url=url_for("course.switch_role"),
            return_url=ctx.url,
        )
    if not get_course_roles(ctx):
        enrol_url = None
        if ctx.course.self_enrol_enabled:
            enrol_url = url_for("course.enrol_index", course_id=course_id)
        return SelfEnrolBanner(course_id=course_id, enrol_url=enrol_url)
    targets = tuple(
        SwitchTarget(role_id=role_id, label=role.name)
        for role_id, role in get_switchable_roles(ctx).items()
    )
    return SwitchableRolesBanner(
        course_id=course_id,
        targets=targets,
        switch_url=url_for("course.switch_role"),
        return_url=ctx.url,
    )


def _info_message(banner: Banner) -> Markup:
    if banner.mode is BannerMode.ACTIVE_SWITCH:
        return get_markup("viewingasrole", role=banner.role_name)
    if banner.mode is BannerMode.SELF_ENROL and banner.enrol_url:
        return Markup.escape(get_string("canselfenrol"))
    return Markup.escape(get_string("viewingasadmin"))


def render_banner(ctx: PageContext) -> Markup:
    banner = build_banner(ctx)
    html = render_template(
        "switchrole/banner.html",
        banner=banner,
        modes=BannerMode,
        infomessage=_info_message(banner),
        hide_url=url_for("banner.hide_banner"),
        get_string=get_string,
    )
    return Markup(html)
