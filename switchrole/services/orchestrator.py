from __future__ import annotations

import enum
import logging
from typing import Mapping

from ..shared import access
from ..shared.constants import SWITCHROLE_PARAM
from ..shared.context import PageContext
from .roles import get_switchable_roles
from .switch_state import get_last_role, set_last_role

logger = logging.getLogger("switchrole.orchestrator")


class SwitchOutcome(enum.Enum):
    SKIPPED = "skipped"
    RECORDED = "recorded"
    AUTO_SWITCHED = "auto_switched"
    CLEARED_STALE = "cleared_stale"
    NOOP = "noop"


def _requested_role(params: Mapping) -> int | None:
    raw = params.get(SWITCHROLE_PARAM)
    if raw is None or raw == "":
        return None
    try:
        role_id = int(raw)
    except (TypeError, ValueError):
        return None
    return role_id if role_id >= 0 else None


def handle_role_switch(ctx: PageContext, params: Mapping) -> SwitchOutcome:
    """Record an explicit switch or re-apply the user's last chosen role.

    Runs once per request after login and before the page renders.
    """

    if ctx.is_site_course:
        return SwitchOutcome.SKIPPED

    requested = _requested_role(params)
    if requested is not None and (
        requested == 0 or requested in get_switchable_roles(ctx)
    ):
        set_last_role(ctx.user, ctx.course, requested)
        return SwitchOutcome.RECORDED

    if access.is_role_switched(ctx.session, ctx.course.id):
        return SwitchOutcome.NOOP
    last_role = get_last_role(ctx.user, ctx.course)
    if not last_role:
        return SwitchOutcome.NOOP

    if last_role in get_switchable_roles(ctx):
        access.role_switch(ctx.session, ctx.course.id, last_role)
        ctx.reset_cache()
        logger.info(
            "[SWITCHROLE] auto switched user=%s course=%s role=%s",
            ctx.user.id,
            ctx.course.id,
            last_role,
        )
        return SwitchOutcome.AUTO_SWITCHED

    logger.info(
        "[SWITCHROLE] stale last role user=%s course=%s role=%s",
        ctx.user.id,
        ctx.course.id,
        last_role,
    )
    set_last_role(ctx.user, ctx.course, 0)
    return SwitchOutcome.CLEARED_STALE
