"""Request-scoped page context.

One ``PageContext`` is built per request and handed explicitly to every
resolver, policy and orchestrator call. The memo fields below are filled
lazily by ``switchrole.services.roles`` and never outlive the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, MutableMapping, Optional

from .constants import DEFAULT_LAYOUT


@dataclass
class PageContext:
    user: Any
    course: Any
    session: MutableMapping
    url: str = ""
    endpoint: str = ""
    layout: str = DEFAULT_LAYOUT
    site_course_id: int = 1

    course_roles: Optional[dict] = field(default=None, repr=False)
    switchable_roles: Optional[dict] = field(default=None, repr=False)
    active_switched_role: Optional[int] = field(default=None, repr=False)

    @property
    def is_site_course(self) -> bool:
        return self.course.id == self.site_course_id

    def reset_cache(self) -> None:
        """Forget memoised role lookups after a role switch or enrolment."""
        self.course_roles = None
        self.switchable_roles = None
        self.active_switched_role = None


def build_page_context(user, course, session, request) -> PageContext:
    from flask import current_app

    return PageContext(
        user=user,
        course=course,
        session=session,
        url=request.full_path.rstrip("?"),
        endpoint=request.endpoint or "",
        layout=request.args.get("layout") or DEFAULT_LAYOUT,
        site_course_id=current_app.config["SITE_COURSE_ID"],
    )
