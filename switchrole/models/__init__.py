from __future__ import annotations

from sqlalchemy.orm import validates

from ..app import db
from ..shared.passwords import hash_password, verify_password
from ..shared.constants import CONTEXT_LEVELS


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    password_hash = db.Column(db.String(255))
    full_name = db.Column(db.String(255))
    is_guest = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    __table_args__ = (
        db.Index("ix_users_email_lower", db.func.lower(email), unique=True),
    )

    @validates("email")
    def lower_email(self, key, value):  # pragma: no cover - simple normalizer
        return value.lower()

    def set_password(self, plain: str) -> None:
        self.password_hash = hash_password(plain)

    def check_password(self, plain: str) -> bool:
        if not self.password_hash:
            return False
        return verify_password(plain, self.password_hash)


class CourseCategory(db.Model):
    __tablename__ = "course_categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    parent_id = db.Column(
        db.Integer, db.ForeignKey("course_categories.id", ondelete="SET NULL")
    )
    parent = db.relationship("CourseCategory", remote_side=[id])

    def lineage_ids(self) -> list[int]:
        """Return this category id followed by every ancestor id."""
        ids = []
        node = self
        while node is not None and node.id not in ids:
            ids.append(node.id)
            node = node.parent
        return ids


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    fullname = db.Column(db.String(255), nullable=False)
    shortname = db.Column(db.String(100), nullable=False)
    # Not a foreign key; a dangling id is reported as NotFound at lookup.
    category_id = db.Column(db.Integer, nullable=False)
    self_enrol_enabled = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.text("false")
    )
    created_at = db.Column(db.DateTime, server_default=db.func.now())


class Role(db.Model):
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    shortname = db.Column(db.String(100), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    # course:view at a context above the course
    can_view_courses = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.text("false")
    )
    switchable = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.text("false")
    )

    @property
    def display_name(self) -> str:
        return self.name or self.shortname


class RoleAssignment(db.Model):
    __tablename__ = "role_assignments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id = db.Column(
        db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    context_level = db.Column(db.String(16), nullable=False)
    instance_id = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    user = db.relationship("User")
    role = db.relationship("Role")

    __table_args__ = (
        db.UniqueConstraint(
            "user_id",
            "role_id",
            "context_level",
            "instance_id",
            name="uix_role_assignment",
        ),
        db.Index("ix_role_assignments_context", "context_level", "instance_id"),
    )

    @validates("context_level")
    def check_level(self, key, value):
        if value not in CONTEXT_LEVELS:
            raise ValueError(f"Unknown context level: {value}")
        return value


from .preference import UserPreference  # noqa: E402,F401
