from __future__ import annotations

from ..app import db


class UserPreference(db.Model):
    """Durable per-user key/value preference owned by the host."""

    __tablename__ = "user_preferences"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name = db.Column(db.String(255), nullable=False)
    value = db.Column(db.String(1333), nullable=False)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uix_user_preferences_user_name"),
    )

    @classmethod
    def get_value(cls, user_id: int, name: str, default: str | None = None):
        pref = cls.query.filter_by(user_id=user_id, name=name).one_or_none()
        return pref.value if pref else default

    @classmethod
    def set_value(cls, user_id: int, name: str, value: str) -> "UserPreference":
        pref = cls.query.filter_by(user_id=user_id, name=name).one_or_none()
        if pref:
            pref.value = value
        else:
            pref = cls(user_id=user_id, name=name, value=value)
            db.session.add(pref)
        return pref

    @classmethod
    def unset(cls, user_id: int, name: str) -> int:
        return cls.query.filter_by(user_id=user_id, name=name).delete(
            synchronize_session=False
        )
