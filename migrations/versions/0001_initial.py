from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = set(insp.get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("password_hash", sa.String(255)),
            sa.Column("full_name", sa.String(255)),
            sa.Column("is_guest", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        )
        op.create_index(
            "ix_users_email_lower", "users", [sa.text("lower(email)")], unique=True
        )

    if "course_categories" not in tables:
        op.create_table(
            "course_categories",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column(
                "parent_id",
                sa.Integer(),
                sa.ForeignKey("course_categories.id", ondelete="SET NULL"),
            ),
        )

    if "courses" not in tables:
        op.create_table(
            "courses",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("fullname", sa.String(255), nullable=False),
            sa.Column("shortname", sa.String(100), nullable=False),
            sa.Column("category_id", sa.Integer(), nullable=False),
            sa.Column(
                "self_enrol_enabled",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            ),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        )

    if "roles" not in tables:
        op.create_table(
            "roles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("shortname", sa.String(100), nullable=False, unique=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column(
                "can_view_courses",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            ),
            sa.Column(
                "switchable", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
        )

    if "role_assignments" not in tables:
        op.create_table(
            "role_assignments",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id",
                sa.Integer(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "role_id",
                sa.Integer(),
                sa.ForeignKey("roles.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("context_level", sa.String(16), nullable=False),
            sa.Column("instance_id", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint(
                "user_id",
                "role_id",
                "context_level",
                "instance_id",
                name="uix_role_assignment",
            ),
        )
        op.create_index(
            "ix_role_assignments_context",
            "role_assignments",
            ["context_level", "instance_id"],
        )

    if "user_preferences" not in tables:
        op.create_table(
            "user_preferences",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id",
                sa.Integer(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("value", sa.String(1333), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint("user_id", "name", name="uix_user_preferences_user_name"),
        )


def downgrade() -> None:
    for table in (
        "user_preferences",
        "role_assignments",
        "roles",
        "courses",
        "course_categories",
        "users",
    ):
        op.drop_table(table)
