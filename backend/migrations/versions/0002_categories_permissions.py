"""Add categories and user_category_permissions

Revision ID: 0002_categories_permissions
Revises: 0001_initial
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_categories_permissions"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # -- categories -----------------------------------------------------
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("link", sa.String(2048), nullable=True),
        sa.Column(
            "created_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_categories_created_by_user_id", "categories", ["created_by_user_id"])
    # Case-insensitive uniqueness of category names
    op.create_index(
        "uq_categories_name_lower",
        "categories",
        # MySQL needs the functional key part in its own parentheses
        [sa.text("(lower(name))")],
        unique=True,
    )

    # -- user_category_permissions --------------------------------------
    # Only the category side cascades; subject and granter keys do not.
    op.create_table(
        "user_category_permissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "granted_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.UniqueConstraint("user_id", "category_id", name="uq_user_category"),
    )
    op.create_index("ix_user_category_permissions_user_id", "user_category_permissions", ["user_id"])
    op.create_index(
        "ix_user_category_permissions_category_id",
        "user_category_permissions",
        ["category_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_user_category_permissions_category_id", table_name="user_category_permissions")
    op.drop_index("ix_user_category_permissions_user_id", table_name="user_category_permissions")
    op.drop_table("user_category_permissions")
    op.drop_index("uq_categories_name_lower", table_name="categories")
    op.drop_index("ix_categories_created_by_user_id", table_name="categories")
    op.drop_table("categories")
