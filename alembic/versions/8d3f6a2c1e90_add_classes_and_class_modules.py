"""Add classes and class_modules

Revision ID: 8d3f6a2c1e90
Revises: 5a1e0c9d2b7f
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d3f6a2c1e90"
down_revision: Union[str, Sequence[str], None] = "5a1e0c9d2b7f"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "classes",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_classes_user_id"), "classes", ["user_id"], unique=False)

    op.create_table(
        "class_modules",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", sa.String(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("module_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_class_modules_user_id"), "class_modules", ["user_id"], unique=False)
    op.create_index(op.f("ix_class_modules_class_id"), "class_modules", ["class_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_class_modules_class_id"), table_name="class_modules")
    op.drop_index(op.f("ix_class_modules_user_id"), table_name="class_modules")
    op.drop_table("class_modules")
    op.drop_index(op.f("ix_classes_user_id"), table_name="classes")
    op.drop_table("classes")
