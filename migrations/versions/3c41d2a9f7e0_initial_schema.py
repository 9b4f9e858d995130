"""initial_schema

Create the schema for recipe discussions:
- Comments (two-level threads with optional 1-5 star ratings)
- Recipe ratings (denormalized average and count per recipe)

Revision ID: 3c41d2a9f7e0
Revises:
Create Date: 2026-10-17 10:12:44.518302

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c41d2a9f7e0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # COMMENTS table
    # ========================================================================
    # No foreign key on parent_id: replies may outlive their parent
    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("recipe_id", sa.String(length=64), nullable=False),
        sa.Column("author_id", sa.String(length=64), nullable=False),
        sa.Column("author_display", sa.String(length=255), nullable=False),
        sa.Column("author_avatar", sa.Text(), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("parent_id", sa.String(length=64), nullable=True),
        sa.Column(
            "is_owner_reply",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)",
            name="check_rating_range",
        ),
        sa.CheckConstraint(
            "parent_id IS NULL OR rating IS NULL",
            name="check_reply_unrated",
        ),
    )
    op.create_index(
        "idx_comments_recipe_created", "comments", ["recipe_id", "created_at"]
    )
    op.create_index("idx_comments_parent_id", "comments", ["parent_id"])

    # ========================================================================
    # RECIPE_RATINGS table
    # ========================================================================
    op.create_table(
        "recipe_ratings",
        sa.Column("recipe_id", sa.String(length=64), nullable=False),
        sa.Column(
            "average_rating", sa.Float(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "total_ratings", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("recipe_id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("recipe_ratings")
    op.drop_index("idx_comments_parent_id", table_name="comments")
    op.drop_index("idx_comments_recipe_created", table_name="comments")
    op.drop_table("comments")
