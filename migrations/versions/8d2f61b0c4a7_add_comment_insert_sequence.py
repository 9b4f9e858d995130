"""add_comment_insert_sequence

Add comments.seq, the insert sequence number used to order comments that
share a created_at timestamp. Existing rows get 0.

Revision ID: 8d2f61b0c4a7
Revises: 3c41d2a9f7e0
Create Date: 2026-10-24 14:03:11.902114

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d2f61b0c4a7"
down_revision: Union[str, Sequence[str], None] = "3c41d2a9f7e0"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        "comments",
        sa.Column("seq", sa.Integer(), server_default=sa.text("0"), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("comments") as batch_op:
        batch_op.drop_column("seq")
