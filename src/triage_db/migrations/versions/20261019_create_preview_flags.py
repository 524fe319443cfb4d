"""Create preview_flags table.

Boolean key-value store for the free-preview usage flag.  A row exists
only while the flag is set; clearing the flag deletes the row.

Revision ID: 20261019_preview_flags
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import TIMESTAMP

# revision identifiers, used by Alembic.
revision = "20261019_preview_flags"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "preview_flags",
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "updated_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("key", name="pk_preview_flags"),
    )


def downgrade() -> None:
    op.drop_table("preview_flags")
