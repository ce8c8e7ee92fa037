"""Create the video embed cache and housekeeping tables

Revision ID: 5d1e8b3f7a20
Revises:
Create Date: 2026-10-16 09:30:12.418207

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "5d1e8b3f7a20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "video_embed",
        sa.Column("video_id", sa.String(length=128), primary_key=True),
        sa.Column("embed_code", sa.Text(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("data", sa.Text(), nullable=False),
    )
    op.create_index("ix_video_embed_created", "video_embed", ["created"], unique=False)

    op.create_table(
        "house_keeping",
        sa.Column("key", sa.String(), primary_key=True),
        sa.Column("value", sa.String(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("house_keeping")
    op.drop_index("ix_video_embed_created", table_name="video_embed")
    op.drop_table("video_embed")
