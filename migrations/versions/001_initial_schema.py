"""Initial schema for the gauntlet

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column
from sqlalchemy.types import Boolean, DateTime, Integer, JSON, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "candidates",
        Column("candidate_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("role", String, nullable=False),
        Column("role_description", Text, nullable=False, server_default=""),
        Column("skills", JSON, nullable=False),
        Column("narrative", Text, nullable=False, server_default=""),
        Column("ai_initial_score", Integer, nullable=True),
        Column("archived", Boolean, nullable=False, server_default="false"),
        Column("communication_sent", Boolean, nullable=False, server_default="false"),
        Column("gauntlet_state", JSON, nullable=True),
        Column("gauntlet_start_date", DateTime(timezone=True), nullable=True),
        Column("log", JSON, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_index("ix_candidates_archived_score", "candidates", ["archived", "ai_initial_score"])


def downgrade() -> None:
    op.drop_index("ix_candidates_archived_score", table_name="candidates")
    op.drop_table("candidates")
