"""Create intake_submissions and intake_drafts.

Revision ID: 20261012_initial
Revises:
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

revision = "20261012_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Submitted cases ---
    op.create_table(
        "intake_submissions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("data", JSONB, nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'new'"),
        ),
        # Contact
        sa.Column("contact_name", sa.Text, nullable=False),
        sa.Column("contact_email", sa.Text, nullable=False),
        sa.Column("contact_phone", sa.Text, nullable=False),
        # Copied out of data.h2bIntake.analysis
        sa.Column("score", sa.Integer, nullable=True),
        sa.Column("risk_level", sa.String(20), nullable=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint(
            "score IS NULL OR score BETWEEN 0 AND 100",
            name="ck_submission_score_range",
        ),
        sa.CheckConstraint(
            "status IN ('new', 'reviewing', 'contacted', 'completed', 'archived')",
            name="ck_submission_status",
        ),
    )
    op.create_index("ix_intake_submissions_status", "intake_submissions", ["status"])
    op.create_index(
        "ix_intake_submissions_contact_email", "intake_submissions", ["contact_email"]
    )
    op.create_index("ix_submission_created_at", "intake_submissions", ["created_at"])
    op.create_index(
        "ix_submission_data_gin",
        "intake_submissions",
        ["data"],
        postgresql_using="gin",
    )
    op.create_index(
        "ix_submission_risk_level",
        "intake_submissions",
        ["risk_level"],
        postgresql_where=sa.text("risk_level IS NOT NULL"),
    )

    # --- Draft key-value storage ---
    op.create_table(
        "intake_drafts",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.Text, nullable=False),
        sa.Column("key", sa.Text, nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.UniqueConstraint("client_id", "key", name="uq_draft_client_key"),
    )
    op.create_index("ix_intake_drafts_client_id", "intake_drafts", ["client_id"])
    op.create_index("ix_intake_drafts_updated_at", "intake_drafts", ["updated_at"])


def downgrade() -> None:
    op.drop_table("intake_drafts")
    op.drop_table("intake_submissions")
