# ruff: noqa: I001
"""Expense ingest core tables: expenses and import_jobs.

Revision ID: 0001_expense_core
Revises: None
Create Date: 2026-02-14
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_expense_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "expenses",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("fingerprint", sa.CHAR(64), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("source_transaction_id", sa.String(), nullable=True),
        sa.Column("date", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.CHAR(3), nullable=False, server_default=sa.text("'INR'")),
        sa.Column("vendor", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'completed'")),
        sa.Column("raw_text", sa.JSON(), nullable=False),
        sa.Column("source_file_checksum", sa.String(), nullable=False),
        sa.Column("duplicate_of", sa.String(), nullable=True),
        sa.Column("is_duplicate", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "source in ('phonepe','axis','hdfc','payzap')", name="ck_expenses_source"
        ),
        sa.CheckConstraint(
            "status in ('completed','pending','failed','reversed')", name="ck_expenses_status"
        ),
    )
    op.create_index("ix_expenses_fingerprint", "expenses", ["fingerprint"])
    op.create_index("ix_expenses_source_date", "expenses", ["source", "date"])
    op.create_index("ix_expenses_vendor", "expenses", ["vendor"])
    op.create_index("ix_expenses_checksum", "expenses", ["source_file_checksum"])

    op.create_table(
        "import_jobs",
        sa.Column("job_id", sa.String(), primary_key=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("source_file_checksum", sa.String(), nullable=False),
        sa.Column("created", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("skipped", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("marked_duplicate", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("errors", sa.JSON(), nullable=False),
        sa.Column("short_circuit_of", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status in ('queued','processing','completed','failed')",
            name="ck_import_jobs_status",
        ),
    )
    op.create_index(
        "ix_import_jobs_checksum_status", "import_jobs", ["source_file_checksum", "status"]
    )
    op.create_index("ix_import_jobs_started_at", "import_jobs", ["started_at"])


def downgrade() -> None:
    op.drop_index("ix_import_jobs_started_at", table_name="import_jobs")
    op.drop_index("ix_import_jobs_checksum_status", table_name="import_jobs")
    op.drop_table("import_jobs")
    op.drop_index("ix_expenses_checksum", table_name="expenses")
    op.drop_index("ix_expenses_vendor", table_name="expenses")
    op.drop_index("ix_expenses_source_date", table_name="expenses")
    op.drop_index("ix_expenses_fingerprint", table_name="expenses")
    op.drop_table("expenses")
