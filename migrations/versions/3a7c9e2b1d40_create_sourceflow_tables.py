"""create customers, statuses, requests and request notes

Revision ID: 3a7c9e2b1d40
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = "3a7c9e2b1d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = inspect(bind)
    existing_tables = set(insp.get_table_names())

    def _has_index(table: str, name: str) -> bool:
        return any(ix.get("name") == name for ix in inspect(op.get_bind()).get_indexes(table))

    if "customers" not in existing_tables:
        op.create_table(
            "customers",
            sa.Column("customer_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
            sa.Column("full_name", sa.Text(), nullable=False),
            sa.Column("email", sa.Text(), nullable=False),
            sa.Column("phone", sa.Text(), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=False),
                nullable=False,
                server_default=sa.func.current_timestamp(),
            ),
        )

    if "statuses" not in existing_tables:
        op.create_table(
            "statuses",
            sa.Column("status_id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
            sa.Column("status_name", sa.Text(), nullable=False),
            sa.UniqueConstraint("status_name", name="uq_statuses_status_name"),
        )

    if "requests" not in existing_tables:
        op.create_table(
            "requests",
            sa.Column("request_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
            sa.Column("customer_id", sa.Integer(), nullable=False),
            sa.Column("status_id", sa.Integer(), nullable=False),
            sa.Column("item_name", sa.Text(), nullable=False),
            sa.Column("brand", sa.Text(), nullable=True),
            sa.Column("budget_gbp", sa.Float(), nullable=True),
            sa.Column("size", sa.Text(), nullable=True),
            sa.Column("colour", sa.Text(), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=False),
                nullable=False,
                server_default=sa.func.current_timestamp(),
            ),
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=False),
                nullable=False,
                server_default=sa.func.current_timestamp(),
            ),
            sa.ForeignKeyConstraint(["customer_id"], ["customers.customer_id"]),
            sa.ForeignKeyConstraint(["status_id"], ["statuses.status_id"]),
        )
        existing_tables.add("requests")

    if "requests" in existing_tables:
        for idx_name, cols in (
            ("idx_requests_status_id", ["status_id"]),
            ("idx_requests_customer_id", ["customer_id"]),
        ):
            if not _has_index("requests", idx_name):
                op.create_index(idx_name, "requests", cols)

    if "request_notes" not in existing_tables:
        op.create_table(
            "request_notes",
            sa.Column("note_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
            sa.Column("request_id", sa.Integer(), nullable=False),
            sa.Column("note_text", sa.Text(), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=False),
                nullable=False,
                server_default=sa.func.current_timestamp(),
            ),
            sa.ForeignKeyConstraint(["request_id"], ["requests.request_id"], ondelete="CASCADE"),
        )
        existing_tables.add("request_notes")

    if "request_notes" in existing_tables:
        if not _has_index("request_notes", "idx_request_notes_request_id"):
            op.create_index("idx_request_notes_request_id", "request_notes", ["request_id", "note_id"])


def downgrade() -> None:
    op.drop_index("idx_request_notes_request_id", table_name="request_notes")
    op.drop_table("request_notes")

    op.drop_index("idx_requests_customer_id", table_name="requests")
    op.drop_index("idx_requests_status_id", table_name="requests")
    op.drop_table("requests")

    op.drop_table("statuses")
    op.drop_table("customers")
