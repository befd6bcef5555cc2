"""initial stock ledger schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(inspector: sa.Inspector, table_name: str) -> bool:
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _table_exists(inspector, "products"):
        op.create_table(
            "products",
            sa.Column("barcode", sa.String(length=128), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("sku", sa.String(length=100), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=True,
                server_default=sa.func.now(),
            ),
            sa.PrimaryKeyConstraint("barcode"),
        )

    if not _table_exists(inspector, "stock_levels"):
        op.create_table(
            "stock_levels",
            sa.Column("barcode", sa.String(length=128), nullable=False),
            sa.Column("location", sa.String(length=120), nullable=False),
            sa.Column("qty", sa.Integer(), nullable=False, server_default="0"),
            sa.PrimaryKeyConstraint("barcode", "location"),
        )

    if not _table_exists(inspector, "movements"):
        op.create_table(
            "movements",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("action", sa.String(length=3), nullable=False),
            sa.Column("barcode", sa.String(length=128), nullable=False),
            sa.Column("qty", sa.Integer(), nullable=False),
            sa.Column("location", sa.String(length=120), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("action IN ('IN', 'OUT')", name="ck_movements_action"),
            sa.CheckConstraint("qty > 0", name="ck_movements_qty_positive"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_movements_created_at", "movements", ["created_at"], unique=False)
        op.create_index(
            "ix_movements_barcode_location",
            "movements",
            ["barcode", "location"],
            unique=False,
        )

    if not _table_exists(inspector, "transfers"):
        op.create_table(
            "transfers",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("barcode", sa.String(length=128), nullable=False),
            sa.Column("qty", sa.Integer(), nullable=False),
            sa.Column("from_location", sa.String(length=120), nullable=False),
            sa.Column("to_location", sa.String(length=120), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("qty > 0", name="ck_transfers_qty_positive"),
            sa.CheckConstraint("from_location <> to_location", name="ck_transfers_distinct_locations"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_transfers_created_at", "transfers", ["created_at"], unique=False)

    if not _table_exists(inspector, "counts"):
        op.create_table(
            "counts",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("location", sa.String(length=120), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_counts_created_at", "counts", ["created_at"], unique=False)

    if not _table_exists(inspector, "count_lines"):
        op.create_table(
            "count_lines",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("count_id", sa.Integer(), nullable=False),
            sa.Column("barcode", sa.String(length=128), nullable=False),
            sa.Column("qty", sa.Integer(), nullable=False),
            sa.Column("applied_delta", sa.Integer(), nullable=True),
            sa.CheckConstraint("qty >= 0", name="ck_count_lines_qty_non_negative"),
            sa.ForeignKeyConstraint(["count_id"], ["counts.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_count_lines_count_id", "count_lines", ["count_id"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if _table_exists(inspector, "count_lines"):
        op.drop_index("ix_count_lines_count_id", table_name="count_lines")
        op.drop_table("count_lines")
    if _table_exists(inspector, "counts"):
        op.drop_index("ix_counts_created_at", table_name="counts")
        op.drop_table("counts")
    if _table_exists(inspector, "transfers"):
        op.drop_index("ix_transfers_created_at", table_name="transfers")
        op.drop_table("transfers")
    if _table_exists(inspector, "movements"):
        op.drop_index("ix_movements_barcode_location", table_name="movements")
        op.drop_index("ix_movements_created_at", table_name="movements")
        op.drop_table("movements")
    if _table_exists(inspector, "stock_levels"):
        op.drop_table("stock_levels")
    if _table_exists(inspector, "products"):
        op.drop_table("products")
