"""Create store node and value tables.

Revision ID: 0001_store_tables
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_store_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "store_node",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("name_folded", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["store_node.id"],
            name="fk_store_node_parent_id_store_node",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_node"),
        sa.UniqueConstraint("parent_id", "name_folded", name="uq_store_node_parent_id"),
    )
    op.create_index("ix_store_node_parent_id", "store_node", ["parent_id"])
    op.create_table(
        "store_value",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("node_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("name_folded", sa.String(), nullable=False),
        sa.Column("value_type", sa.Integer(), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.ForeignKeyConstraint(
            ["node_id"],
            ["store_node.id"],
            name="fk_store_value_node_id_store_node",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_value"),
        sa.UniqueConstraint("node_id", "name_folded", name="uq_store_value_node_id"),
    )


def downgrade() -> None:
    op.drop_table("store_value")
    op.drop_index("ix_store_node_parent_id", table_name="store_node")
    op.drop_table("store_node")
