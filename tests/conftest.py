from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dbdocs.core.models import (  # noqa: E402
    Column,
    Constraint,
    DbEnum,
    ForeignKey,
    PrimaryKey,
    Schema,
    Table,
)


@pytest.fixture
def orders_schema() -> Schema:
    """Small schema: users <- orders, with an enum-typed status column."""
    users = Table(
        name="users",
        columns=(
            Column("id", 1, "integer", nullable=False),
            Column("email", 2, "character varying", False, 255, frozenset({Constraint.UNIQUE})),
        ),
        primary_key=PrimaryKey("users_pkey", ("id",)),
    )
    fk = ForeignKey(
        name="orders_user_id_fkey",
        source_table="orders",
        source_column="user_id",
        target_table="users",
        target_column="id",
        referenced_schema="public",
        nullable=False,
    )
    orders = Table(
        name="orders",
        columns=(
            Column("id", 1, "integer", nullable=False),
            Column("user_id", 2, "integer", False, 0, frozenset({Constraint.FK})),
            Column("status", 3, "order_status", nullable=False),
        ),
        primary_key=PrimaryKey("orders_pkey", ("id",)),
        foreign_keys=(fk,),
    )
    status = DbEnum("public", "order_status", ("pending", "paid", "shipped"))
    return Schema(name="public", tables=(users, orders), enums=(status,))
