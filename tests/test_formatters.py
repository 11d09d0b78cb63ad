import pytest

from dbdocs.core.formatters import (
    CardinalityFormatter,
    ConstraintLineFormatter,
    DefaultLineFormatter,
    DefaultMultiplicityFormatter,
    PrimaryKeyLineFormatter,
    ReferentialActionFormatter,
    build_line_formatter,
    build_multiplicity_formatter,
)
from dbdocs.core.models import Column, Constraint, ForeignKey, PrimaryKey, ReferentialAction


def _fk(**overrides) -> ForeignKey:
    values = dict(
        name="orders_user_id_fkey",
        source_table="orders",
        source_column="user_id",
        target_table="users",
        target_column="id",
        referenced_schema="public",
    )
    values.update(overrides)
    return ForeignKey(**values)


def test_default_line_formatter_with_and_without_length():
    fmt = DefaultLineFormatter()

    assert fmt.format(Column("id", 1, "integer"), "") == "id: integer"
    assert (
        fmt.format(Column("name", 2, "character varying", maximum_length=80), "")
        == "name: character varying(80)"
    )


def test_primary_key_formatter_bolds_only_key_columns():
    fmt = PrimaryKeyLineFormatter()
    pk = PrimaryKey("t_pkey", ("id",))

    assert fmt.format(Column("id", 1, "integer"), "id: integer", primary_key=pk) == (
        "**id: integer**"
    )
    assert fmt.format(Column("x", 2, "text"), "x: text", primary_key=pk) == "x: text"
    assert fmt.format(Column("id", 1, "integer"), "id: integer") == "id: integer"


@pytest.mark.parametrize(
    "declared",
    [
        [Constraint.NULLABLE, Constraint.UNIQUE, Constraint.FK],
        [Constraint.FK, Constraint.NULLABLE, Constraint.UNIQUE],
        [Constraint.UNIQUE, Constraint.FK, Constraint.NULLABLE],
    ],
)
def test_constraint_tags_always_render_in_priority_order(declared):
    col = Column("user_id", 2, "integer", constraints=frozenset(declared))

    assert ConstraintLineFormatter().format(col, "user_id: integer") == (
        "user_id: integer <<FK,UNIQUE,NULLABLE>>"
    )


def test_constraint_formatter_leaves_plain_columns_alone():
    assert ConstraintLineFormatter().format(Column("a", 1, "text"), "a: text") == "a: text"


def test_default_line_chain_combines_bold_and_tags():
    col = Column(
        "id",
        1,
        "bigint",
        constraints=frozenset({Constraint.DEFAULT, Constraint.AUTO_INCREMENT}),
    )
    pk = PrimaryKey("t_pkey", ("id",))

    assert build_line_formatter().format(col, "", primary_key=pk) == (
        "**id: bigint** <<AUTO_INCREMENT,DEFAULT>>"
    )


def test_default_multiplicity_same_schema_is_unqualified():
    assert DefaultMultiplicityFormatter().format(_fk(), "public", "") == "users -- orders"


def test_default_multiplicity_cross_schema_qualifies_both_ends():
    fk = _fk(referenced_schema="auth")

    assert DefaultMultiplicityFormatter().format(fk, "public", "") == (
        "auth.users -- public.orders"
    )


@pytest.mark.parametrize(
    ("nullable", "expected"),
    [(True, "users ||--o{ orders"), (False, "users ||--|{ orders")],
)
def test_cardinality_follows_nullability(nullable, expected):
    fk = _fk(nullable=nullable)

    assert CardinalityFormatter().format(fk, "public", "users -- orders") == expected


def test_referential_action_label():
    fk = _fk(on_delete=ReferentialAction.CASCADE, on_update=ReferentialAction.SET_NULL)

    assert ReferentialActionFormatter().format(fk, "public", "a ||--|{ b") == (
        'a ||--|{ b : "ON DELETE CASCADE / ON UPDATE SET NULL"'
    )


def test_referential_action_label_omitted_for_defaults():
    assert ReferentialActionFormatter().format(_fk(), "public", "a -- b") == "a -- b"


def test_multiplicity_chain():
    fk = _fk(nullable=True, on_delete=ReferentialAction.RESTRICT)

    assert build_multiplicity_formatter().format(fk, "public", "") == (
        'users ||--o{ orders : "ON DELETE RESTRICT"'
    )
