"""Primary and foreign key enrichment.

Catalog readers return keys in their raw relational shape. These helpers
fold and decorate them into the form renderers expect:

- primary key rows collapse into a single `PrimaryKey`,
- foreign keys learn whether their source column is nullable,
- columns that are the source of a foreign key get the `FK` tag.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from dbdocs.core.catalog import PrimaryKeyRow
from dbdocs.core.errors import CatalogError, MissingReferenceError
from dbdocs.core.models import Column, Constraint, ForeignKey, PrimaryKey


def collate_primary_key(rows: Sequence[PrimaryKeyRow]) -> PrimaryKey | None:
    """
    Fold primary key rows into a `PrimaryKey`, keeping row order.

    Returns:
        None when there are no rows (the table has no primary key).

    Raises:
        CatalogError: If the rows name more than one constraint.
    """
    if not rows:
        return None
    names = {r.constraint_name for r in rows}
    if len(names) > 1:
        raise CatalogError(
            f"Primary key rows span several constraints: {', '.join(sorted(names))}"
        )
    return PrimaryKey(
        constraint_name=rows[0].constraint_name,
        column_names=tuple(r.column_name for r in rows),
    )


def enrich_foreign_keys(
    foreign_keys: Iterable[ForeignKey], columns: Iterable[Column]
) -> tuple[ForeignKey, ...]:
    """
    Copy the nullability of each source column onto its foreign key.

    Raises:
        MissingReferenceError: If a foreign key names a source column the
            table does not have.
    """
    by_name = {c.name.lower(): c for c in columns}
    enriched: list[ForeignKey] = []
    for fk in foreign_keys:
        source = by_name.get(fk.source_column.lower())
        if source is None:
            raise MissingReferenceError(
                f"Foreign key {fk.name!r} references missing column "
                f"{fk.source_table}.{fk.source_column}"
            )
        enriched.append(replace(fk, nullable=source.nullable))
    return tuple(enriched)


def mark_foreign_key_columns(
    columns: Iterable[Column], foreign_keys: Iterable[ForeignKey]
) -> tuple[Column, ...]:
    """Tag every column that is the source of a foreign key with `FK`."""
    fk_columns = {fk.source_column.lower() for fk in foreign_keys}
    return tuple(
        c.with_constraint(Constraint.FK) if c.name.lower() in fk_columns else c
        for c in columns
    )
