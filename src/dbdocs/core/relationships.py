"""Relationship rendering.

Foreign keys of every table in a schema are grouped by the table they
reference. Groups are written in alphabetical order of the target table,
one line per foreign key, each group followed by a blank line. Output is
independent of the order in which tables were built.
"""

from __future__ import annotations

import logging

from dbdocs.core.formatters import MultiplicityFormatter, build_multiplicity_formatter
from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import ForeignKey, Schema

logger = logging.getLogger(__name__)


def group_by_target(schema: Schema) -> dict[str, list[ForeignKey]]:
    """Return foreign keys keyed by target table, keys in alphabetical order."""
    groups: dict[str, list[ForeignKey]] = {}
    for table in schema.tables:
        for fk in table.foreign_keys:
            groups.setdefault(fk.target_table, []).append(fk)
    return {target: groups[target] for target in sorted(groups)}


class RelationshipRenderer:
    """Renders the relationship lines of one schema."""

    def __init__(self, formatter: MultiplicityFormatter | None = None):
        self.formatter = formatter or build_multiplicity_formatter()

    def render(self, schema: Schema) -> str:
        """
        Return the relationship block for `schema`.

        Returns an empty string when no table has a foreign key.
        """
        groups = group_by_target(schema)
        if not groups:
            return ""

        logger.info(
            "Rendering %d relationship(s) for schema %s",
            sum(len(fks) for fks in groups.values()),
            sanitize_for_log(schema.name),
        )

        parts: list[str] = []
        for fks in groups.values():
            for fk in fks:
                parts.append(f"\t{self.formatter.format(fk, schema.name, '')}\n")
            parts.append("\n")
        return "".join(parts)
