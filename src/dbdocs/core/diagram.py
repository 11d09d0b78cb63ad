"""Diagram assembly.

Wraps rendered schemas into a complete PlantUML document. Within each
schema package the order is fixed: enums, composite types, views,
materialized views, tables and finally relationships.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dbdocs.core.logutils import sanitize_for_log
from dbdocs.core.models import Schema
from dbdocs.core.relationships import RelationshipRenderer
from dbdocs.core.renderers import (
    CompositeTypeRenderer,
    EntityRenderer,
    EnumRenderer,
    MaterializedViewRenderer,
    ViewRenderer,
)

logger = logging.getLogger(__name__)

DIAGRAM_START = "@startuml\nhide methods\nhide stereotypes\n\n"
DIAGRAM_END = "@enduml\n"


class DiagramRenderer:
    """Renders a list of schemas into one PlantUML diagram."""

    def __init__(
        self,
        *,
        entity_renderer: EntityRenderer | None = None,
        view_renderer: ViewRenderer | None = None,
        materialized_view_renderer: MaterializedViewRenderer | None = None,
        composite_renderer: CompositeTypeRenderer | None = None,
        enum_renderer: EnumRenderer | None = None,
        relationship_renderer: RelationshipRenderer | None = None,
    ):
        self.entity_renderer = entity_renderer or EntityRenderer()
        self.view_renderer = view_renderer or ViewRenderer()
        self.materialized_view_renderer = (
            materialized_view_renderer or MaterializedViewRenderer()
        )
        self.composite_renderer = composite_renderer or CompositeTypeRenderer()
        self.enum_renderer = enum_renderer or EnumRenderer()
        self.relationship_renderer = relationship_renderer or RelationshipRenderer()

    def render_schema(self, schema: Schema) -> str:
        """Return the `package` block for one schema."""
        blocks: list[str] = []
        blocks.extend(self.enum_renderer.render(e) for e in schema.enums)
        blocks.extend(self.composite_renderer.render(c) for c in schema.composite_types)
        blocks.extend(self.view_renderer.render(v) for v in schema.views)
        blocks.extend(
            self.materialized_view_renderer.render(m) for m in schema.materialized_views
        )
        blocks.extend(self.entity_renderer.render(t) for t in schema.tables)

        parts = [f'package "{schema.name}" {{\n']
        parts.extend(f"{block}\n" for block in blocks)
        parts.append(self.relationship_renderer.render(schema))
        parts.append("}\n\n")

        logger.info(
            "Rendered schema %s with %d table(s), %d view(s), "
            "%d materialized view(s), %d enum(s), %d composite type(s)",
            sanitize_for_log(schema.name),
            len(schema.tables),
            len(schema.views),
            len(schema.materialized_views),
            len(schema.enums),
            len(schema.composite_types),
        )
        return "".join(parts)

    def render(self, schemas: Iterable[Schema]) -> str:
        """Return the full diagram for `schemas`, in the order given."""
        parts = [DIAGRAM_START]
        parts.extend(self.render_schema(s) for s in schemas)
        parts.append(DIAGRAM_END)
        return "".join(parts)


def render_diagram(schemas: Iterable[Schema]) -> str:
    """Render `schemas` with the default formatters."""
    return DiagramRenderer().render(schemas)
