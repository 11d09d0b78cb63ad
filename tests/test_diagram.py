from dbdocs.core.diagram import DIAGRAM_END, DIAGRAM_START, render_diagram
from dbdocs.core.models import (
    Column,
    CompositeField,
    DbCompositeType,
    MaterializedView,
    Schema,
    Table,
    View,
)


def test_orders_schema_renders_full_diagram(orders_schema):
    assert render_diagram([orders_schema]) == (
        "@startuml\n"
        "hide methods\n"
        "hide stereotypes\n"
        "\n"
        'package "public" {\n'
        '\tentity "order_status" <<enum>> {\n'
        "\t\tpending\n"
        "\t\tpaid\n"
        "\t\tshipped\n"
        "\t}\n"
        "\n"
        '\tentity "users" {\n'
        "\t\t**id: integer**\n"
        "\t\t--\n"
        "\t\temail: character varying(255) <<UNIQUE>>\n"
        "\t}\n"
        "\n"
        '\tentity "orders" {\n'
        "\t\t**id: integer**\n"
        "\t\t--\n"
        "\t\tuser_id: integer <<FK>>\n"
        "\t\tstatus: order_status\n"
        "\t}\n"
        "\n"
        "\tusers ||--|{ orders\n"
        "\n"
        "}\n"
        "\n"
        "@enduml\n"
    )


def test_rendering_is_idempotent(orders_schema):
    assert render_diagram([orders_schema]) == render_diagram([orders_schema])


def test_block_order_inside_package():
    schema = Schema(
        name="app",
        tables=(Table("t", columns=(Column("a", 1, "text"),)),),
        views=(View("v"),),
        materialized_views=(MaterializedView("m"),),
        composite_types=(
            DbCompositeType("app", "c", (CompositeField("f", "text", 1),)),
        ),
    )

    text = render_diagram([schema])

    positions = [
        text.index('"c" <<composite>>'),
        text.index('"v" <<view>>'),
        text.index('"m" <<materialized_view>>'),
        text.index('entity "t" {'),
    ]
    assert positions == sorted(positions)


def test_schemas_render_in_caller_order():
    text = render_diagram([Schema(name="zeta"), Schema(name="alpha")])

    assert text.index('package "zeta"') < text.index('package "alpha"')
    assert text.startswith(DIAGRAM_START)
    assert text.endswith(DIAGRAM_END)


def test_empty_schema_list_still_has_markers():
    assert render_diagram([]) == DIAGRAM_START + DIAGRAM_END
