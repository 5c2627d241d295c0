"""Tests for structural validation."""

import pytest

from flow_graph.errors import InvalidEdgeError, InvalidNodeError, MissingFieldError
from flow_graph.graph_model import NodeType, Position
from flow_graph.phases.structure import node_content, node_title, validate_structure


def test_accepts_flat_node_shape(make_node):
    parsed = validate_structure({"nodes": [make_node()], "edges": []})

    node = parsed.nodes[0]
    assert node.source_id == "n1"
    assert node.title == "Login"
    assert node.content == "desc"
    assert node.node_type is NodeType.PRODUCT
    assert node.position == Position(x=0.0, y=0.0)


def test_accepts_nested_data_shape():
    node = {
        "id": "n2",
        "type": "External",
        "data": {"label": "Stripe", "content": "Payments"},
        "position": {"x": 1, "y": 2.5},
    }
    parsed = validate_structure({"nodes": [node], "edges": []})

    assert parsed.nodes[0].title == "Stripe"
    assert parsed.nodes[0].content == "Payments"
    assert parsed.nodes[0].node_type is NodeType.EXTERNAL


def test_accessors_follow_priority_order():
    node = {"title": "", "data": {"label": "Label", "title": "Data title", "content": "nested"}, "content": "flat"}
    assert node_title(node) == "Label"
    assert node_content(node) == "flat"
    assert node_title({"data": {"title": "Data title"}}) == "Data title"
    assert node_title({"data": "not an object"}) is None


def test_unknown_type_defaults_to_product(make_node):
    diagnostics = []
    parsed = validate_structure({"nodes": [make_node(type="guide")], "edges": []}, diagnostics)

    assert parsed.nodes[0].node_type is NodeType.PRODUCT
    assert [d.code for d in diagnostics] == ["unknown_node_type"]


def test_missing_type_defaults_to_product(make_node):
    node = make_node()
    del node["type"]
    assert validate_structure({"nodes": [node], "edges": []}).nodes[0].node_type is NodeType.PRODUCT


def test_node_without_id_is_allowed(make_node):
    node = make_node()
    del node["id"]
    assert validate_structure({"nodes": [node], "edges": []}).nodes[0].source_id == ""


@pytest.mark.parametrize("value", [[], "text", {"edges": []}, {"nodes": {}, "edges": []}])
def test_missing_nodes(value):
    with pytest.raises(MissingFieldError) as excinfo:
        validate_structure(value)
    assert excinfo.value.name == "nodes"


@pytest.mark.parametrize("value", [{"nodes": []}, {"nodes": [], "edges": None}])
def test_missing_edges(value):
    with pytest.raises(MissingFieldError) as excinfo:
        validate_structure(value)
    assert excinfo.value.name == "edges"


@pytest.mark.parametrize(
    "override, reason",
    [
        ({"title": "  "}, "title"),
        ({"content": ""}, "content"),
        ({"content": ["not", "text"]}, "content"),
        ({"position": None}, "position"),
        ({"position": {"x": "1", "y": 2}}, "numbers"),
        ({"position": {"x": True, "y": 2}}, "numbers"),
        ({"position": {"x": 1}}, "numbers"),
        ({"position": {"x": 10 ** 400, "y": 2}}, "numbers"),
        ({"position": {"x": float("nan"), "y": 2}}, "numbers"),
        ({"position": {"x": 1, "y": float("inf")}}, "numbers"),
    ],
)
def test_invalid_node_reports_index(make_node, override, reason):
    bad = make_node(node_id="n2")
    bad.update(override)
    with pytest.raises(InvalidNodeError) as excinfo:
        validate_structure({"nodes": [make_node(), bad], "edges": []})

    assert excinfo.value.index == 1
    assert reason in excinfo.value.reason


def test_non_object_node_is_invalid():
    with pytest.raises(InvalidNodeError) as excinfo:
        validate_structure({"nodes": ["n1"], "edges": []})
    assert excinfo.value.index == 0


@pytest.mark.parametrize(
    "edge, reason",
    [
        ({"target": "n1"}, "source"),
        ({"source": "n1", "target": ""}, "target"),
        ({"source": "n1", "target": None}, "target"),
        ("n1->n2", "object"),
    ],
)
def test_invalid_edge_reports_index(make_node, edge, reason):
    with pytest.raises(InvalidEdgeError) as excinfo:
        validate_structure({"nodes": [make_node()], "edges": [edge]})

    assert excinfo.value.index == 0
    assert reason in excinfo.value.reason


def test_edge_references_and_label(make_node):
    parsed = validate_structure(
        {
            "nodes": [make_node()],
            "edges": [
                {"source": 1, "target": " n1 ", "description": "leads to"},
                {"source": "n1", "target": "n1", "label": "loops"},
            ],
        }
    )

    first, second = parsed.edges
    assert (first.source_ref, first.target_ref, first.label) == ("1", "n1", "leads to")
    assert second.label == "loops"
