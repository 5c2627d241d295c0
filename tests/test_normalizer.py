"""Tests for graph normalization and the builder behind it."""

import uuid

import pytest

from flow_graph.graph_builder import FlowGraphBuilder
from flow_graph.graph_model import GeneratedEdge, GeneratedNode, NodeType, ParsedGraph, Position
from flow_graph.phases.normalizer import normalize


def generated(source_id="n1", title="Start", x=0.0, y=0.0, node_type=NodeType.PRODUCT):
    return GeneratedNode(
        source_id=source_id,
        node_type=node_type,
        title=title,
        content="content",
        position=Position(x=x, y=y),
    )


def test_every_node_gets_a_fresh_uuid():
    parsed = ParsedGraph(nodes=[generated("n1", "A"), generated("n2", "B"), generated("n3", "C")])
    graph = normalize(parsed)

    ids = [node.id for node in graph.nodes]
    assert len(set(ids)) == 3
    assert not {"n1", "n2", "n3"} & set(ids)
    for node_id in ids:
        uuid.UUID(node_id)


def test_title_reference_resolves_to_same_node():
    parsed = ParsedGraph(
        nodes=[generated("n1", "Start")],
        edges=[GeneratedEdge(source_ref="Start", target_ref="n1")],
    )
    graph = normalize(parsed)

    node_id = graph.nodes[0].id
    assert len(graph.edges) == 1
    assert (graph.edges[0].source, graph.edges[0].target) == (node_id, node_id)


def test_source_id_takes_precedence_over_title():
    parsed = ParsedGraph(
        nodes=[generated("A", "first"), generated("n2", "A")],
        edges=[GeneratedEdge(source_ref="A", target_ref="n2")],
    )
    graph = normalize(parsed)

    assert graph.edges[0].source == graph.nodes[0].id
    assert graph.edges[0].target == graph.nodes[1].id


def test_unresolved_edges_are_dropped_with_diagnostic():
    diagnostics = []
    parsed = ParsedGraph(
        nodes=[generated("n1", "A"), generated("n2", "B")],
        edges=[
            GeneratedEdge(source_ref="n1", target_ref="n2", label="next"),
            GeneratedEdge(source_ref="n1", target_ref="ghost"),
        ],
    )
    graph = normalize(parsed, diagnostics)

    assert len(graph.edges) == 1
    assert graph.edges[0].label == "next"
    assert [d.code for d in diagnostics] == ["edge_dropped"]
    assert "ghost" in diagnostics[0].message


def test_edges_reference_existing_nodes_only():
    parsed = ParsedGraph(
        nodes=[generated(f"n{i}", f"T{i}") for i in range(5)],
        edges=[GeneratedEdge(source_ref=f"n{i}", target_ref=f"T{(i + 1) % 7}") for i in range(7)],
    )
    graph = normalize(parsed)

    node_ids = {node.id for node in graph.nodes}
    assert graph.edges
    for edge in graph.edges:
        assert edge.source in node_ids
        assert edge.target in node_ids


def test_positions_rounded_to_two_decimals():
    graph = normalize(ParsedGraph(nodes=[generated(x=10.126, y=-3.14159)]))
    assert graph.nodes[0].position == Position(x=10.13, y=-3.14)


def test_duplicate_source_ids_keep_first_node():
    diagnostics = []
    parsed = ParsedGraph(
        nodes=[generated("n1", "A"), generated("n1", "B")],
        edges=[GeneratedEdge(source_ref="n1", target_ref="B")],
    )
    graph = normalize(parsed, diagnostics)

    assert graph.edges[0].source == graph.nodes[0].id
    assert graph.edges[0].target == graph.nodes[1].id
    assert [d.code for d in diagnostics] == ["duplicate_source_id"]


def test_colliding_id_factory_is_retried():
    issued = iter(["a", "a", "b", "b", "c"])
    graph = normalize(
        ParsedGraph(
            nodes=[generated("n1", "A"), generated("n2", "B")],
            edges=[GeneratedEdge(source_ref="n1", target_ref="n2")],
        ),
        id_factory=lambda: next(issued),
    )

    assert [node.id for node in graph.nodes] == ["a", "b"]
    assert graph.edges[0].id == "c"


def test_builder_rejects_unknown_endpoints():
    builder = FlowGraphBuilder(id_factory=iter(["x", "y"]).__next__)
    node_id = builder.add_node(generated())
    with pytest.raises(ValueError):
        builder.add_edge(node_id, "missing")


def test_normalized_graph_json_shape(sequential_ids):
    graph = normalize(
        ParsedGraph(
            nodes=[generated("n1", "A", node_type=NodeType.EXTERNAL)],
            edges=[GeneratedEdge(source_ref="A", target_ref="n1", label="self")],
        ),
        id_factory=sequential_ids(),
    )

    assert graph.to_json() == {
        "nodes": [
            {
                "id": "node-1",
                "type": "external",
                "position": {"x": 0.0, "y": 0.0},
                "data": {"title": "A", "content": "content"},
                "draggable": True,
            }
        ],
        "edges": [{"id": "node-2", "source": "node-1", "target": "node-1", "label": "self"}],
    }
    assert graph.node("node-1").title == "A"
    assert graph.node("missing") is None
