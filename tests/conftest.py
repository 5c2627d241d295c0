import json
from typing import Any, Dict, List

import pytest


def node_payload(node_id: str = "n1", title: str = "Login", content: str = "desc", **extra: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": node_id,
        "type": "product",
        "title": title,
        "content": content,
        "position": {"x": 0, "y": 0},
    }
    payload.update(extra)
    return payload


def graph_text(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]]) -> str:
    return json.dumps({"nodes": nodes, "edges": edges})


@pytest.fixture
def make_node():
    return node_payload


@pytest.fixture
def sequential_ids():
    def factory():
        counter = {"value": 0}

        def next_id() -> str:
            counter["value"] += 1
            return f"node-{counter['value']}"

        return next_id

    return factory
