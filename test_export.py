#!/usr/bin/env python3
"""
test snapshot export, the network image and the web endpoints.

run with: pytest test_export.py -v
"""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from scholartree.core.config import ExportConfig
from scholartree.core.errors import ValidationError
from scholartree.core.models import (
    CollectedPaper, NetworkData, NetworkEdge, NodeLabel, Paper, SessionSnapshot, TreeNode
)
from scholartree.export import (
    export_snapshot, load_snapshot, read_snapshot, write_snapshot,
    build_graph, render_network_svg, write_network_image
)
from scholartree.web.app import create_app

from conftest import FakeCollaborator, make_session


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def snapshot():
    paper = Paper(title="Attention Is All You Need", url="https://arxiv.org/abs/1706.03762",
                  authors=("Vaswani", "Shazeer"), year=2017, citations=90000)
    leaf = TreeNode(id="nlp-transformers-0", keyword="transformers", label=NodeLabel.HOT,
                    literature=(paper,))
    tree = TreeNode(id="nlp", keyword="NLP", children=(leaf,))
    network = NetworkData.build(
        ["NLP", "Vision"],
        [NetworkEdge(source="NLP", target="Vision", label="shares methods"),
         NetworkEdge(source="Vision", target="Vision")]
    )
    return SessionSnapshot(
        trees=(tree,),
        network=network,
        collection=(CollectedPaper(paper=paper, source_keyword="transformers"),)
    )


# =============================================================================
# Snapshot Tests
# =============================================================================

class TestSnapshotExport:
    """test the JSON snapshot format."""

    def test_wire_names(self, snapshot):
        created = datetime(2026, 1, 2, tzinfo=timezone.utc)
        data = export_snapshot(snapshot, created_at=created)

        assert set(data) == {"network", "trees", "collection", "createdAt"}
        assert data["createdAt"] == "2026-01-02T00:00:00+00:00"
        assert data["network"]["edges"][0] == {"from": "NLP", "to": "Vision", "label": "shares methods"}
        assert "label" not in data["network"]["edges"][1]

        leaf = data["trees"][0]["children"][0]
        assert leaf["isLoading"] is False
        assert leaf["label"] == "hot"
        assert leaf["literature"][0]["authors"] == ["Vaswani", "Shazeer"]
        assert "label" not in data["trees"][0]
        assert "literature" not in data["trees"][0]

        assert data["collection"][0]["sourceKeyword"] == "transformers"

    def test_round_trip_restores_values(self, snapshot):
        data = json.loads(json.dumps(export_snapshot(snapshot)))
        restored = load_snapshot(data)

        assert restored.trees == snapshot.trees
        assert restored.network == snapshot.network
        assert restored.collection == snapshot.collection
        assert restored.created_at == data["createdAt"]

    def test_empty_session_has_nothing_to_export(self):
        with pytest.raises(ValidationError) as exc:
            export_snapshot(SessionSnapshot())
        assert str(exc.value) == "No data to export."

    def test_collection_only_is_exportable(self):
        paper = Paper(title="T", url="https://t")
        data = export_snapshot(SessionSnapshot(collection=(CollectedPaper(paper, "k"),)))
        assert data["network"] is None
        assert data["trees"] == []

    def test_invalid_snapshot(self):
        with pytest.raises(ValidationError):
            load_snapshot({"trees": [{"keyword": "no id"}]})
        with pytest.raises(ValidationError):
            load_snapshot({"trees": [{"id": "x", "keyword": "x", "label": "trendy"}]})
        with pytest.raises(ValidationError):
            load_snapshot(["not", "a", "dict"])

    def test_write_and_read(self, snapshot, tmp_path):
        filepath = write_snapshot(snapshot, str(tmp_path / "out"))

        assert Path(filepath).name.startswith("research-explorer-data-")
        assert filepath.endswith(".json")
        assert read_snapshot(filepath).trees == snapshot.trees


# =============================================================================
# Image Tests
# =============================================================================

class TestNetworkImage:
    """test the SVG network rendering."""

    def test_graph_keeps_every_edge(self, snapshot):
        graph = build_graph(snapshot.network)
        assert set(graph.nodes) == {"NLP", "Vision"}
        assert graph.number_of_edges() == 2

    def test_render_contains_nodes_and_labels(self, snapshot):
        svg = render_network_svg(snapshot.network)

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert svg.count('r="18"') == 2
        assert ">NLP</text>" in svg
        assert ">Vision</text>" in svg
        assert ">shares methods</text>" in svg
        assert 'marker-end="url(#arrow)"' in svg

    def test_render_is_deterministic(self, snapshot):
        assert render_network_svg(snapshot.network) == render_network_svg(snapshot.network)

    def test_escapes_labels(self):
        network = NetworkData.build(["R&D", "<ML>"], [])
        svg = render_network_svg(network)
        assert ">R&amp;D</text>" in svg
        assert ">&lt;ML&gt;</text>" in svg

    def test_single_node(self):
        svg = render_network_svg(NetworkData.build(["solo"], []))
        assert ">solo</text>" in svg

    def test_config_size(self, snapshot):
        svg = render_network_svg(snapshot.network, ExportConfig(image_margin=10, image_size=200))
        assert 'width="220"' in svg

    def test_missing_network(self):
        with pytest.raises(ValidationError) as exc:
            render_network_svg(None)
        assert str(exc.value) == "Network graph not found."

    def test_write_image(self, snapshot, tmp_path):
        filepath = write_network_image(snapshot.network, str(tmp_path))
        assert Path(filepath).name.startswith("research-network-")
        assert Path(filepath).read_text(encoding="utf-8").startswith("<svg")


# =============================================================================
# Web Tests
# =============================================================================

@pytest.fixture
def web():
    collaborator = FakeCollaborator()
    collaborator.connections = [{"from": "A", "to": "B", "label": "feeds"}]
    session = make_session(collaborator)
    client = TestClient(create_app(orchestrator=session))
    return client, session, collaborator


class TestWebApp:
    """test the session endpoints."""

    def test_initial_state(self, web):
        client, _, _ = web
        state = client.get("/api/state").json()

        assert state["trees"] == []
        assert state["network"] is None
        assert state["isLoading"] is False
        assert state["iterations"] == 0
        assert state["iterationLimit"] == 3

    def test_search(self, web):
        client, _, _ = web
        state = client.post("/api/search", json={"keywords": ["A", "B"]}).json()

        assert [t["id"] for t in state["trees"]] == ["a", "b"]
        assert state["network"]["edges"] == [{"from": "A", "to": "B", "label": "feeds"}]
        assert state["selectedForNetwork"] == ["A", "B"]
        assert state["error"] == ""

    def test_search_error_is_reported_in_state(self, web):
        client, _, _ = web
        response = client.post("/api/search", json={"keywords": [" "]})

        assert response.status_code == 200
        assert response.json()["error"] == "Please enter at least one keyword."

    def test_expand_and_literature(self, web):
        client, _, collaborator = web
        client.post("/api/search", json={"keywords": ["A"]})

        state = client.post("/api/nodes/a-alpha-0/expand").json()
        node = state["trees"][0]["children"][0]
        assert [c["keyword"] for c in node["children"]] == ["alpha sub"]
        assert state["iterations"] == 1

        state = client.post("/api/nodes/a-beta-1/literature").json()
        assert state["literatureNode"]["id"] == "a-beta-1"
        assert state["literatureNode"]["literature"][0]["title"] == "On beta"

    def test_expand_with_explicit_keyword(self, web):
        client, _, collaborator = web
        client.post("/api/search", json={"keywords": ["A"]})
        client.post("/api/nodes/a-alpha-0/expand", json={"parent_keyword": "alpha in A"})
        assert ("expand_node", "alpha in A") in collaborator.calls

    def test_unknown_node_is_404(self, web):
        client, _, _ = web
        assert client.post("/api/nodes/missing/expand").status_code == 404
        assert client.post("/api/nodes/missing/literature").status_code == 404

    def test_selection_and_network(self, web):
        client, _, _ = web
        client.post("/api/search", json={"keywords": ["A", "B"]})

        state = client.post("/api/selection", json={"keyword": "B", "selected": False}).json()
        assert state["selectedForNetwork"] == ["A"]

        state = client.post("/api/network").json()
        assert state["error"] == "Select at least two keywords to form a network."

    def test_collection_toggle(self, web):
        client, _, _ = web
        body = {"paper": {"title": "T", "url": "https://t"}, "source_keyword": "A"}

        state = client.post("/api/collection", json=body).json()
        assert state["collection"][0]["sourceKeyword"] == "A"

        state = client.post("/api/collection", json=body).json()
        assert state["collection"] == []

    def test_refresh(self, web):
        client, _, collaborator = web
        client.post("/api/search", json={"keywords": ["A"]})
        collaborator.trees["A"] = [("fresh", None)]

        state = client.post("/api/trees/refresh", json={"keyword": "A"}).json()
        assert [c["keyword"] for c in state["trees"][0]["children"]] == ["fresh"]

    def test_exports_need_data(self, web):
        client, _, _ = web
        assert client.get("/api/export/json").status_code == 404
        assert client.get("/api/export/network.svg").status_code == 404

    def test_exports(self, web):
        client, _, _ = web
        client.post("/api/search", json={"keywords": ["A", "B"]})

        response = client.get("/api/export/json")
        assert response.status_code == 200
        assert "research-explorer-data-" in response.headers["content-disposition"]
        assert [t["id"] for t in response.json()["trees"]] == ["a", "b"]

        response = client.get("/api/export/network.svg")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert ">feeds</text>" in response.text

    def test_matches_session_snapshot(self, web):
        client, session, _ = web
        asyncio.run(session.start_search(["A"]))
        data = client.get("/api/export/json").json()
        assert load_snapshot(data).trees == session.snapshot().trees


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
