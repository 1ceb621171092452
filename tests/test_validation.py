"""Tests for graph validation and stack cross-validation."""

from __future__ import annotations

import pytest

from archflow.graph.model import StackConfig
from archflow.graph.validation import check_stack_compatibility, validate_graph


class TestValidateGraph:
    def test_minimal_graph_accepted(self):
        result = validate_graph({"nodes": [{"id": "a", "label": "A"}], "edges": []})
        assert result.ok
        assert result.graph.nodes[0].id == "a"
        assert result.errors == []

    def test_empty_id_and_label_rejected(self):
        result = validate_graph({"nodes": [{"id": "", "label": ""}], "edges": []})
        assert not result.ok
        assert result.graph is None
        paths = {e.path for e in result.errors}
        assert paths == {"nodes.0.id", "nodes.0.label"}

    @pytest.mark.parametrize("field", ["id", "source", "target"])
    def test_empty_edge_field_rejected(self, field):
        edge = {"id": "e1", "source": "a", "target": "b"}
        edge[field] = ""
        result = validate_graph({"nodes": [{"id": "a", "label": "A"}], "edges": [edge]})
        assert not result.ok
        assert result.errors[0].path == f"edges.0.{field}"

    def test_all_kinds_accepted(self):
        nodes = [
            {"id": k, "label": k.upper(), "kind": k}
            for k in ("service", "db", "queue", "page", "step")
        ]
        assert validate_graph({"nodes": nodes, "edges": []}).ok

    def test_unknown_kind_rejected(self):
        result = validate_graph({"nodes": [{"id": "a", "label": "A", "kind": "cache"}], "edges": []})
        assert not result.ok
        assert result.errors[0].path == "nodes.0.kind"

    def test_optional_fields(self):
        result = validate_graph({
            "nodes": [{"id": "a", "label": "A", "group": "core", "data": {"owner": "team-a", "tier": 1}}],
            "edges": [{"id": "e", "source": "a", "target": "a", "label": "self", "directed": True}],
        })
        assert result.ok
        assert result.graph.nodes[0].data == {"owner": "team-a", "tier": 1}
        assert result.graph.edges[0].directed is True

    def test_dangling_edge_accepted_by_default(self):
        result = validate_graph({
            "nodes": [{"id": "a", "label": "A"}],
            "edges": [{"id": "e1", "source": "a", "target": "ghost"}],
        })
        assert result.ok

    def test_duplicate_node_ids_accepted_by_default(self):
        result = validate_graph({
            "nodes": [{"id": "a", "label": "A"}, {"id": "a", "label": "Again"}],
            "edges": [],
        })
        assert result.ok

    def test_renderer_fields_dropped(self):
        result = validate_graph({
            "nodes": [{"id": "a", "label": "A", "position": {"x": 10, "y": 20}, "selected": True}],
            "edges": [{"id": "e", "source": "a", "target": "a", "animated": True}],
        })
        assert result.ok
        assert result.graph.to_wire() == {
            "nodes": [{"id": "a", "label": "A"}],
            "edges": [{"id": "e", "source": "a", "target": "a"}],
        }

    @pytest.mark.parametrize(
        "candidate",
        [
            None,
            42,
            "graph",
            [],
            {},
            {"nodes": None, "edges": []},
            {"nodes": [], "edges": "none"},
            {"nodes": [{"id": "a"}], "edges": []},
            {"nodes": [{"id": 1, "label": "A"}], "edges": []},
            {"nodes": [{"id": "a", "label": ["A"]}], "edges": []},
            {"nodes": [[[]]], "edges": [{}]},
            {"nodes": [{"id": "a", "label": "A", "data": "not-a-map"}], "edges": []},
            {"nodes": [], "edges": [{"id": "e", "source": "a", "target": "b", "directed": "yes"}]},
            {"nodes": [{"id": {"deep": {"deeper": [1, 2, {"x": None}]}}, "label": "A"}], "edges": []},
        ],
    )
    def test_malformed_input_returns_result(self, candidate):
        result = validate_graph(candidate)
        assert not result.ok
        assert result.errors

    def test_flatten_groups_by_path(self):
        result = validate_graph({"nodes": [{"id": "", "label": ""}], "edges": []})
        flat = result.flatten()
        assert flat["formErrors"] == []
        assert set(flat["fieldErrors"]) == {"nodes.0.id", "nodes.0.label"}
        assert all(isinstance(m, str) for msgs in flat["fieldErrors"].values() for m in msgs)

    def test_deterministic(self):
        candidate = {"nodes": [{"id": "", "label": "A"}], "edges": [{"id": "e"}]}
        first = validate_graph(candidate)
        second = validate_graph(candidate)
        assert [e.to_dict() for e in first.errors] == [e.to_dict() for e in second.errors]


class TestStrictValidation:
    def test_dangling_edge_rejected(self):
        result = validate_graph(
            {"nodes": [{"id": "a", "label": "A"}], "edges": [{"id": "e1", "source": "a", "target": "ghost"}]},
            strict=True,
        )
        assert not result.ok
        assert [e.path for e in result.errors] == ["edges.0.target"]
        assert result.errors[0].code == "dangling_edge"

    def test_duplicate_node_ids_rejected(self):
        result = validate_graph(
            {"nodes": [{"id": "a", "label": "A"}, {"id": "a", "label": "B"}], "edges": []},
            strict=True,
        )
        assert not result.ok
        assert {e.path for e in result.errors} == {"nodes.0.id", "nodes.1.id"}

    def test_duplicate_edge_ids_rejected(self):
        result = validate_graph(
            {
                "nodes": [{"id": "a", "label": "A"}, {"id": "b", "label": "B"}],
                "edges": [
                    {"id": "e", "source": "a", "target": "b"},
                    {"id": "e", "source": "b", "target": "a"},
                ],
            },
            strict=True,
        )
        assert {e.code for e in result.errors} == {"duplicate_id"}

    def test_well_formed_graph_passes(self, two_service_graph):
        assert validate_graph(two_service_graph, strict=True).ok


class TestStackCompatibility:
    def test_matching_pair(self):
        stack = StackConfig.model_validate({"type": "web", "framework": "nextjs"})
        assert check_stack_compatibility(stack) == []

    def test_mismatched_pair(self):
        stack = StackConfig.model_validate({"type": "web", "framework": "anchor"})
        problems = check_stack_compatibility(stack)
        assert len(problems) == 1
        assert "anchor" in problems[0]
