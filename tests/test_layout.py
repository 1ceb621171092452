"""Tests for the layered layout."""

from __future__ import annotations

from unittest.mock import patch

import networkx as nx
import pytest

from archflow.errors import LayoutError
from archflow.graph.layout import (
    LAYER_SPACING,
    NODE_HEIGHT,
    NODE_SPACING,
    NODE_WIDTH,
    ORIGIN,
    Position,
    compute_layout,
    layout_or_default,
    positions_to_dict,
)
from archflow.graph.model import Graph

COL = NODE_WIDTH + LAYER_SPACING
ROW = NODE_HEIGHT + NODE_SPACING


def _graph(nodes, edges=()):
    return Graph.model_validate({
        "nodes": [{"id": n, "label": n.upper()} for n in nodes],
        "edges": [{"id": f"e{i}", "source": s, "target": t} for i, (s, t) in enumerate(edges)],
    })


class TestTotality:
    def test_empty_graph(self):
        assert compute_layout(_graph([])) == {}

    def test_single_node(self):
        assert compute_layout(_graph(["a"])) == {"a": Position(0.0, 0.0)}

    def test_dangling_edges_ignored(self):
        positions = compute_layout(_graph(["a", "b"], [("a", "ghost"), ("ghost", "b"), ("a", "b")]))
        assert set(positions) == {"a", "b"}
        assert positions["b"].x == COL

    def test_self_loop_ignored(self):
        positions = compute_layout(_graph(["a"], [("a", "a")]))
        assert positions == {"a": ORIGIN}

    def test_cycle_is_broken(self):
        positions = compute_layout(_graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")]))
        assert [positions[n].x for n in "abc"] == [0, COL, 2 * COL]

    def test_completeness_on_larger_graph(self):
        nodes = [f"n{i}" for i in range(30)]
        edges = [(nodes[i], nodes[(i * 7 + 3) % 30]) for i in range(30)]
        graph = _graph(nodes, edges)
        positions = compute_layout(graph)
        assert len(positions) == len(graph.nodes)

    def test_duplicate_ids_share_one_position(self):
        graph = Graph.model_validate({
            "nodes": [{"id": "a", "label": "A"}, {"id": "a", "label": "A2"}, {"id": "b", "label": "B"}],
            "edges": [],
        })
        positions = compute_layout(graph)
        assert set(positions) == {"a", "b"}


class TestGeometry:
    def test_left_to_right_chain(self):
        positions = compute_layout(_graph(["a", "b", "c"], [("a", "b"), ("b", "c")]))
        assert positions == {
            "a": Position(0.0, 0.0),
            "b": Position(float(COL), 0.0),
            "c": Position(float(2 * COL), 0.0),
        }

    def test_fan_out_is_centred(self):
        positions = compute_layout(_graph(["a", "b", "c"], [("a", "b"), ("a", "c")]))
        assert positions["a"] == Position(0.0, ROW / 2)
        assert positions["b"] == Position(float(COL), 0.0)
        assert positions["c"] == Position(float(COL), float(ROW))

    def test_disconnected_nodes_stack_in_first_layer(self):
        positions = compute_layout(_graph(["a", "b", "c"]))
        assert {p.x for p in positions.values()} == {0.0}
        assert sorted(p.y for p in positions.values()) == [0.0, ROW, 2 * ROW]

    def test_positions_distinct(self):
        nodes = [f"n{i}" for i in range(12)]
        edges = [("n0", f"n{i}") for i in range(1, 6)] + [(f"n{i}", "n11") for i in range(1, 6)]
        positions = compute_layout(_graph(nodes, edges))
        assert len(set(positions.values())) == len(nodes)

    def test_footprint_ignores_label_length(self):
        short = _graph(["a", "b"], [("a", "b")])
        long = Graph.model_validate({
            "nodes": [{"id": "a", "label": "A" * 300}, {"id": "b", "label": "B"}],
            "edges": [{"id": "e0", "source": "a", "target": "b"}],
        })
        assert compute_layout(short) == compute_layout(long)

    def test_crossing_reduction_follows_parents(self):
        # b-branch and c-branch cross unless the second layer is reordered
        positions = compute_layout(_graph(["a", "b", "c", "x", "y"], [("a", "b"), ("a", "c"), ("c", "x"), ("b", "y")]))
        assert positions["y"].y < positions["x"].y


class TestDeterminism:
    def test_same_graph_same_positions(self):
        nodes = [f"n{i}" for i in range(20)]
        edges = [(nodes[i], nodes[(i * 3 + 1) % 20]) for i in range(20)]
        assert compute_layout(_graph(nodes, edges)) == compute_layout(_graph(nodes, edges))

    def test_repeated_calls_on_same_object(self, two_service_graph):
        graph = Graph.model_validate(two_service_graph)
        assert compute_layout(graph) == compute_layout(graph)


class TestFailure:
    def test_size_guard(self):
        with pytest.raises(LayoutError):
            compute_layout(_graph(["a", "b", "c"]), max_nodes=2)

    def test_algorithm_error_is_typed(self):
        with patch("archflow.graph.layout._assign_layers", side_effect=nx.NetworkXUnfeasible("boom")):
            with pytest.raises(LayoutError, match="boom"):
                compute_layout(_graph(["a", "b"], [("a", "b")]))

    @pytest.mark.parametrize("error", [KeyError("a"), RecursionError("too deep")])
    def test_any_algorithm_error_is_typed(self, error):
        with patch("archflow.graph.layout._order_layers", side_effect=error):
            with pytest.raises(LayoutError) as exc_info:
                compute_layout(_graph(["a", "b"], [("a", "b")]))
        assert exc_info.value.__cause__ is error

    def test_layout_or_default_survives_unexpected_error(self):
        with patch("archflow.graph.layout._build_dag", side_effect=KeyError("a")):
            assert layout_or_default(_graph(["a", "b"])) == {"a": ORIGIN, "b": ORIGIN}

    def test_layout_or_default_falls_back_to_origin(self):
        with patch("archflow.graph.layout._assign_layers", side_effect=nx.NetworkXUnfeasible("boom")):
            positions = layout_or_default(_graph(["a", "b"], [("a", "b")]))
        assert positions == {"a": ORIGIN, "b": ORIGIN}

    def test_layout_or_default_passes_through(self):
        graph = _graph(["a", "b"], [("a", "b")])
        assert layout_or_default(graph) == compute_layout(graph)


def test_positions_to_dict():
    assert positions_to_dict({"a": Position(1.0, 2.0)}) == {"a": {"x": 1.0, "y": 2.0}}
