"""Layered left-to-right layout: Graph -> {node_id: Position}.

Every node gets a fixed 200x80 footprint regardless of its label. Layers
run left to right; nodes inside a layer are stacked top to bottom and the
layer is centred against the tallest one. The result depends only on the
graph (node and edge order included), so identical graphs always get
identical positions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import networkx as nx

from archflow import config
from archflow.errors import LayoutError
from archflow.graph.model import Graph

logger = logging.getLogger(__name__)

NODE_WIDTH = 200
NODE_HEIGHT = 80
NODE_SPACING = 40  # between nodes in the same layer
LAYER_SPACING = 60  # between adjacent layers
CROSSING_SWEEPS = 4


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


ORIGIN = Position(0.0, 0.0)


def _build_dag(graph: Graph, index: dict[str, int]) -> nx.DiGraph:
    """Directed acyclic view of the graph.

    Edges with an unknown endpoint and self loops are skipped. Edges that
    would close a cycle are dropped, first come first kept.
    """
    dag = nx.DiGraph()
    dag.add_nodes_from(index)
    for edge in graph.edges:
        u, v = edge.source, edge.target
        if u not in index or v not in index or u == v:
            continue
        if dag.has_edge(u, v) or nx.has_path(dag, v, u):
            continue
        dag.add_edge(u, v)
    return dag


def _assign_layers(dag: nx.DiGraph, index: dict[str, int]) -> dict[str, int]:
    """Longest-path layering: every node sits one layer right of its deepest predecessor."""
    layer: dict[str, int] = {}
    for node in nx.lexicographical_topological_sort(dag, key=index.__getitem__):
        preds = [layer[p] for p in dag.predecessors(node)]
        layer[node] = max(preds) + 1 if preds else 0
    return layer


def _order_layers(dag: nx.DiGraph, layer: dict[str, int], index: dict[str, int]) -> list[list[str]]:
    """Reduce edge crossings with alternating barycenter sweeps."""
    depth = max(layer.values(), default=-1) + 1
    layers: list[list[str]] = [[] for _ in range(depth)]
    for node in sorted(layer, key=index.__getitem__):
        layers[layer[node]].append(node)

    for sweep in range(CROSSING_SWEEPS):
        downward = sweep % 2 == 0
        span = range(1, depth) if downward else range(depth - 2, -1, -1)
        for i in span:
            fixed = {n: r for r, n in enumerate(layers[i - 1] if downward else layers[i + 1])}
            current = {n: r for r, n in enumerate(layers[i])}
            keys: dict[str, tuple[float, int]] = {}
            for node in layers[i]:
                neighbours = dag.predecessors(node) if downward else dag.successors(node)
                ranks = [fixed[n] for n in neighbours if n in fixed]
                # nodes with no neighbour in the fixed layer keep their slot
                centre = sum(ranks) / len(ranks) if ranks else float(current[node])
                keys[node] = (centre, index[node])
            layers[i].sort(key=keys.__getitem__)
    return layers


def compute_layout(graph: Graph, max_nodes: int | None = None) -> dict[str, Position]:
    """Place every node of the graph.

    Args:
        graph: A structurally valid Graph. Dangling edges are tolerated.
        max_nodes: Refuse graphs larger than this (defaults to
            ``config.LAYOUT_MAX_NODES``).

    Returns:
        One Position per node id. Nodes the algorithm leaves unplaced sit
        at the origin.

    Raises:
        LayoutError: The graph is too large or the algorithm failed.
    """
    limit = max_nodes if max_nodes is not None else config.LAYOUT_MAX_NODES
    if len(graph.nodes) > limit:
        raise LayoutError(f"graph has {len(graph.nodes)} nodes, layout limit is {limit}")

    t0 = time.perf_counter()
    index: dict[str, int] = {}
    for i, node in enumerate(graph.nodes):
        index.setdefault(node.id, i)

    try:
        dag = _build_dag(graph, index)
        layer = _assign_layers(dag, index)
        layers = _order_layers(dag, layer, index)
    except Exception as e:
        raise LayoutError(f"layered layout failed: {e!r}") from e

    tallest = max((len(col) for col in layers), default=0)
    row_step = NODE_HEIGHT + NODE_SPACING
    col_step = NODE_WIDTH + LAYER_SPACING

    placed: dict[str, Position] = {}
    for depth, column in enumerate(layers):
        offset = (tallest - len(column)) * row_step / 2
        for row, node in enumerate(column):
            placed[node] = Position(float(depth * col_step), float(offset + row * row_step))

    positions = {node.id: placed.get(node.id, ORIGIN) for node in graph.nodes}
    logger.debug(
        "Layout: %d nodes, %d layers, %.1fms",
        len(positions), len(layers), (time.perf_counter() - t0) * 1000,
    )
    return positions


def layout_or_default(graph: Graph) -> dict[str, Position]:
    """compute_layout, but a failure leaves every node at the origin."""
    try:
        return compute_layout(graph)
    except LayoutError as e:
        logger.warning("Layout failed, using default positions: %s", e)
        return {node.id: ORIGIN for node in graph.nodes}


def positions_to_dict(positions: dict[str, Position]) -> dict[str, dict[str, float]]:
    return {node_id: pos.to_dict() for node_id, pos in positions.items()}
