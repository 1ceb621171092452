"""Render state and the replace-on-response refinement loop.

Every successful generate/suggest round trip throws the previous state
away and installs the freshly laid-out graph. Manual edits (drags, added
edges) survive only if the model happens to return them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from archflow.errors import RefinementError
from archflow.graph.layout import ORIGIN, Position, layout_or_default
from archflow.graph.model import Graph
from archflow.graph.validation import validate_graph

logger = logging.getLogger(__name__)


class GraphSource(Protocol):
    """Anything that can produce graph JSON; the Orchestrator satisfies this."""

    def graph_from_text(self, text: str, variant: str | None = None, rules: list[str] | None = None) -> Any: ...

    def suggest_graph(self, graph: Any, goal: str) -> Any: ...


@dataclass
class RenderNode:
    id: str
    label: str
    position: Position = ORIGIN
    kind: str | None = None
    group: str | None = None
    data: dict[str, Any] | None = None


@dataclass
class RenderEdge:
    id: str
    source: str
    target: str
    label: str | None = None
    directed: bool | None = None


@dataclass
class RenderState:
    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[RenderEdge] = field(default_factory=list)

    @classmethod
    def from_graph(cls, graph: Graph, positions: dict[str, Position]) -> RenderState:
        nodes = [
            RenderNode(
                id=n.id,
                label=n.label,
                position=positions.get(n.id, ORIGIN),
                kind=n.kind,
                group=n.group,
                data=n.data,
            )
            for n in graph.nodes
        ]
        edges = [
            RenderEdge(id=e.id, source=e.source, target=e.target, label=e.label, directed=e.directed)
            for e in graph.edges
        ]
        return cls(nodes=nodes, edges=edges)

    def to_payload(self) -> dict[str, Any]:
        """Graph-shaped dict of the state. Positions are renderer-only and are dropped."""
        return {
            "nodes": [
                _compact({"id": n.id, "label": n.label, "group": n.group, "kind": n.kind, "data": n.data})
                for n in self.nodes
            ],
            "edges": [_compact(vars(e)) for e in self.edges],
        }

    def to_graph(self) -> Graph:
        return Graph.model_validate(self.to_payload())

    def to_dict(self) -> dict[str, Any]:
        payload = self.to_payload()
        for node, rendered in zip(payload["nodes"], self.nodes):
            node["position"] = rendered.position.to_dict()
        return payload


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class RefinementSession:
    """Holds the currently rendered graph and evolves it through a GraphSource."""

    def __init__(self, source: GraphSource, state: RenderState | None = None) -> None:
        self._source = source
        self.state = state or RenderState()

    # ── Round trips ──

    def generate(self, text: str, variant: str | None = None, rules: list[str] | None = None) -> RenderState:
        """Replace the state with a graph generated from ``text``."""
        output = self._source.graph_from_text(text, variant=variant, rules=rules)
        return self._replace(output, "generate")

    def suggest(self, goal: str) -> RenderState:
        """Send the current graph and ``goal``; replace the state with the answer."""
        output = self._source.suggest_graph(self.snapshot(), goal)
        return self._replace(output, "suggest")

    def snapshot(self) -> dict[str, Any]:
        """The current graph as sent to the model: no positions, no renderer fields."""
        return self.state.to_payload()

    def _replace(self, output: Any, action: str) -> RenderState:
        checked = validate_graph(output)
        if not checked.ok:
            logger.warning("%s: model returned an unusable graph (%d error(s))", action, len(checked.errors))
            raise RefinementError(f"{action}: model did not return a valid graph")
        graph = checked.graph
        self.state = RenderState.from_graph(graph, layout_or_default(graph))
        logger.info("%s: state replaced (%d nodes, %d edges)", action, len(graph.nodes), len(graph.edges))
        return self.state

    # ── Manual edits ──

    def move_node(self, node_id: str, x: float, y: float) -> None:
        for node in self.state.nodes:
            if node.id == node_id:
                node.position = Position(float(x), float(y))
                return
        raise KeyError(node_id)

    def add_edge(self, source: str, target: str, label: str | None = None) -> RenderEdge:
        taken = {e.id for e in self.state.edges}
        n = len(self.state.edges) + 1
        while f"e{n}" in taken:
            n += 1
        edge = RenderEdge(id=f"e{n}", source=source, target=target, label=label)
        self.state.edges.append(edge)
        return edge

    def remove_node(self, node_id: str) -> None:
        """Drop a node and every edge touching it."""
        self.state.nodes = [n for n in self.state.nodes if n.id != node_id]
        self.state.edges = [e for e in self.state.edges if node_id not in (e.source, e.target)]
