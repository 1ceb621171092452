"""Accept or reject untrusted graph-shaped data.

``validate_graph`` is the single entry point. It never raises: every
candidate, however malformed, comes back as a ``ValidationResult``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from archflow.graph.model import Graph, StackConfig


@dataclass
class FieldError:
    """One problem, addressed by a dotted path into the candidate ("nodes.0.id")."""

    path: str
    message: str
    code: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message, "code": self.code}


@dataclass
class ValidationResult:
    graph: Graph | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.graph is not None and not self.errors

    def flatten(self) -> dict[str, Any]:
        """Group messages by field path; errors with no path go to formErrors."""
        form_errors: list[str] = []
        field_errors: dict[str, list[str]] = {}
        for err in self.errors:
            if err.path:
                field_errors.setdefault(err.path, []).append(err.message)
            else:
                form_errors.append(err.message)
        return {"formErrors": form_errors, "fieldErrors": field_errors}


def _from_pydantic(exc: ValidationError) -> list[FieldError]:
    return [
        FieldError(
            path=".".join(str(p) for p in e["loc"]),
            message=e["msg"],
            code=e["type"],
        )
        for e in exc.errors(include_url=False)
    ]


def _structural_errors(graph: Graph) -> list[FieldError]:
    errors: list[FieldError] = []

    node_counts = Counter(graph.node_ids())
    for i, node in enumerate(graph.nodes):
        if node_counts[node.id] > 1:
            errors.append(FieldError(f"nodes.{i}.id", f"duplicate node id {node.id!r}", "duplicate_id"))

    edge_counts = Counter(e.id for e in graph.edges)
    known = set(node_counts)
    for i, edge in enumerate(graph.edges):
        if edge_counts[edge.id] > 1:
            errors.append(FieldError(f"edges.{i}.id", f"duplicate edge id {edge.id!r}", "duplicate_id"))
        if edge.source not in known:
            errors.append(FieldError(f"edges.{i}.source", f"unknown node {edge.source!r}", "dangling_edge"))
        if edge.target not in known:
            errors.append(FieldError(f"edges.{i}.target", f"unknown node {edge.target!r}", "dangling_edge"))

    return errors


def validate_graph(candidate: Any, strict: bool = False) -> ValidationResult:
    """Check a candidate against the Graph schema.

    Args:
        candidate: Anything, usually decoded JSON from a request or a model.
        strict: Also reject duplicate node/edge ids and edges whose endpoints
            are not node ids. Off by default: those pass the schema.

    Returns:
        A ValidationResult carrying either the parsed Graph or field errors.
    """
    try:
        graph = Graph.model_validate(candidate)
    except ValidationError as e:
        return ValidationResult(errors=_from_pydantic(e))
    except (TypeError, ValueError, RecursionError) as e:
        return ValidationResult(errors=[FieldError("", str(e) or type(e).__name__, "invalid")])

    if strict:
        errors = _structural_errors(graph)
        if errors:
            return ValidationResult(errors=errors)

    return ValidationResult(graph=graph)


# ── Stack cross-validation (opt-in, call-site only) ──

FRAMEWORKS_BY_TYPE: dict[str, frozenset[str]] = {
    "web": frozenset({"nextjs", "react", "vue", "svelte", "solid"}),
    "mobile": frozenset({"flutter", "react-native"}),
    "backend": frozenset({"fastapi", "hono", "express"}),
    "blockchain": frozenset({"hardhat", "anchor"}),
    "ai": frozenset({"langchain", "fastapi"}),
}


def check_stack_compatibility(stack: StackConfig) -> list[str]:
    """Return problems with the framework/type pairing; empty when they agree.

    The StackConfig schema keeps the two enumerations independent. Callers
    that care about the pairing run this explicitly.
    """
    allowed = FRAMEWORKS_BY_TYPE.get(stack.type, frozenset())
    if stack.framework in allowed:
        return []
    return [
        f"framework {stack.framework!r} is not a {stack.type} framework "
        f"(expected one of: {', '.join(sorted(allowed))})"
    ]
