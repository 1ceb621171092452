#!/usr/bin/env python3
"""CLI: generate an architecture graph from prose, optionally refine it, print it laid out."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from archflow import config
from archflow.errors import ArchflowError
from archflow.generation.orchestrator import Orchestrator
from archflow.graph.layout import layout_or_default
from archflow.graph.validation import validate_graph
from archflow.refinement import RefinementSession, RenderState


def _load_state(path: Path) -> RenderState:
    """Read a graph JSON file and lay it out as the starting state."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read graph from {path}: {e}", file=sys.stderr)
        sys.exit(1)

    checked = validate_graph(data)
    if not checked.ok:
        print(f"Error: {path} is not a valid graph:", file=sys.stderr)
        for path_, messages in checked.flatten()["fieldErrors"].items():
            print(f"  {path_}: {'; '.join(messages)}", file=sys.stderr)
        sys.exit(1)
    return RenderState.from_graph(checked.graph, layout_or_default(checked.graph))


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate and refine an architecture graph")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", type=str, help="Describe the system to diagram")
    source.add_argument("--graph", type=Path, help="Start from an existing graph JSON file")
    parser.add_argument(
        "--type",
        type=str,
        default="system",
        help="Diagram variant: system, user-flow or sequence (default: system)",
    )
    parser.add_argument(
        "--goal",
        action="append",
        default=[],
        help="Refinement goal; repeat to run several suggest rounds in order",
    )
    parser.add_argument(
        "--rule",
        type=Path,
        action="append",
        default=[],
        help="Markdown rule file to inject into the generation prompt",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject model output that does not match the task schema",
    )
    parser.add_argument("--out", type=Path, default=None, help="Write the result here instead of stdout")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if not config.GEMINI_API_KEY:
        print("Error: GEMINI_API_KEY is not set.", file=sys.stderr)
        sys.exit(1)

    orchestrator = Orchestrator(strict_output=True if args.strict else None)

    if args.graph:
        session = RefinementSession(orchestrator, state=_load_state(args.graph))
    else:
        session = RefinementSession(orchestrator)
        rules = [p.read_text(encoding="utf-8") for p in args.rule]
        try:
            session.generate(args.text, variant=args.type, rules=rules)
        except ArchflowError as e:
            print(f"Error: generation failed: {e}", file=sys.stderr)
            sys.exit(2)
        print(f"Generated {len(session.state.nodes)} nodes, {len(session.state.edges)} edges", file=sys.stderr)

    for i, goal in enumerate(args.goal, 1):
        try:
            session.suggest(goal)
        except ArchflowError as e:
            print(f"Error: refinement round {i} failed: {e}", file=sys.stderr)
            sys.exit(2)
        print(
            f"Round {i}: {len(session.state.nodes)} nodes, {len(session.state.edges)} edges",
            file=sys.stderr,
        )

    output = json.dumps(session.state.to_dict(), indent=2)
    if args.out:
        args.out.write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {args.out}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
