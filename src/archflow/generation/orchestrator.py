"""Task → prompt → one model call → output.

The orchestrator is stateless apart from its provider handle and its two
strictness switches, so one instance can serve concurrent requests.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from archflow import config
from archflow.errors import GenerationFailed, InvalidGraphError, ModelCallError
from archflow.generation import prompts
from archflow.generation.parsing import parse_and_validate
from archflow.generation.provider import GenerationProvider, get_provider
from archflow.graph.model import (
    Estimate,
    Graph,
    PlanDocument,
    ProjectPlan,
    ScaffoldManifest,
    StackConfig,
    StackRecommendation,
)
from archflow.graph.validation import validate_graph

logger = logging.getLogger(__name__)


class Task(str, Enum):
    GRAPH_FROM_TEXT = "graph-from-text"
    GRAPH_SUGGEST = "graph-suggest"
    STACK_RECOMMEND = "stack-recommend"
    PROJECT_PLAN = "project-plan"
    SCAFFOLD = "scaffold"
    DOCS = "docs"
    ESTIMATE = "estimate"


@dataclass(frozen=True)
class Prompt:
    """The two messages sent to the model."""

    system: str
    user: str


class Orchestrator:
    """Builds per-task prompts and returns what the model produced."""

    def __init__(
        self,
        provider: GenerationProvider | None = None,
        strict_output: bool | None = None,
        strict_graph: bool | None = None,
    ) -> None:
        # None until the first model call resolves the shared provider
        self._provider = provider
        self.strict_output = config.STRICT_OUTPUT if strict_output is None else strict_output
        self.strict_graph = config.STRICT_GRAPH if strict_graph is None else strict_graph

    # ── Model boundary ──

    def _call(self, task: Task, prompt: Prompt, json_output: bool = True) -> str:
        logger.info("%s: calling model (%d char user message)", task.value, len(prompt.user))
        t0 = time.perf_counter()
        try:
            provider = self._provider or get_provider()
            text = provider.generate(prompt.user, system=prompt.system, json_output=json_output)
        except Exception as e:
            logger.error("%s: model call failed after %.2fs: %s", task.value, time.perf_counter() - t0, e)
            raise ModelCallError(f"{task.value}: model call failed", task=task.value) from e
        logger.info("%s: %d chars in %.2fs", task.value, len(text or ""), time.perf_counter() - t0)
        return text

    def _json(self, task: Task, prompt: Prompt, schema: type[BaseModel] | None) -> Any:
        result = parse_and_validate(self._call(task, prompt), schema, strict=self.strict_output)
        if not result.ok and self.strict_output:
            raise GenerationFailed(f"{task.value}: {result.error}", details=result.details)
        return result.value

    # ── Tasks ──

    def graph_from_text(self, text: str, variant: str | None = None, rules: list[str] | None = None) -> Any:
        """Turn a prose description into graph JSON.

        Args:
            text: What the user wants diagrammed.
            variant: "system", "user-flow" or "sequence". Anything else is
                treated as "system".
            rules: Extra house rules appended to the user message.
        """
        resolved = prompts.resolve_variant(variant)
        prompt = Prompt(
            system=prompts.GRAPH_JSON_INSTRUCTIONS,
            user=prompts.graph_from_text_message(text, resolved, rules),
        )
        return self._json(Task.GRAPH_FROM_TEXT, prompt, Graph)

    def suggest_graph(self, graph: Any, goal: str) -> Any:
        """Ask the model to improve ``graph`` toward ``goal``.

        The input graph is validated first. An invalid graph raises
        InvalidGraphError and the model is never called. The model's answer
        is returned as decoded, not merged with the input.
        """
        checked = validate_graph(graph, strict=self.strict_graph)
        if not checked.ok:
            logger.info("graph-suggest: rejected input graph (%d error(s))", len(checked.errors))
            raise InvalidGraphError(checked.flatten())

        prompt = Prompt(
            system=prompts.GRAPH_JSON_INSTRUCTIONS,
            user=prompts.graph_suggest_message(checked.graph.to_wire(), goal),
        )
        return self._json(Task.GRAPH_SUGGEST, prompt, Graph)

    def recommend_stack(self, requirements: str) -> Any:
        prompt = Prompt(system=prompts.STACK_RECOMMENDATION_PROMPT, user=requirements)
        return self._json(Task.STACK_RECOMMEND, prompt, StackRecommendation)

    def plan_project(self, idea: str, stack: StackConfig | None = None) -> Any:
        stack_context = stack.to_wire() if stack is not None else None
        prompt = Prompt(system=prompts.project_plan_system(stack_context), user=idea)
        return self._json(Task.PROJECT_PLAN, prompt, ProjectPlan)

    def scaffold(self, plan: ProjectPlan, stack: StackConfig) -> Any:
        prompt = Prompt(
            system=prompts.SCAFFOLD_GENERATION_PROMPT,
            user=prompts.scaffold_message(plan.to_wire(), stack.to_wire()),
        )
        return self._json(Task.SCAFFOLD, prompt, ScaffoldManifest)

    def docs_from_plan(self, plan: dict[str, Any]) -> str:
        """Markdown document for a plan. Empty string when the model returns nothing."""
        prompt = Prompt(system=prompts.DOCS_MARKDOWN_PROMPT, user=json.dumps(plan))
        markdown = (self._call(Task.DOCS, prompt, json_output=False) or "").strip()
        if not markdown and self.strict_output:
            raise GenerationFailed("docs: empty model output")
        return markdown

    def docs_from_prompt(
        self,
        prompt_text: str,
        context: str | None = None,
        template: str | None = None,
    ) -> Any:
        """Structured plan document (sections, backlog, risks, open questions)."""
        prompt = Prompt(
            system=prompts.docs_system(context, template),
            user=prompts.docs_message(prompt_text),
        )
        return self._json(Task.DOCS, prompt, PlanDocument)

    def estimate(self, plan: dict[str, Any]) -> Any:
        prompt = Prompt(system=prompts.estimate_system(), user=json.dumps(plan))
        return self._json(Task.ESTIMATE, prompt, Estimate)

    # ── Dispatch by task id ──

    def run(self, task: Task | str, **inputs: Any) -> Any:
        """Run a task by identifier, e.g. ``run("graph-suggest", graph=g, goal="...")``.

        The docs task picks its path from the caller's keywords: ``plan``
        for Markdown, ``prompt_text`` for the structured document.
        """
        task = Task(task)
        if task is Task.DOCS:
            handler: Callable[..., Any] = self.docs_from_plan if "plan" in inputs else self.docs_from_prompt
        else:
            handler = {
                Task.GRAPH_FROM_TEXT: self.graph_from_text,
                Task.GRAPH_SUGGEST: self.suggest_graph,
                Task.STACK_RECOMMEND: self.recommend_stack,
                Task.PROJECT_PLAN: self.plan_project,
                Task.SCAFFOLD: self.scaffold,
                Task.ESTIMATE: self.estimate,
            }[task]
        return handler(**inputs)
