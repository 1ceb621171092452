"""System instructions and user-message builders, one set per task.

Each system instruction describes the JSON shape for its own task only.
"""

from __future__ import annotations

import json
from typing import Any

GRAPH_JSON_INSTRUCTIONS = """\
Return JSON with shape { "nodes": [...], "edges": [...] }.
Each node: { "id": "string", "label": "string", "kind": "service|db|queue|page|step" }.
Each edge: { "id": "string", "source": "nodeId", "target": "nodeId", "label": "string?" }.
No prose. JSON only."""

STACK_RECOMMENDATION_PROMPT = """\
You are a tech stack advisor. Based on the user's requirements, recommend the optimal tech stack.
Consider: project type, scale, team size, performance needs, deployment preferences.
Return JSON with shape: {
  "frontend": {"framework": "nextjs|react|vue|svelte", "styling": "tailwind|styled-components", "reasons": string[]},
  "backend": {"framework": "hono|fastapi|express", "database": "postgres|mysql|sqlite", "reasons": string[]},
  "auth": {"solution": "clerk|nextauth|supabase", "reasons": string[]},
  "deployment": {"platform": "vercel|cloudflare|aws", "reasons": string[]},
  "additional": {"tools": string[], "reasons": string[]}
}"""

PROJECT_PLAN_PROMPT = """\
You are a comprehensive project planner. Generate a PRODUCTION-READY project plan.
Return JSON with keys:
{
  "title": string,
  "description": string,
  "stack": {"type": "web|mobile|backend|blockchain|ai", "framework": string, "features": string[],
            "database"?: "postgres|mysql|sqlite|mongodb", "auth"?: "clerk|nextauth|supabase-auth",
            "styling"?: "tailwind|styled-components|emotion"},
  "architecture": {
    "nodes": [{ "id": string, "label": string, "kind": "service|db|queue|page|step" }],
    "edges": [{ "id": string, "source": string, "target": string, "label"?: string }]
  },
  "userFlows": [{ "id": string, "name": string, "steps": string[] }],
  "userStories": [{"id": string, "title": string, "description": string, "acceptanceCriteria": string[],
                   "priority": "High|Medium|Low", "estimate": "S|M|C", "assignees": string[]}],
  "fileStructure": [{"name": string, "type": "file|directory", "content"?: string, "children"?: [...] }],
  "timeline": {"phases": [{"name": string, "duration": string, "tasks": string[]}]},
  "risks": string[],
  "considerations": string[]
}
Keep it concise but specific. JSON only."""

SCAFFOLD_GENERATION_PROMPT = """\
Generate actual code files for the specified tech stack and requirements.
Return JSON with shape: {
  "files": [{"path": string, "content": string, "executable"?: boolean}],
  "commands": [{"description": string, "command": string}],
  "environment": {"variables": string[], "setup": string[]}
}
Include package manifests, configuration files, basic components, and setup instructions."""

DOCS_MARKDOWN_PROMPT = """\
You are a senior product architect. Given a project plan JSON, generate a comprehensive Markdown document with:
- Title and executive summary
- Architecture overview (bullets of key services, data stores, queues)
- User flows (end-to-end steps)
- Top user stories (with acceptance criteria)
- Non-functional requirements (security, scalability, observability)
- Risks & mitigations
- Release plan (phases)
Use clear headings (##) and concise bullets. Output Markdown only."""

DOC_JSON_INSTRUCTIONS = """\
You are a senior product architect writing a plan document.
Return JSON with shape: {
  "title": string,
  "summary": string,
  "sections": [{"heading": string, "body": string}],
  "backlog": [{"id": string, "title": string, "role"?: string, "acceptanceCriteria": string[]}],
  "risks": string[],
  "open_questions": string[]
}
Sections should cover core functionality, tech stack, architecture, data models, APIs,
security, observability, compliance and rollout. JSON only."""

ESTIMATE_PROMPT = """\
You are a delivery manager. Given a project plan JSON with userFlows and userStories,
estimate time (in hours) and cost (USD) using a base rate of ${rate}/hr.
Return JSON with shape:
{
  "totals": { "hours": number, "cost": number },
  "flows": [{ "id": string, "hours": number, "cost": number }],
  "stories": [{ "id": string, "hours": number, "cost": number }]
}
Only JSON."""

HOURLY_RATE_USD = 70

# ── Graph-from-text variants ──

_SYSTEM_GRAPH = """\
You are an expert system architect. Create a detailed system architecture diagram based on the following description.
Description: {text}
The architecture should show the different components of the system and how they interact.
Nodes can be of kind "service", "db", "queue", or "page".
Edges should represent the flow of information or dependencies between the components.
Be thorough and create a complete, logical architecture."""

_USER_FLOW_GRAPH = """\
You are an expert UX designer. Create a user flow diagram based on the following description.
Description: {text}
The user flow should show the steps a user takes to accomplish a goal.
Nodes should be of kind "page" or "step".
Edges should represent the user's navigation between pages and steps.
Be thorough and create a complete, logical user flow."""

_SEQUENCE_GRAPH = """\
You are an expert software engineer. Create a sequence diagram based on the following description.
Description: {text}
The sequence diagram should show the interactions between different components or services over time.
Nodes should be of kind "service" or "db".
Edges should represent messages or API calls between the components, with labels indicating the order of operations.
Be thorough and create a complete, logical sequence diagram."""

GRAPH_VARIANTS: dict[str, str] = {
    "system": _SYSTEM_GRAPH,
    "user-flow": _USER_FLOW_GRAPH,
    "sequence": _SEQUENCE_GRAPH,
}

# Kinds each variant asks the model to use
VARIANT_KINDS: dict[str, tuple[str, ...]] = {
    "system": ("service", "db", "queue", "page"),
    "user-flow": ("page", "step"),
    "sequence": ("service", "db"),
}

DEFAULT_VARIANT = "system"

# Labels older clients send for the same variants
_VARIANT_ALIASES = {
    "system architecture": "system",
    "user flow": "user-flow",
    "user_flow": "user-flow",
    "sequence diagram": "sequence",
}


def resolve_variant(variant: str | None) -> str:
    """Map a requested diagram type onto a known variant; unknown → system."""
    if not variant:
        return DEFAULT_VARIANT
    key = variant.strip().lower()
    key = _VARIANT_ALIASES.get(key, key)
    return key if key in GRAPH_VARIANTS else DEFAULT_VARIANT


def graph_from_text_message(text: str, variant: str, rules: list[str] | None = None) -> str:
    message = GRAPH_VARIANTS[variant].format(text=text)
    rules = [r for r in (rules or []) if r.strip()]
    if rules:
        message += "\nYou must follow these rules:\n" + "\n\n---\n\n".join(rules) + "\n"
    return message


def graph_suggest_message(graph: dict[str, Any], goal: str) -> str:
    return (
        "You are an architect. Improve this graph toward the goal.\n"
        f"Current graph JSON:\n{json.dumps(graph)}\n"
        f"Goal:\n{goal}\n"
        "Return only JSON."
    )


def project_plan_system(stack: dict[str, Any] | None) -> str:
    if not stack:
        return PROJECT_PLAN_PROMPT
    return PROJECT_PLAN_PROMPT + f"\nRecommended stack: {json.dumps(stack)}"


def scaffold_message(plan: dict[str, Any], stack: dict[str, Any]) -> str:
    return (
        f"Project: {plan.get('title', '')}\n"
        f"Stack: {json.dumps(stack)}\n"
        f"Requirements: {plan.get('description', '')}"
    )


def estimate_system(rate: int = HOURLY_RATE_USD) -> str:
    return ESTIMATE_PROMPT.replace("${rate}", f"${rate}")


# ── Grounding context templates for the docs task ──

CONTEXT_TEMPLATES: dict[str, str] = {
    "ride-share": """\
Domain: Ride-hailing platform with roles: passenger, driver, admin.
Core features: ride request, driver matching, real-time tracking, payments, onboarding, admin ops.
Tech preference: Next.js + Tailwind; Node backend; PostgreSQL; WebSockets for live updates; hosted auth.
Sections must include: Executive summary, Core functionalities, Milestones/stories with ACs and role tags, \
Tech stack, Architecture, Data models, APIs, Security, Observability, Risks & mitigations, Compliance, Rollout.""",
}


def docs_system(context: str | None = None, template: str | None = None) -> str:
    """DOC_JSON_INSTRUCTIONS plus any grounding context (template first, then caller context)."""
    parts = [CONTEXT_TEMPLATES[template]] if template in CONTEXT_TEMPLATES else []
    if context:
        parts.append(context)
    if not parts:
        return DOC_JSON_INSTRUCTIONS
    merged = "\n\n".join(parts)
    return DOC_JSON_INSTRUCTIONS + f"\nContext (for grounding, may include domain, roles, tech):\n{merged}"


def docs_message(prompt: str) -> str:
    return f"Generate a comprehensive plan document for: {prompt}"
