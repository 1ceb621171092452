"""Graph, stack and project-plan data model.

Wire names are camelCase to match what the model and the browser exchange;
Python attributes are snake_case. Unknown keys are ignored on input, so
renderer-only fields (positions, styling) are dropped whenever data passes
through these models.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

NodeKind = Literal["service", "db", "queue", "page", "step"]

StackType = Literal["web", "mobile", "backend", "blockchain", "ai"]
Framework = Literal[
    "nextjs",
    "react",
    "vue",
    "svelte",
    "solid",
    "flutter",
    "react-native",
    "fastapi",
    "hono",
    "express",
    "hardhat",
    "anchor",
    "langchain",
]
Database = Literal["postgres", "mysql", "sqlite", "mongodb"]
AuthProvider = Literal["clerk", "nextauth", "supabase-auth"]
Styling = Literal["tailwind", "styled-components", "emotion"]


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys, leaving out unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Graph ──


class GraphNode(_Wire):
    id: str = Field(min_length=1, strict=True)
    label: str = Field(min_length=1, strict=True)
    group: str | None = Field(default=None, strict=True)
    kind: NodeKind | None = None
    data: dict[str, Any] | None = None


class GraphEdge(_Wire):
    id: str = Field(min_length=1, strict=True)
    source: str = Field(min_length=1, strict=True)
    target: str = Field(min_length=1, strict=True)
    label: str | None = Field(default=None, strict=True)
    directed: bool | None = Field(default=None, strict=True)


class Graph(_Wire):
    nodes: list[GraphNode]
    edges: list[GraphEdge]

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]


# ── Stack ──


class StackConfig(_Wire):
    type: StackType
    framework: Framework
    features: list[str] = Field(default_factory=list)
    database: Database | None = None
    auth: AuthProvider | None = None
    styling: Styling | None = None


# ── Project plan ──


class UserStory(_Wire):
    id: str
    title: str
    description: str
    acceptance_criteria: list[str] = Field(alias="acceptanceCriteria")
    priority: Literal["High", "Medium", "Low"]
    estimate: Literal["S", "M", "C"]
    assignees: list[str]


class FileNode(_Wire):
    """One entry of a file tree. content/children pairing with type is not enforced."""

    name: str
    type: Literal["file", "directory"]
    content: str | None = None
    children: list[FileNode] | None = None


class ProjectPlan(_Wire):
    title: str
    description: str
    stack: StackConfig
    architecture: Graph
    user_stories: list[UserStory] = Field(alias="userStories")
    file_structure: list[FileNode] = Field(alias="fileStructure")


FileNode.model_rebuild()


# ── Model output shapes (checked only in strict output mode) ──


class _Section(_Wire):
    reasons: list[str] = Field(default_factory=list)


class FrontendChoice(_Section):
    framework: str
    styling: str | None = None


class BackendChoice(_Section):
    framework: str
    database: str | None = None


class AuthChoice(_Section):
    solution: str


class DeploymentChoice(_Section):
    platform: str


class AdditionalTools(_Section):
    tools: list[str] = Field(default_factory=list)


class StackRecommendation(_Wire):
    frontend: FrontendChoice
    backend: BackendChoice
    auth: AuthChoice
    deployment: DeploymentChoice
    additional: AdditionalTools | None = None


class ScaffoldFile(_Wire):
    path: str = Field(min_length=1)
    content: str
    executable: bool | None = None


class ScaffoldCommand(_Wire):
    description: str
    command: str


class ScaffoldEnvironment(_Wire):
    variables: list[str] = Field(default_factory=list)
    setup: list[str] = Field(default_factory=list)


class ScaffoldManifest(_Wire):
    files: list[ScaffoldFile]
    commands: list[ScaffoldCommand] = Field(default_factory=list)
    environment: ScaffoldEnvironment = Field(default_factory=ScaffoldEnvironment)


class DocSection(_Wire):
    heading: str
    body: str


class BacklogItem(_Wire):
    id: str
    title: str
    role: str | None = None
    acceptance_criteria: list[str] = Field(default_factory=list, alias="acceptanceCriteria")


class PlanDocument(_Wire):
    title: str
    summary: str
    sections: list[DocSection]
    backlog: list[BacklogItem] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)


class EstimateLine(_Wire):
    id: str
    hours: float
    cost: float


class EstimateTotals(_Wire):
    hours: float
    cost: float


class Estimate(_Wire):
    totals: EstimateTotals
    flows: list[EstimateLine] = Field(default_factory=list)
    stories: list[EstimateLine] = Field(default_factory=list)
