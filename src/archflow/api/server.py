"""FastAPI server: one endpoint per generation task, plus rules and guides."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from archflow import config
from archflow.errors import GenerationFailed, InvalidGraphError, ModelCallError
from archflow.generation.orchestrator import Orchestrator, Task
from archflow.graph.model import ProjectPlan, StackConfig
from archflow.library import GUIDE_SUFFIXES, RULE_SUFFIXES, load_documents

# Configure logging on import, before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="archflow", description="Architecture graphs, plans and scaffolds from prose")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy-initialized orchestrator (created on first request)
_orchestrator: Orchestrator | None = None


def _get_orchestrator() -> Orchestrator:
    global _orchestrator
    if _orchestrator is None:
        logger.info("Initializing orchestrator...")
        t0 = time.perf_counter()
        _orchestrator = Orchestrator()
        logger.info(
            "Orchestrator ready (%.2fs, strict_output=%s, strict_graph=%s)",
            time.perf_counter() - t0, _orchestrator.strict_output, _orchestrator.strict_graph,
        )
    return _orchestrator


def _error(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


# ── Error mapping ──

_FAILURE_MESSAGES = {
    Task.GRAPH_FROM_TEXT.value: "Failed to generate graph",
    Task.GRAPH_SUGGEST.value: "Failed to suggest graph improvements",
    Task.STACK_RECOMMEND.value: "Failed to generate stack recommendation",
    Task.PROJECT_PLAN.value: "Failed to generate project plan",
    Task.SCAFFOLD.value: "Failed to generate scaffold",
    Task.DOCS.value: "Failed to generate docs",
    Task.ESTIMATE.value: "Failed to estimate",
}


@app.exception_handler(RequestValidationError)
async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"path": ".".join(str(p) for p in e["loc"] if p != "body"), "message": e["msg"]}
        for e in exc.errors()
    ]
    return _error(400, "Invalid request payload", details)


@app.exception_handler(InvalidGraphError)
async def _invalid_graph(request: Request, exc: InvalidGraphError) -> JSONResponse:
    return _error(400, "Invalid graph payload", exc.details)


@app.exception_handler(GenerationFailed)
async def _generation_failed(request: Request, exc: GenerationFailed) -> JSONResponse:
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return _error(502, "Generation failed", exc.details if exc.details is not None else str(exc))


@app.exception_handler(ModelCallError)
async def _model_call_failed(request: Request, exc: ModelCallError) -> JSONResponse:
    logger.error("%s %s: %s (cause: %r)", request.method, request.url.path, exc, exc.__cause__)
    return _error(500, _FAILURE_MESSAGES.get(exc.task, "Generation request failed"))


@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s: unhandled error", request.method, request.url.path)
    return _error(500, "Internal server error")


# ── Request bodies ──


class RuleDocument(BaseModel):
    content: str
    fileName: str | None = None


class FromTextRequest(BaseModel):
    text: str
    type: str | None = None
    rules: list[RuleDocument] = Field(default_factory=list)


class SuggestRequest(BaseModel):
    # Left untyped: the orchestrator validates it and answers 400 with field details
    graph: Any = None
    goal: str


class StackRequest(BaseModel):
    requirements: str


class PlanRequest(BaseModel):
    idea: str = Field(min_length=10)
    stack: StackConfig | None = None


class ScaffoldRequest(BaseModel):
    plan: ProjectPlan
    stack: StackConfig


class DocsRequest(BaseModel):
    prompt: str | None = None
    context: str | None = None
    template: str | None = None


class PlanPayload(BaseModel):
    plan: dict[str, Any] | None = None


# ── Health ──


@app.get("/health")
def health():
    return {"status": "ok"}


# ── Graphs ──


@app.post("/api/graph/from-text")
def graph_from_text(req: FromTextRequest):
    logger.info("POST /api/graph/from-text type=%r text=%r", req.type, req.text[:120])
    graph = _get_orchestrator().graph_from_text(
        req.text, variant=req.type, rules=[r.content for r in req.rules],
    )
    return JSONResponse(content=graph)


@app.post("/api/graph/suggest")
def graph_suggest(req: SuggestRequest):
    logger.info("POST /api/graph/suggest goal=%r", req.goal[:120])
    graph = _get_orchestrator().suggest_graph(req.graph, req.goal)
    return JSONResponse(content=graph)


# ── Stack, plan, scaffold ──


@app.post("/api/stack/recommend")
def stack_recommend(req: StackRequest):
    logger.info("POST /api/stack/recommend requirements=%r", req.requirements[:120])
    return JSONResponse(content=_get_orchestrator().recommend_stack(req.requirements))


@app.post("/api/project/plan")
def project_plan(req: PlanRequest):
    logger.info("POST /api/project/plan idea=%r stack=%s", req.idea[:120], req.stack is not None)
    return JSONResponse(content=_get_orchestrator().plan_project(req.idea, req.stack))


@app.post("/api/scaffold/generate")
def scaffold_generate(req: ScaffoldRequest):
    logger.info("POST /api/scaffold/generate plan=%r", req.plan.title[:120])
    return JSONResponse(content=_get_orchestrator().scaffold(req.plan, req.stack))


# ── Documents and estimates ──


@app.post("/api/docs/generate")
def docs_generate(req: DocsRequest):
    if not req.prompt:
        return _error(400, "Missing 'prompt'")
    logger.info("POST /api/docs/generate prompt=%r template=%r", req.prompt[:120], req.template)
    doc = _get_orchestrator().docs_from_prompt(req.prompt, context=req.context, template=req.template)
    return JSONResponse(content=doc)


@app.post("/api/docs/from-plan")
def docs_from_plan(req: PlanPayload):
    if not req.plan:
        return _error(400, "Missing 'plan'")
    logger.info("POST /api/docs/from-plan")
    markdown = _get_orchestrator().docs_from_plan(req.plan)
    return PlainTextResponse(markdown, media_type="text/markdown")


@app.post("/api/estimate")
def estimate(req: PlanPayload):
    if not req.plan:
        return _error(400, "Missing 'plan'")
    logger.info("POST /api/estimate")
    return JSONResponse(content=_get_orchestrator().estimate(req.plan))


# ── Rules and guides ──


@app.get("/api/rules")
def list_rules():
    try:
        return load_documents(config.RULES_DIR, RULE_SUFFIXES, recursive=True)
    except OSError:
        logger.exception("Error reading rules from %s", config.RULES_DIR)
        return _error(500, "Error reading rules")


@app.get("/api/guides")
def list_guides():
    try:
        return load_documents(config.GUIDES_DIR, GUIDE_SUFFIXES)
    except OSError:
        logger.exception("Error reading guides from %s", config.GUIDES_DIR)
        return _error(500, "Error reading guides")
