"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# API keys
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

# Models
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

# Generation boundary: when set, model output must parse and match the task schema
STRICT_OUTPUT: bool = _flag("ARCHFLOW_STRICT_OUTPUT")

# Graph-suggest input: when set, reject dangling edges and duplicate ids
STRICT_GRAPH: bool = _flag("ARCHFLOW_STRICT_GRAPH")

# Layout
LAYOUT_MAX_NODES: int = int(os.getenv("ARCHFLOW_LAYOUT_MAX_NODES", "500"))

# Prompt libraries
RULES_DIR: Path = Path(os.getenv("RULES_DIR", "./.cursor/rules"))
GUIDES_DIR: Path = Path(os.getenv("GUIDES_DIR", "./.cursor/cookbook"))
