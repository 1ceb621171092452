"""Exception types shared across the graph, generation and API layers."""

from __future__ import annotations

from typing import Any


class ArchflowError(Exception):
    """Base class for all archflow errors."""


class InvalidGraphError(ArchflowError):
    """A caller-supplied graph failed validation. Never sent to the model."""

    def __init__(self, details: dict[str, Any]) -> None:
        super().__init__("Invalid graph payload")
        self.details = details


class ModelCallError(ArchflowError):
    """The model service call itself failed (timeout, auth, rate limit, ...)."""

    def __init__(self, message: str, task: str = "") -> None:
        super().__init__(message)
        self.task = task


class GenerationFailed(ArchflowError):
    """Model output could not be parsed or did not match the task schema (strict mode)."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


class LayoutError(ArchflowError):
    """The layout algorithm failed on a structurally valid graph."""


class RefinementError(ArchflowError):
    """A refinement round trip produced something that is not a usable graph."""
