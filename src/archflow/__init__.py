"""Prose-to-architecture graphs with model-driven refinement."""

__version__ = "0.1.0"
