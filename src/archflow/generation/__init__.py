"""Prompt construction, model calls and the output boundary."""
