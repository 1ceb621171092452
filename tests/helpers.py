"""Shared test helpers: mock Gemini responses and mock providers."""

import json
from unittest.mock import MagicMock

TWO_SERVICE_GRAPH = {
    "nodes": [
        {"id": "1", "label": "API", "kind": "service"},
        {"id": "2", "label": "DB", "kind": "db"},
    ],
    "edges": [{"id": "e1", "source": "1", "target": "2"}],
}


def _make_text_response(text):
    """Create a mock Gemini response with text content."""
    part = MagicMock()
    part.text = text
    part.function_call = None

    content = MagicMock()
    content.role = "model"
    content.parts = [part]

    candidate = MagicMock()
    candidate.content = content

    response = MagicMock()
    response.candidates = [candidate]
    response.function_calls = None
    response.text = text
    return response


def make_provider(*outputs):
    """Mock GenerationProvider returning each output in turn.

    Dicts and lists are JSON-encoded; strings are returned verbatim.
    """
    provider = MagicMock()
    encoded = [o if isinstance(o, str) else json.dumps(o) for o in outputs]
    if len(encoded) == 1:
        provider.generate = MagicMock(return_value=encoded[0])
    else:
        provider.generate = MagicMock(side_effect=encoded)
    return provider


def sent_prompt(provider, call=-1):
    """(user, system, json_output) for one recorded generate call."""
    args, kwargs = provider.generate.call_args_list[call]
    return args[0], kwargs.get("system"), kwargs.get("json_output", False)
