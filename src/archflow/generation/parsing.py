"""The trust boundary between model text and typed data.

Lenient mode (the default) decodes JSON and hands it back untouched, with
``{}`` standing in for anything that does not decode. Strict mode also
checks the decoded value against the task's schema and reports failures
instead of passing them on.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")
_FIRST_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class ParseResult:
    value: Any
    error: str | None = None
    details: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def decode_json(text: str | None) -> tuple[Any, str | None]:
    """Decode model output as JSON.

    Tries the text as-is, then with markdown fences stripped, then the
    first ``{...}`` block. ``NaN`` and ``Infinity`` are rejected, as is
    nesting too deep to decode. Returns ``(value, None)`` or
    ``({}, reason)``.
    """
    if not text or not isinstance(text, str) or not text.strip():
        return {}, "empty model output"

    try:
        return _loads(text), None
    except (ValueError, RecursionError):
        pass

    stripped = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip()))
    try:
        return _loads(stripped), None
    except (ValueError, RecursionError):
        pass

    match = _FIRST_OBJECT.search(text)
    if match:
        try:
            return _loads(match.group(0)), None
        except (ValueError, RecursionError):
            pass

    return {}, "model output is not valid JSON"


def parse_and_validate(
    text: str | None,
    schema: type[BaseModel] | None = None,
    strict: bool = False,
) -> ParseResult:
    """Decode model output and, in strict mode, check it against ``schema``.

    Never raises. On a decode failure the value is ``{}``; on a schema
    failure the decoded value is kept alongside the error.
    """
    value, error = decode_json(text)
    if error:
        logger.warning("Unparseable model output (%d chars): %s", len(text or ""), error)
        return ParseResult(value={}, error=error)

    if strict and schema is not None:
        try:
            schema.model_validate(value)
        except ValidationError as e:
            details = [
                {"path": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors(include_url=False)
            ]
            logger.warning("Model output failed %s schema: %d error(s)", schema.__name__, len(details))
            return ParseResult(value=value, error=f"output does not match {schema.__name__}", details=details)

    return ParseResult(value=value)
