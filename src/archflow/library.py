"""Markdown rule and guide documents served alongside the generators."""

from __future__ import annotations

from pathlib import Path

RULE_SUFFIXES = (".md", ".mdc")
GUIDE_SUFFIXES = (".md",)


def load_documents(
    directory: Path,
    suffixes: tuple[str, ...] = (".md",),
    recursive: bool = False,
) -> list[dict[str, str]]:
    """Read every matching file under ``directory``.

    Returns:
        ``[{"fileName": ..., "content": ...}]`` sorted by path.

    Raises:
        FileNotFoundError: ``directory`` does not exist.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"No such directory: {directory}")

    candidates = directory.rglob("*") if recursive else directory.iterdir()
    paths = sorted(p for p in candidates if p.is_file() and p.suffix.lower() in suffixes)
    return [
        {"fileName": p.name, "content": p.read_text(encoding="utf-8", errors="replace")}
        for p in paths
    ]
