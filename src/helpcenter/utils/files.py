"""Utility helpers for loading the markdown corpus from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator

LOGGER = logging.getLogger(__name__)


def iter_markdown_paths(inputs: Iterable[Path], pattern: str = "*.md") -> Iterator[Path]:
    """Yield markdown paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_markdown_paths(sorted(item.rglob(pattern)), pattern)
        elif item.is_file() and item.match(pattern):
            yield item


def load_corpus(
    inputs: Iterable[Path], *, base_dir: Path | None = None, pattern: str = "*.md"
) -> Dict[str, str]:
    """Read every markdown file eagerly into a ``path -> text`` mapping.

    Keys are POSIX paths, relative to ``base_dir`` when the file lives under
    it. Files that cannot be read are logged and skipped.
    """
    corpus: Dict[str, str] = {}
    for path in iter_markdown_paths(inputs, pattern):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.error("Failed to read %s: %s", path, exc)
            continue
        corpus[_corpus_key(path, base_dir)] = text

    LOGGER.info("Loaded %d markdown documents", len(corpus))
    return corpus


def _corpus_key(path: Path, base_dir: Path | None) -> str:
    if base_dir is not None and path.is_relative_to(base_dir):
        return path.relative_to(base_dir).as_posix()
    return path.as_posix()
