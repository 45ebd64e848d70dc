"""Document index over an in-memory markdown corpus."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional
from urllib.parse import unquote

from helpcenter.models import DocumentMetadata
from helpcenter.utils.text import (
    basename,
    filename_stem,
    make_document_id,
    split_lines,
    strip_extension,
)

LOGGER = logging.getLogger(__name__)

TITLE_SCAN_LINES = 20

_TITLE_PREFIX_RE = re.compile(r"^#\s+")
_SEPARATOR_RE = re.compile(r"[_-]")


def extract_title(path: str, content: str) -> str:
    """Document title, falling back to the filename when there is no H1."""
    for line in split_lines(content)[:TITLE_SCAN_LINES]:
        stripped = line.strip()
        if stripped.startswith("# "):
            title = _TITLE_PREFIX_RE.sub("", stripped).strip()
            if title:
                return title
            break

    title = filename_stem(path)
    if title:
        return title
    return _SEPARATOR_RE.sub(" ", strip_extension(basename(path)))


def extract_metadata(path: str, content: str) -> Optional[DocumentMetadata]:
    title = extract_title(path, content)
    if not title:
        return None
    doc_id = make_document_id(filename_stem(path)) or path
    return DocumentMetadata(id=doc_id, title=title, path=path)


class DocumentIndex:
    """Read-only view of the corpus with metadata lookups.

    The corpus maps each path to its raw markdown and is fully loaded before
    the index is built. Metadata is derived again on every call.
    """

    def __init__(self, corpus: Mapping[str, str]) -> None:
        self._corpus = MappingProxyType(dict(corpus))

    def __len__(self) -> int:
        return len(self._corpus)

    @property
    def paths(self) -> List[str]:
        return list(self._corpus)

    def list_documents(self) -> List[DocumentMetadata]:
        """One entry per corpus document, in corpus order.

        Documents whose filenames derive the same id are disambiguated in
        corpus order: the first keeps the id, later ones get ``-2``, ``-3``...
        """
        documents: List[DocumentMetadata] = []
        used: set[str] = set()
        for path, content in self._corpus.items():
            metadata = extract_metadata(path, content)
            if metadata is None:
                continue
            if metadata.id in used:
                base_id = metadata.id
                suffix = 2
                while f"{base_id}-{suffix}" in used:
                    suffix += 1
                metadata.id = f"{base_id}-{suffix}"
                LOGGER.warning(
                    "Duplicate document id %r for %s, using %r", base_id, path, metadata.id
                )
            used.add(metadata.id)
            documents.append(metadata)
        return documents

    def get_document(self, doc_id: str) -> Optional[DocumentMetadata]:
        for document in self.list_documents():
            if document.id == doc_id:
                return document
        return None

    def ordered_documents(self, titles: Iterable[str]) -> List[DocumentMetadata]:
        """Documents in navigation order, given their filename titles.

        Titles that do not resolve to a document are skipped.
        """
        by_id = {document.id: document for document in self.list_documents()}
        ordered: List[DocumentMetadata] = []
        for title in titles:
            document = by_id.get(make_document_id(title))
            if document is not None:
                ordered.append(document)
        return ordered

    def get_content(self, path: str) -> str:
        """Raw markdown for ``path``, or ``""`` when nothing matches.

        Paths coming back from URLs may be re-encoded or truncated, so after an
        exact lookup the decoded forms are compared, then containment, then the
        trailing filename alone.
        """
        if not path:
            return ""
        if path in self._corpus:
            return self._corpus[path]

        decoded_path = unquote(path)
        filename = basename(path)
        stages: List[Callable[[str], bool]] = [
            lambda key: unquote(key) == decoded_path,
            lambda key: decoded_path in unquote(key) or unquote(key) in decoded_path,
        ]
        if filename:
            stages.append(lambda key: filename in key)

        for matches in stages:
            for key in self._corpus:
                if matches(key):
                    LOGGER.debug("Resolved %r to corpus key %r", path, key)
                    return self._corpus[key]

        LOGGER.debug("No content found for %r", path)
        return ""
