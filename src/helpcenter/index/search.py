"""Free-text search over the help documents."""

from __future__ import annotations

import logging
from html import escape
from typing import List

from helpcenter.index.indexer import DocumentIndex
from helpcenter.models import DocumentMetadata, SearchMatch, SearchResult
from helpcenter.utils.text import fold_case, lower_text, split_lines

LOGGER = logging.getLogger(__name__)

MAX_MATCHES_PER_DOCUMENT = 5
CONTEXT_LINES = 1
CONTEXT_SEPARATOR = " | "
TITLE_BONUS = 10
HEADING_BONUS = 5
POSITION_BONUS = 10


def highlight(text: str, query: str) -> str:
    """HTML-escape ``text`` and wrap each occurrence of ``query`` in ``<mark>``.

    The query is matched literally, with the same lowercasing
    :class:`Searcher` uses, so every reported match is marked.
    """
    term = lower_text(query.strip())
    if not term:
        return escape(text)

    folded, origins = fold_case(text)
    parts: List[str] = []
    cursor = 0
    position = folded.find(term)
    while position != -1:
        start = origins[position]
        end = origins[position + len(term) - 1] + 1
        if start >= cursor:
            parts.append(escape(text[cursor:start]))
            parts.append(f"<mark>{escape(text[start:end])}</mark>")
            cursor = end
        position = folded.find(term, position + len(term))
    parts.append(escape(text[cursor:]))
    return "".join(parts)


def score_matches(document: DocumentMetadata, term: str, matches: List[SearchMatch]) -> int:
    """Heuristic relevance: more hits, title and heading hits, early hits."""
    score = len(matches)
    if term in lower_text(document.title):
        score += TITLE_BONUS
    score += HEADING_BONUS * sum(1 for match in matches if match.text.startswith("#"))
    average_line = sum(match.line_number for match in matches) / len(matches)
    score += max(0, POSITION_BONUS - int(average_line // 10))
    return score


class Searcher:
    """Substring search across every document in a :class:`DocumentIndex`.

    Each call rescans the whole corpus, which is fine for a help center of a
    few dozen pages.
    """

    def __init__(self, index: DocumentIndex) -> None:
        self.index = index

    def search(self, query: str) -> List[SearchResult]:
        if not query or not query.strip():
            return []

        term = lower_text(query.strip())
        results: List[SearchResult] = []
        for document in self.index.list_documents():
            content = self.index.get_content(document.path)
            if not content:
                LOGGER.debug("Skipping %s: no content", document.path)
                continue

            matches = self._find_matches(split_lines(content), term)
            if not matches:
                continue
            results.append(
                SearchResult(
                    document=document,
                    matches=matches,
                    score=score_matches(document, term, matches),
                )
            )

        results.sort(key=lambda result: result.score, reverse=True)
        return results

    def _find_matches(self, lines: List[str], term: str) -> List[SearchMatch]:
        matches: List[SearchMatch] = []
        for index, line in enumerate(lines):
            lowered = lower_text(line)
            cursor = lowered.find(term)
            while cursor != -1:
                matches.append(
                    SearchMatch(
                        line_number=index + 1,
                        text=line.strip(),
                        context=_context(lines, index),
                    )
                )
                if len(matches) == MAX_MATCHES_PER_DOCUMENT:
                    return matches
                cursor = lowered.find(term, cursor + len(term))
        return matches


def _context(lines: List[str], index: int) -> str:
    start = max(0, index - CONTEXT_LINES)
    end = min(len(lines) - 1, index + CONTEXT_LINES)
    return CONTEXT_SEPARATOR.join(
        lines[position].strip() for position in range(start, end + 1) if position != index
    )
