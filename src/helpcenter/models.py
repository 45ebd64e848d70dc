"""Core HelpCenter data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class DocumentMetadata:
    """Identity of a help document within the corpus."""

    id: str
    title: str
    path: str


@dataclass(slots=True)
class SearchMatch:
    """One occurrence of the query inside a document."""

    line_number: int
    text: str
    context: str


@dataclass(slots=True)
class SearchResult:
    document: DocumentMetadata
    matches: List[SearchMatch]
    score: int


@dataclass(slots=True)
class Frontmatter:
    author: Optional[str] = None
    date: Optional[str] = None
    category: Optional[str] = None
    read_time_minutes: Optional[int] = None


@dataclass(slots=True)
class ParsedMarkdown:
    """Rendered document body plus the metadata found above it."""

    frontmatter: Frontmatter
    html_content: str
    excerpt: str
    headings: List[Heading] = field(default_factory=list)


@dataclass(slots=True)
class Heading:
    level: int
    text: str
    anchor: str

