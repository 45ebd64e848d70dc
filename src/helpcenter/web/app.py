"""FastAPI application exposing the help documents as JSON."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any, AsyncIterator, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from helpcenter.config import AppConfig
from helpcenter.index.indexer import DocumentIndex
from helpcenter.index.search import Searcher, highlight
from helpcenter.models import SearchResult
from helpcenter.rendering.markdown import parse
from helpcenter.utils.files import load_corpus

LOGGER = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 50


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    yield


app = FastAPI(title="HelpCenter API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class SearchPayload(BaseModel):
    query: str
    limit: int = AppConfig().search_limit


def configure(config: AppConfig) -> None:
    """Point the app at a content directory; the corpus is loaded on first use."""
    app.state.config = config
    app.state.index = None


def _load_index(config: AppConfig) -> DocumentIndex:
    content_dir = config.resolve_content_dir(Path.cwd())
    if not content_dir.is_dir():
        LOGGER.warning("Content directory %s not found, serving an empty index", content_dir)
        return DocumentIndex({})
    return DocumentIndex(load_corpus([content_dir], base_dir=content_dir, pattern=config.pattern))


def get_config() -> AppConfig:
    config = getattr(app.state, "config", None)
    if config is None:
        config = AppConfig()
        app.state.config = config
    return config


def get_index() -> DocumentIndex:
    index = getattr(app.state, "index", None)
    if index is None:
        index = _load_index(get_config())
        app.state.index = index
    return index


def _serialize_result(result: SearchResult, query: str) -> dict[str, Any]:
    return {
        "document": asdict(result.document),
        "score": result.score,
        "matches": [
            {**asdict(match), "highlighted": highlight(match.text, query)}
            for match in result.matches
        ],
    }


@app.get("/documents")
async def list_documents(index: DocumentIndex = Depends(get_index)) -> dict[str, Any]:
    """List all help documents in corpus order."""
    return {"documents": [asdict(document) for document in index.list_documents()]}


@app.get("/navigation")
async def navigation(
    index: DocumentIndex = Depends(get_index),
    config: AppConfig = Depends(get_config),
) -> dict[str, Any]:
    """Documents in sidebar order."""
    documents = index.ordered_documents(config.navigation_order)
    return {"documents": [asdict(document) for document in documents]}


@app.get("/documents/{doc_id}")
async def get_document(doc_id: str, index: DocumentIndex = Depends(get_index)) -> dict[str, Any]:
    """Render a single document."""
    document = index.get_document(doc_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document {doc_id} not found")

    content = index.get_content(document.path)
    parsed = parse(content)
    return {
        "document": asdict(document),
        "frontmatter": asdict(parsed.frontmatter),
        "html": parsed.html_content,
        "excerpt": parsed.excerpt,
        "headings": [asdict(heading) for heading in parsed.headings],
    }


@app.post("/search")
async def search_documents(
    payload: SearchPayload, index: DocumentIndex = Depends(get_index)
) -> dict[str, List[dict[str, Any]]]:
    limit = max(1, min(payload.limit, MAX_SEARCH_LIMIT))
    results = Searcher(index).search(payload.query)[:limit]
    return {"results": [_serialize_result(result, payload.query) for result in results]}
