"""Token-bounded paragraph chunking of transcript pages."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from functools import lru_cache

import tiktoken

from oral_history_rag.config import settings
from oral_history_rag.ingestion.models import Chunk, Document

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 500

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

TokenCounter = Callable[[str], int]


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        logger.warning("No tiktoken encoding registered for %r; using cl100k_base", model)
        return tiktoken.get_encoding("cl100k_base")


def get_token_counter(model: str | None = None) -> TokenCounter:
    """Return a token counter matching the tokenizer of the embedding *model*.

    Chunk sizes are only meaningful when they are counted with the same
    tokenizer the embedding provider applies.
    """
    encoding = _encoding_for(model or settings.embedding_model)
    return lambda text: len(encoding.encode(text))


def split_paragraphs(text: str) -> list[str]:
    """Split *text* on blank lines, dropping paragraphs that are empty once trimmed."""
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def chunk_document(
    document: Document,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    *,
    count_tokens: TokenCounter | None = None,
) -> list[Chunk]:
    """Split every page of *document* into chunks of at most *max_tokens*.

    Paragraphs are packed greedily into a per-page buffer.  A chunk never
    spans two pages.  A paragraph that is larger than *max_tokens* on its
    own is emitted whole rather than split mid-paragraph.

    Parameters
    ----------
    document:
        Source transcript; it is not modified.
    max_tokens:
        Soft cap on tokens per chunk.
    count_tokens:
        Token counter; defaults to the embedding model's tokenizer.

    Returns
    -------
    list[Chunk]
        Chunks in page order, each tagged with source, document id and page.
    """
    count = count_tokens or get_token_counter()
    chunks: list[Chunk] = []

    def flush(text: str, page: int) -> None:
        chunks.append(
            Chunk(
                text=text,
                source=document.title,
                page=page,
                tokens=count(text),
                document_id=document.document_id,
            )
        )

    for page_number, page_text in enumerate(document.pages, 1):
        buffer = ""
        for paragraph in split_paragraphs(page_text):
            candidate = f"{buffer}\n{paragraph}" if buffer else paragraph
            if count(candidate) > max_tokens and buffer:
                flush(buffer, page_number)
                buffer = paragraph
            else:
                buffer = candidate
        if buffer:
            flush(buffer, page_number)

    return chunks


def chunk_documents(
    documents: Iterable[Document],
    max_tokens: int = DEFAULT_MAX_TOKENS,
    *,
    count_tokens: TokenCounter | None = None,
) -> list[Chunk]:
    """Chunk every document in *documents*, preserving document order."""
    count = count_tokens or get_token_counter()
    chunks: list[Chunk] = []
    for document in documents:
        chunks.extend(chunk_document(document, max_tokens, count_tokens=count))
    return chunks
