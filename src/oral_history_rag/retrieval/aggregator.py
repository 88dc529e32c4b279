"""Group raw hits by transcript and compress their pages into ranges."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from oral_history_rag.config import settings
from oral_history_rag.retrieval.models import (
    AggregatedResult,
    CatalogEntry,
    ChunkReference,
    PageRange,
    SearchHit,
)

UNKNOWN_NAME = "Unknown"


def compress_ranges(pages: Iterable[int]) -> list[PageRange]:
    """Collapse sorted page numbers into minimal contiguous ranges.

    >>> compress_ranges([3, 4, 5, 7, 10, 11])
    ['3-5', 7, '10-11']
    """
    ordered = sorted(set(pages))
    if not ordered:
        return []

    ranges: list[PageRange] = []
    start = prev = ordered[0]
    for page in ordered[1:] + [None]:
        if page is not None and page == prev + 1:
            prev = page
            continue
        ranges.append(start if start == prev else f"{start}-{prev}")
        if page is not None:
            start = prev = page
    return ranges


def document_id_for_hit(hit: SearchHit, pattern: str | None = None) -> str | None:
    """Return the catalog id for *hit*, or ``None`` when it cannot be resolved.

    Uses the id attached at ingestion; older artifacts without it fall
    back to the number embedded in the source file name.
    """
    if hit.metadata.document_id:
        return hit.metadata.document_id
    if not hit.metadata.source:
        return None
    match = re.search(pattern or settings.document_id_pattern, hit.metadata.source)
    if match is None or not match.groups():
        return None
    return str(int(match.group(1)))


def aggregate(
    hits: Iterable[SearchHit],
    catalog: Mapping[str, CatalogEntry],
    *,
    max_documents: int = 2,
    max_chunks: int = 3,
    id_pattern: str | None = None,
) -> list[AggregatedResult]:
    """Rank transcripts by their best hit and summarise each one.

    Parameters
    ----------
    hits:
        Raw similarity hits, any order.
    catalog:
        Display records keyed by document id.
    max_documents:
        Number of transcripts to keep.
    max_chunks:
        Number of chunks kept per transcript.
    id_pattern:
        Fallback regex for artifacts without an attached document id.

    Returns
    -------
    list[AggregatedResult]
        At most *max_documents* results, best first.
    """
    groups: dict[str, list[ChunkReference]] = {}
    best: dict[str, float] = {}

    for hit in hits:
        document_id = document_id_for_hit(hit, id_pattern)
        if document_id is None:
            continue
        groups.setdefault(document_id, []).append(
            ChunkReference(text=hit.text, page=hit.metadata.page, score=hit.score)
        )
        best[document_id] = max(best.get(document_id, hit.score), hit.score)

    ranked = sorted(groups, key=lambda doc_id: best[doc_id], reverse=True)[:max_documents]

    results: list[AggregatedResult] = []
    for document_id in ranked:
        top_chunks = sorted(groups[document_id], key=lambda c: c.score, reverse=True)[:max_chunks]
        pages = compress_ranges(c.page for c in top_chunks if c.page is not None)
        entry = catalog.get(document_id)
        results.append(
            AggregatedResult(
                id=document_id,
                name=entry.name if entry is not None else UNKNOWN_NAME,
                pages=pages,
                relevance_score=best[document_id],
                text="\n\n".join(c.text for c in top_chunks),
            )
        )
    return results
