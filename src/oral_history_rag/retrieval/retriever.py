"""Context retriever — question in, ranked transcript references out.

This module is the **primary public interface** for retrieval.  It owns
the similarity index, the catalog and the query embedder, and is the only
thing the chat and serving layers talk to.

Usage::

    from oral_history_rag.retrieval.retriever import ContextRetriever

    retriever = ContextRetriever.from_settings()
    for result in retriever.find_relevant_context("Who organised the march?"):
        print(result.id, result.name, result.pages)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from oral_history_rag.config import settings
from oral_history_rag.retrieval.aggregator import aggregate
from oral_history_rag.retrieval.catalog import Catalog, load_catalog
from oral_history_rag.retrieval.errors import IndexUnavailableError
from oral_history_rag.retrieval.index import SimilarityIndex
from oral_history_rag.retrieval.models import AggregatedResult, IndexState

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class ContextRetriever:
    """Stateless-per-question retrieval over an immutable index.

    Parameters
    ----------
    embeddings:
        Provider that turns a question into a vector.  Must be the same
        model the corpus was embedded with.
    index:
        A loaded :class:`SimilarityIndex`.
    catalog:
        Display records keyed by document id.
    k:
        Number of raw hits pulled from the index per question.
    max_documents / max_chunks:
        Aggregation limits.
    corpus_path / catalog_path:
        Where :meth:`reload` reads the artifacts from.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        index: SimilarityIndex,
        catalog: Catalog | None = None,
        *,
        k: int = settings.retrieval_k,
        max_documents: int = settings.max_documents,
        max_chunks: int = settings.max_chunks_per_document,
        corpus_path: str | Path | None = None,
        catalog_path: str | Path | None = None,
    ) -> None:
        self._embeddings = embeddings
        self._index = index
        self._catalog: Catalog = catalog or {}
        self.k = k
        self.max_documents = max_documents
        self.max_chunks = max_chunks
        self.corpus_path = corpus_path
        self.catalog_path = catalog_path

    @classmethod
    def from_paths(
        cls,
        corpus_path: str | Path,
        catalog_path: str | Path,
        embeddings: Embeddings,
        **kwargs: Any,
    ) -> ContextRetriever:
        """Load the corpus and catalog from disk.

        A failed corpus load still returns a retriever; its index is
        ``FAILED`` and every question raises ``IndexUnavailableError``.
        """
        index = SimilarityIndex()
        index.load(corpus_path)
        catalog = load_catalog(catalog_path)
        return cls(
            embeddings,
            index,
            catalog,
            corpus_path=corpus_path,
            catalog_path=catalog_path,
            **kwargs,
        )

    @classmethod
    def from_settings(cls, embeddings: Embeddings | None = None) -> ContextRetriever:
        """Build a retriever from the global settings."""
        if embeddings is None:
            from oral_history_rag.ingestion.embedder import get_embedding_function

            embeddings = get_embedding_function()
        return cls.from_paths(settings.corpus_path, settings.catalog_path, embeddings)

    # -- public API -----------------------------------------------------------

    @property
    def index(self) -> SimilarityIndex:
        return self._index

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def find_relevant_context(self, question: str, *, source_filter: str | None = None) -> list[AggregatedResult]:
        """Return at most two transcript references for *question*.

        Raises
        ------
        IndexUnavailableError
            If the index did not load; an unavailable index is never
            reported as "no results".
        """
        index = self._index
        if not index.is_ready:
            # Fail before spending an embedding call.
            raise IndexUnavailableError(index.state.value, str(index.error) if index.error else None)

        vector = self._embeddings.embed_query(question)
        hits = index.query(vector, k=self.k, source_filter=source_filter)
        if not hits:
            return []

        results = aggregate(
            hits,
            self._catalog,
            max_documents=self.max_documents,
            max_chunks=self.max_chunks,
        )
        logger.info(
            "Question matched %d hits across %d transcripts: %s",
            len(hits),
            len(results),
            [r.id for r in results],
        )
        return results

    def health(self) -> dict[str, Any]:
        """Readiness summary for the hosting service."""
        index = self._index
        report: dict[str, Any] = {
            "status": index.state.value,
            "embeddings": len(index),
            "dimension": index.dimension,
            "catalog_records": len(self._catalog),
        }
        if index.error is not None:
            report["error"] = str(index.error)
        return report

    def reload(self) -> IndexState:
        """Re-read corpus and catalog; swap them in only when the new index is ready.

        Returns the state of the freshly built index.  On failure the
        current index keeps serving.
        """
        if self.corpus_path is None:
            raise RuntimeError("reload() needs a corpus_path")

        fresh = SimilarityIndex()
        state = fresh.load(self.corpus_path)
        if state is not IndexState.READY:
            logger.error("Reload failed; keeping the current index (state=%s)", self._index.state.value)
            return state

        catalog = load_catalog(self.catalog_path) if self.catalog_path is not None else self._catalog
        self._index, self._catalog = fresh, catalog
        logger.info("Reloaded corpus with %d embeddings", len(fresh))
        return state
