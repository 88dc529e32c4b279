"""In-memory similarity index with an exhaustive cosine scan.

Every query scores the question vector against every stored vector.  This
is deliberate at the intended scale (low thousands of chunks); past that an
approximate nearest-neighbour structure would be needed.

State machine::

    UNINITIALIZED ──load()──▶ LOADING ──▶ READY    (serves queries)
                                     └──▶ FAILED   (queries raise)

There is no transition back to ``LOADING``; to reload, build a new index.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from oral_history_rag.retrieval.corpus import load_corpus_file, validate_corpus
from oral_history_rag.retrieval.errors import CorpusLoadError, IndexUnavailableError
from oral_history_rag.retrieval.models import Corpus, IndexState, SearchHit
from oral_history_rag.retrieval.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class SimilarityIndex:
    """Holds the corpus vectors and aligned metadata; answers k-NN queries."""

    def __init__(self) -> None:
        self._state = IndexState.UNINITIALIZED
        self._corpus: Corpus | None = None
        self._error: CorpusLoadError | None = None

    # -- lifecycle ------------------------------------------------------------

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def error(self) -> CorpusLoadError | None:
        """The load error when :attr:`state` is ``FAILED``."""
        return self._error

    @property
    def is_ready(self) -> bool:
        return self._state is IndexState.READY

    def __len__(self) -> int:
        return len(self._corpus) if self._corpus is not None else 0

    @property
    def dimension(self) -> int | None:
        return self._corpus.dimension if self._corpus is not None else None

    def load(self, artifact: Corpus | CorpusLoadError | dict[str, Any] | str | Path) -> IndexState:
        """Load a corpus and move to ``READY`` or ``FAILED``.

        Parameters
        ----------
        artifact:
            A path to the JSON artifact, an already decoded artifact dict,
            or the result of :func:`validate_corpus`.

        Returns
        -------
        IndexState
            ``READY`` on success, ``FAILED`` otherwise (see :attr:`error`).
        """
        if self._state is not IndexState.UNINITIALIZED:
            raise RuntimeError(f"Index already loaded (state={self._state.value}); build a new index to reload")

        self._state = IndexState.LOADING
        if isinstance(artifact, (str, Path)):
            result = load_corpus_file(artifact)
        elif isinstance(artifact, dict):
            result = validate_corpus(artifact)
        else:
            result = artifact

        if isinstance(result, CorpusLoadError):
            self._error = result
            self._state = IndexState.FAILED
            logger.error("Failed to load corpus: %s", result)
            return self._state

        self._corpus = result
        self._state = IndexState.READY
        logger.info("Loaded %d embeddings (dim=%s)", len(result), result.dimension)
        return self._state

    # -- queries --------------------------------------------------------------

    def query(
        self,
        vector: Sequence[float],
        k: int = 5,
        source_filter: str | None = None,
    ) -> list[SearchHit]:
        """Return up to *k* stored chunks most similar to *vector*.

        Stored vectors whose dimensionality differs from *vector* are
        logged and skipped.  With *source_filter*, only chunks whose
        ``metadata.source`` equals it are ranked.  Ties keep corpus order.

        Raises
        ------
        IndexUnavailableError
            If the index is not ``READY``.
        """
        if self._state is not IndexState.READY or self._corpus is None:
            raise IndexUnavailableError(self._state.value, str(self._error) if self._error else None)
        if k <= 0 or not vector:
            return []

        corpus = self._corpus
        scored: list[tuple[float, int]] = []
        for idx, stored in enumerate(corpus.vectors):
            if stored is None:
                continue
            if len(stored) != len(vector):
                logger.error("Invalid embedding at index %d (dimension mismatch); skipping", idx)
                continue
            if source_filter is not None and corpus.metadata[idx].source != source_filter:
                continue
            scored.append((cosine_similarity(vector, stored), idx))

        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            SearchHit(text=corpus.texts[idx], metadata=corpus.metadata[idx], score=score)
            for score, idx in scored[:k]
        ]
