"""
Retrieval — similarity index, context aggregation, and the context retriever.

The index is an exhaustive in-memory cosine scan over an immutable corpus,
so concurrent readers need no locking.

Public surface
--------------
- :class:`ContextRetriever` — question → at most two transcript references.
- :class:`SimilarityIndex` — k-NN over the loaded corpus.
- :func:`aggregate`, :func:`compress_ranges` — hit grouping and page ranges.
- :func:`cosine_similarity` — the scoring function.
- :class:`IndexUnavailableError`, :class:`CorpusLoadError` — typed failures.
"""

from oral_history_rag.retrieval.aggregator import aggregate, compress_ranges
from oral_history_rag.retrieval.errors import CorpusLoadError, IndexUnavailableError, RetrievalError
from oral_history_rag.retrieval.index import SimilarityIndex
from oral_history_rag.retrieval.models import AggregatedResult, IndexState, SearchHit
from oral_history_rag.retrieval.retriever import ContextRetriever
from oral_history_rag.retrieval.similarity import cosine_similarity

__all__ = [
    "AggregatedResult",
    "ContextRetriever",
    "CorpusLoadError",
    "IndexState",
    "IndexUnavailableError",
    "RetrievalError",
    "SearchHit",
    "SimilarityIndex",
    "aggregate",
    "compress_ranges",
    "cosine_similarity",
]
