"""Exception hierarchy for the retrieval core."""

from __future__ import annotations


class RetrievalError(Exception):
    """Base class for retrieval failures surfaced to callers."""


class IndexUnavailableError(RetrievalError):
    """Raised when the similarity index is not ready to serve queries."""

    def __init__(self, state: str, reason: str | None = None) -> None:
        self.state = state
        self.reason = reason
        message = f"Similarity index unavailable (state={state})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CorpusLoadError(RetrievalError):
    """Structural problem with a corpus artifact.

    Returned (not raised) by :func:`~oral_history_rag.retrieval.corpus.validate_corpus`
    so the index can record it and enter the ``FAILED`` state.
    """

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)
