"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest
from langchain_core.embeddings import Embeddings


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


def word_count(text: str) -> int:
    """Whitespace token counter used in place of the model tokenizer."""
    return len(text.split())


class KeywordEmbeddings(Embeddings):
    """Deterministic bag-of-keywords embeddings over a fixed vocabulary.

    Texts containing a keyword in ``fail_on`` raise, to exercise
    per-item failure handling.
    """

    VOCABULARY = ("march", "union", "family", "school", "church", "war")

    def __init__(self, fail_on: tuple[str, ...] = ()) -> None:
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        self.calls.append(text)
        lowered = text.lower()
        if any(word in lowered for word in self.fail_on):
            raise RuntimeError(f"provider rejected {text!r}")
        vector = [float(lowered.count(word)) for word in self.VOCABULARY]
        if not any(vector):
            vector = [0.01] * len(self.VOCABULARY)
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text)


@pytest.fixture()
def keyword_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def failing_embeddings() -> KeywordEmbeddings:
    """Embeddings that fail for any text mentioning "war"."""
    return KeywordEmbeddings(fail_on=("war",))


@pytest.fixture()
def count_tokens():
    return word_count
