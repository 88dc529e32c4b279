"""Unit tests for the batched embedding generator."""

from __future__ import annotations

import asyncio

import pytest
from langchain_core.embeddings import Embeddings

from oral_history_rag.ingestion.embedder import EmbeddingGenerator
from oral_history_rag.ingestion.models import Chunk


def _chunks(*texts: str) -> list[Chunk]:
    return [
        Chunk(text=text, source="document1.pdf", page=i, tokens=len(text.split()), document_id="1")
        for i, text in enumerate(texts, 1)
    ]


class _InFlightEmbeddings(Embeddings):
    """Async fake that records how many requests overlap."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.peaks: list[int] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[1.0, 0.0] for _ in texts]

    def embed_query(self, text: str) -> list[float]:
        return [1.0, 0.0]

    async def aembed_query(self, text: str) -> list[float]:
        self.in_flight += 1
        await asyncio.sleep(0)
        self.peaks.append(self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return [1.0, 0.0]


def test_embed_pairs_vectors_with_chunks(keyword_embeddings) -> None:
    chunks = _chunks("the march began", "a union meeting", "family dinner")
    records = EmbeddingGenerator(keyword_embeddings, batch_size=2, batch_pause=0).embed(chunks)

    assert [r.chunk for r in records] == chunks
    assert records[0].embedding == keyword_embeddings.embed_query("the march began")


def test_failed_chunks_are_dropped_and_order_kept(failing_embeddings, caplog) -> None:
    chunks = _chunks("march one", "the war years", "union two", "war again", "school three")
    with caplog.at_level("ERROR"):
        records = EmbeddingGenerator(failing_embeddings, batch_size=2, batch_pause=0).embed(chunks)

    assert [r.chunk.text for r in records] == ["march one", "union two", "school three"]
    assert "Error generating embedding" in caplog.text


def test_empty_input_makes_no_requests(keyword_embeddings) -> None:
    assert EmbeddingGenerator(keyword_embeddings, batch_pause=0).embed([]) == []
    assert keyword_embeddings.calls == []


def test_requests_within_a_batch_run_concurrently() -> None:
    fake = _InFlightEmbeddings()
    EmbeddingGenerator(fake, batch_size=4, batch_pause=0).embed(_chunks(*[f"t{i}" for i in range(8)]))

    assert max(fake.peaks) == 4  # one batch at a time, all of it in flight


def test_pause_only_between_batches(keyword_embeddings, monkeypatch) -> None:
    pauses: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        pauses.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    chunks = _chunks(*[f"march {i}" for i in range(5)])
    EmbeddingGenerator(keyword_embeddings, batch_size=2, batch_pause=1.5).embed(chunks)

    # 3 batches → 2 pauses, none after the last batch
    assert pauses == [1.5, 1.5]


def test_rejects_non_positive_batch_size(keyword_embeddings) -> None:
    with pytest.raises(ValueError, match="batch_size"):
        EmbeddingGenerator(keyword_embeddings, batch_size=0)


class _CancellingEmbeddings(Embeddings):
    """Async fake whose request for one text is cancelled."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[1.0, 0.0] for _ in texts]

    def embed_query(self, text: str) -> list[float]:
        return [1.0, 0.0]

    async def aembed_query(self, text: str) -> list[float]:
        if text == "cancelled":
            raise asyncio.CancelledError()
        return [1.0, 0.0]


def test_cancellation_stops_the_run(caplog) -> None:
    chunks = _chunks("march one", "cancelled", "union two")
    with caplog.at_level("ERROR"), pytest.raises(asyncio.CancelledError):
        EmbeddingGenerator(_CancellingEmbeddings(), batch_size=3, batch_pause=0).embed(chunks)

    assert "Error generating embedding" not in caplog.text
