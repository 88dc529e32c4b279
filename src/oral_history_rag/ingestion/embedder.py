"""Batched, throttled embedding of chunks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from oral_history_rag.config import settings
from oral_history_rag.ingestion.models import Chunk, EmbeddingRecord

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def get_embedding_function() -> Embeddings:
    """Return the configured OpenAI embedding client."""
    from langchain_openai import OpenAIEmbeddings

    return OpenAIEmbeddings(model=settings.embedding_model, api_key=settings.openai_api_key)


class EmbeddingGenerator:
    """Embed chunks in sequential batches with concurrent requests inside each batch.

    Parameters
    ----------
    embeddings:
        LangChain embedding provider.  When *None*, the OpenAI client from
        :func:`get_embedding_function` is created.
    batch_size:
        Number of concurrent requests per batch.
    batch_pause:
        Seconds to sleep between batches (fixed-window throttle).
    """

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        *,
        batch_size: int = settings.embed_batch_size,
        batch_pause: float = settings.embed_batch_pause,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._embeddings = embeddings if embeddings is not None else get_embedding_function()
        self.batch_size = batch_size
        self.batch_pause = batch_pause

    def embed(self, chunks: Sequence[Chunk]) -> list[EmbeddingRecord]:
        """Blocking wrapper around :meth:`aembed`."""
        return asyncio.run(self.aembed(chunks))

    async def aembed(self, chunks: Sequence[Chunk]) -> list[EmbeddingRecord]:
        """Embed *chunks*, dropping any chunk whose request fails.

        Output order follows input order, minus the dropped chunks.
        """
        records: list[EmbeddingRecord] = []
        total_batches = -(-len(chunks) // self.batch_size)

        for batch_number, start in enumerate(range(0, len(chunks), self.batch_size), 1):
            batch = chunks[start : start + self.batch_size]
            logger.info("Processing batch %d of %d", batch_number, total_batches)

            results = await asyncio.gather(
                *(self._embeddings.aembed_query(chunk.text) for chunk in batch),
                return_exceptions=True,
            )
            for chunk, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.error(
                        "Error generating embedding for chunk (%s p.%d): %s",
                        chunk.source,
                        chunk.page,
                        result,
                    )
                    continue
                if isinstance(result, BaseException):
                    raise result
                records.append(EmbeddingRecord(embedding=list(result), chunk=chunk))

            if start + self.batch_size < len(chunks) and self.batch_pause > 0:
                await asyncio.sleep(self.batch_pause)

        dropped = len(chunks) - len(records)
        if dropped:
            logger.warning("Dropped %d of %d chunks after embedding failures", dropped, len(chunks))
        return records
