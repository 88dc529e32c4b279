"""Domain models for ingestion — documents, chunks, and embedding records."""

from __future__ import annotations

from pydantic import BaseModel, Field

from oral_history_rag.retrieval.models import ChunkMetadata


class Document(BaseModel):
    """A source transcript split into page texts.

    Attributes
    ----------
    title:
        File name of the transcript (e.g. ``"document3.pdf"``).
    document_id:
        Catalog id attached at ingestion time (1-based, as a string).
    pages:
        Page texts in reading order; ``pages[0]`` is page 1.
    """

    title: str
    document_id: str | None = None
    pages: list[str] = Field(default_factory=list)


class Chunk(BaseModel):
    """A token-bounded span of a single page."""

    text: str
    source: str
    page: int = Field(ge=1)
    tokens: int = Field(ge=0)
    document_id: str | None = None

    def to_metadata(self) -> ChunkMetadata:
        return ChunkMetadata(
            source=self.source,
            page=self.page,
            tokens=self.tokens,
            document_id=self.document_id,
        )


class EmbeddingRecord(BaseModel):
    """An embedding vector paired with the chunk it represents."""

    embedding: list[float]
    chunk: Chunk
