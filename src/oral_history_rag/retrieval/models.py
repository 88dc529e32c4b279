"""Domain models for retrieval results and the persisted corpus."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# A compressed page reference: a single page number or an inclusive "start-end" range.
PageRange = Union[int, str]


class IndexState(str, Enum):
    """Lifecycle of the in-memory similarity index."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ChunkMetadata(BaseModel):
    """Provenance of one stored chunk.

    Attributes
    ----------
    source:
        File name of the transcript the chunk came from.
    page:
        1-based page number within that transcript.
    tokens:
        Token count of the chunk text.
    document_id:
        Catalog id attached at ingestion time.  Artifacts written before
        the field existed leave it ``None``; the aggregator then falls back
        to parsing ``source``.
    """

    model_config = ConfigDict(extra="ignore")

    source: str = ""
    page: int | None = None
    tokens: int | None = None
    document_id: str | None = None


class CorpusArtifact(BaseModel):
    """The persisted JSON structure written by ingestion.

    The three containers are index-aligned: position *i* in each refers
    to the same chunk.
    """

    embeddings: list[list[float]] = Field(default_factory=list)
    texts: list[str] = Field(default_factory=list)
    metadata: list[ChunkMetadata] = Field(default_factory=list)


@dataclass(frozen=True)
class Corpus:
    """Validated, immutable runtime corpus.

    ``vectors[i]`` is ``None`` when the stored entry was not a numeric
    list; such entries never rank.
    """

    vectors: tuple[tuple[float, ...] | None, ...]
    texts: tuple[str, ...]
    metadata: tuple[ChunkMetadata, ...]
    dimension: int | None = None

    def __len__(self) -> int:
        return len(self.vectors)


class SearchHit(BaseModel):
    """A single stored chunk scored against a query vector."""

    text: str
    metadata: ChunkMetadata
    score: float


class CatalogEntry(BaseModel):
    """Display record for one transcript, read from the catalog CSV."""

    model_config = ConfigDict(extra="allow")

    document_id: str
    name: str = "Unknown"


class ChunkReference(BaseModel):
    """A chunk kept inside an aggregated result."""

    text: str
    page: int | None
    score: float


class AggregatedResult(BaseModel):
    """One transcript reference handed to the chat layer.

    Serialises with camelCase keys (``relevanceScore``) so the payload
    matches the context contract consumed by the prompt.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    pages: list[PageRange] = Field(default_factory=list)
    relevance_score: float = Field(alias="relevanceScore")
    text: str = ""
