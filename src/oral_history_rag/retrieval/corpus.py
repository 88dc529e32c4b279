"""Corpus artifact — build, persist, and schema-check the JSON written by ingestion.

Artifact layout::

    {
      "embeddings": [[0.012, -0.034, ...], ...],
      "texts":      ["chunk text", ...],
      "metadata":   [{"source": "document3.pdf", "page": 4,
                      "tokens": 312, "document_id": "3"}, ...]
    }
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from oral_history_rag.retrieval.errors import CorpusLoadError
from oral_history_rag.retrieval.models import ChunkMetadata, Corpus, CorpusArtifact

if TYPE_CHECKING:
    from oral_history_rag.ingestion.models import EmbeddingRecord

logger = logging.getLogger(__name__)


def build_artifact(records: Iterable[EmbeddingRecord]) -> CorpusArtifact:
    """Lay embedding records out as the three index-aligned containers."""
    artifact = CorpusArtifact()
    for record in records:
        artifact.embeddings.append(record.embedding)
        artifact.texts.append(record.chunk.text)
        artifact.metadata.append(record.chunk.to_metadata())
    return artifact


def save_corpus(artifact: CorpusArtifact, path: str | Path) -> Path:
    """Write *artifact* to *path* as indented JSON and return the path."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(artifact.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Saved %d embeddings to %s", len(artifact.embeddings), out_path)
    return out_path


def _as_vector(value: Any) -> tuple[float, ...] | None:
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in value):
        return None
    if not all(math.isfinite(x) for x in value):
        return None
    return tuple(float(x) for x in value)


def _as_metadata(value: Any, idx: int) -> ChunkMetadata:
    if not isinstance(value, dict):
        logger.warning("Metadata entry %d is not an object; using empty metadata", idx)
        return ChunkMetadata()
    try:
        return ChunkMetadata.model_validate(value)
    except ValidationError as exc:
        logger.warning("Metadata entry %d is malformed (%s); using empty metadata", idx, exc.error_count())
        return ChunkMetadata()


def validate_corpus(raw: Any) -> Corpus | CorpusLoadError:
    """Schema-check a decoded artifact.

    Returns a :class:`Corpus` or a :class:`CorpusLoadError` describing why
    the artifact cannot be served.  A missing or non-list ``embeddings``
    container is fatal.  Missing ``texts`` / ``metadata`` default to empty
    and are padded to the embedding count so the three containers stay
    aligned.  Individual non-numeric vectors are kept as ``None`` and never
    rank.
    """
    if not isinstance(raw, dict):
        return CorpusLoadError("invalid artifact", f"expected an object, got {type(raw).__name__}")

    embeddings = raw.get("embeddings")
    if embeddings is None:
        return CorpusLoadError("invalid embeddings data structure", "'embeddings' is missing")
    if not isinstance(embeddings, list):
        return CorpusLoadError(
            "invalid embeddings data structure",
            f"'embeddings' must be a list, got {type(embeddings).__name__}",
        )

    texts = raw.get("texts")
    metadata = raw.get("metadata")
    if texts is None:
        logger.warning("Corpus has no 'texts'; hits will carry empty text")
        texts = []
    if metadata is None:
        logger.warning("Corpus has no 'metadata'; hits will carry empty metadata")
        metadata = []
    if not isinstance(texts, list):
        return CorpusLoadError("invalid texts data structure", f"'texts' must be a list, got {type(texts).__name__}")
    if not isinstance(metadata, list):
        return CorpusLoadError(
            "invalid metadata data structure",
            f"'metadata' must be a list, got {type(metadata).__name__}",
        )

    size = len(embeddings)
    if len(texts) != size or len(metadata) != size:
        logger.warning(
            "Corpus containers are misaligned (embeddings=%d, texts=%d, metadata=%d); aligning to embeddings",
            size,
            len(texts),
            len(metadata),
        )

    vectors: list[tuple[float, ...] | None] = []
    for idx, value in enumerate(embeddings):
        vector = _as_vector(value)
        if vector is None:
            logger.error("Invalid embedding at index %d; it will be excluded from ranking", idx)
        vectors.append(vector)

    dimension = next((len(v) for v in vectors if v is not None), None)

    return Corpus(
        vectors=tuple(vectors),
        texts=tuple(str(texts[i]) if i < len(texts) and texts[i] is not None else "" for i in range(size)),
        metadata=tuple(_as_metadata(metadata[i], i) if i < len(metadata) else ChunkMetadata() for i in range(size)),
        dimension=dimension,
    )


def load_corpus_file(path: str | Path) -> Corpus | CorpusLoadError:
    """Read and validate the artifact at *path*."""
    corpus_path = Path(path)
    try:
        raw = json.loads(corpus_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return CorpusLoadError("corpus artifact not found", str(corpus_path))
    except (OSError, json.JSONDecodeError) as exc:
        return CorpusLoadError("corpus artifact unreadable", f"{corpus_path}: {exc}")
    return validate_corpus(raw)
