"""Ingestion pipeline — load → chunk → embed → persist.

Run
---
    python -m oral_history_rag.ingestion.pipeline assets/pdfs --output embeddings.json
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from oral_history_rag.config import settings
from oral_history_rag.ingestion.chunker import TokenCounter, chunk_documents
from oral_history_rag.ingestion.embedder import EmbeddingGenerator
from oral_history_rag.ingestion.loader import load_directory
from oral_history_rag.retrieval.corpus import build_artifact, save_corpus
from oral_history_rag.retrieval.models import CorpusArtifact

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def run_ingestion(
    source_dir: str | Path,
    output_path: str | Path,
    *,
    embeddings: Embeddings | None = None,
    max_tokens: int = settings.max_chunk_tokens,
    batch_size: int = settings.embed_batch_size,
    batch_pause: float = settings.embed_batch_pause,
    count_tokens: TokenCounter | None = None,
) -> CorpusArtifact:
    """Build the corpus artifact for every transcript in *source_dir*.

    Parameters
    ----------
    source_dir:
        Directory of ``.pdf`` / ``.txt`` transcripts.
    output_path:
        Where the JSON artifact is written.
    embeddings:
        Embedding provider; defaults to the configured OpenAI model.
    max_tokens:
        Soft cap on tokens per chunk.
    batch_size / batch_pause:
        Embedding throttle settings.
    count_tokens:
        Token counter override (defaults to the embedding model's tokenizer).

    Returns
    -------
    CorpusArtifact
        The artifact that was written.
    """
    documents = load_directory(source_dir)
    logger.info(
        "Found %d pages across %d documents",
        sum(len(d.pages) for d in documents),
        len(documents),
    )

    chunks = chunk_documents(documents, max_tokens, count_tokens=count_tokens)
    logger.info("Created %d chunks", len(chunks))

    generator = EmbeddingGenerator(embeddings, batch_size=batch_size, batch_pause=batch_pause)
    records = generator.embed(chunks)

    artifact = build_artifact(records)
    save_corpus(artifact, output_path)
    logger.info("Embedding generation complete: %d of %d chunks embedded", len(records), len(chunks))
    return artifact


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build the oral-history corpus artifact")
    parser.add_argument("source_dir", nargs="?", default=settings.source_dir, help="Directory of transcripts")
    parser.add_argument("--output", default=settings.corpus_path, help="Output path for the corpus JSON")
    parser.add_argument("--max-tokens", type=int, default=settings.max_chunk_tokens)
    parser.add_argument("--batch-size", type=int, default=settings.embed_batch_size)
    parser.add_argument("--batch-pause", type=float, default=settings.embed_batch_pause)
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)

    try:
        run_ingestion(
            args.source_dir,
            args.output,
            max_tokens=args.max_tokens,
            batch_size=args.batch_size,
            batch_pause=args.batch_pause,
        )
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
