"""Unit tests for the end-to-end ingestion pipeline (no network)."""

from __future__ import annotations

import json
from pathlib import Path

from oral_history_rag.ingestion.pipeline import main, run_ingestion
from oral_history_rag.retrieval.index import SimilarityIndex
from oral_history_rag.retrieval.models import IndexState


def _write_transcripts(root: Path) -> Path:
    source = root / "pdfs"
    source.mkdir()
    (source / "document1.txt").write_text("We joined the march.\n\nIt was cold.\fThe union met later.")
    (source / "document2.txt").write_text("My family ran a school.\f\fThe war changed everything.")
    return source


def test_run_ingestion_writes_aligned_artifact(tmp_path: Path, keyword_embeddings, count_tokens) -> None:
    source = _write_transcripts(tmp_path)
    output = tmp_path / "embeddings.json"

    artifact = run_ingestion(
        source,
        output,
        embeddings=keyword_embeddings,
        batch_pause=0,
        count_tokens=count_tokens,
    )

    raw = json.loads(output.read_text())
    assert len(raw["embeddings"]) == len(raw["texts"]) == len(raw["metadata"]) == 4
    assert raw["texts"][0] == "We joined the march.\nIt was cold."
    assert [(m["source"], m["page"], m["document_id"]) for m in raw["metadata"]] == [
        ("document1.txt", 1, "1"),
        ("document1.txt", 2, "1"),
        ("document2.txt", 1, "2"),
        ("document2.txt", 3, "2"),
    ]
    assert len(artifact.embeddings) == 4


def test_embedding_failures_shrink_the_corpus(tmp_path: Path, failing_embeddings, count_tokens) -> None:
    source = _write_transcripts(tmp_path)
    output = tmp_path / "embeddings.json"

    run_ingestion(source, output, embeddings=failing_embeddings, batch_pause=0, count_tokens=count_tokens)

    raw = json.loads(output.read_text())
    assert "The war changed everything." not in raw["texts"]
    assert len(raw["embeddings"]) == 3

    index = SimilarityIndex()
    assert index.load(output) is IndexState.READY
    assert index.query(failing_embeddings.embed_query("the union"), k=1)[0].text == "The union met later."


def test_cli_missing_source_dir_returns_error(tmp_path: Path) -> None:
    assert main([str(tmp_path / "missing"), "--output", str(tmp_path / "out.json")]) == 1
