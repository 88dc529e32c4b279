"""Unit tests for transcript loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from oral_history_rag.ingestion.loader import load_directory, resolve_document_id


def test_text_files_split_on_form_feed(tmp_path: Path) -> None:
    (tmp_path / "document2.txt").write_text("page one\n\nmore\fpage two\f  page three  ")
    docs = load_directory(tmp_path)

    assert len(docs) == 1
    assert docs[0].title == "document2.txt"
    assert docs[0].pages == ["page one\n\nmore", "page two", "page three"]


def test_files_load_in_sorted_order_with_ids(tmp_path: Path) -> None:
    (tmp_path / "document10.txt").write_text("ten")
    (tmp_path / "document2.txt").write_text("two")
    (tmp_path / "interview.txt").write_text("no number")
    (tmp_path / "notes.md").write_text("ignored")

    docs = load_directory(tmp_path)

    assert [d.title for d in docs] == ["document10.txt", "document2.txt", "interview.txt"]
    assert [d.document_id for d in docs] == ["10", "2", "3"]


def test_failed_file_is_skipped(tmp_path: Path, caplog) -> None:
    (tmp_path / "document1.pdf").write_bytes(b"%PDF-broken")
    (tmp_path / "document2.txt").write_text("fine")

    with patch("oral_history_rag.ingestion.loader.load_pdf", side_effect=ValueError("bad pdf")):
        with caplog.at_level("ERROR"):
            docs = load_directory(tmp_path)

    assert [d.title for d in docs] == ["document2.txt"]
    assert "document1.pdf" in caplog.text


def test_pdf_pages_come_from_pdf_loader(tmp_path: Path) -> None:
    (tmp_path / "document4.pdf").write_bytes(b"%PDF-1.4")
    with patch("oral_history_rag.ingestion.loader.load_pdf", return_value=["p1", "p2"]) as load_pdf:
        docs = load_directory(tmp_path)

    load_pdf.assert_called_once()
    assert docs[0].pages == ["p1", "p2"]
    assert docs[0].document_id == "4"


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_directory(tmp_path / "nope")


@pytest.mark.parametrize(
    ("title", "position", "expected"),
    [
        ("document7.pdf", 1, "7"),
        ("document007.pdf", 1, "7"),
        ("transcript.pdf", 5, "5"),
    ],
)
def test_resolve_document_id(title: str, position: int, expected: str) -> None:
    assert resolve_document_id(title, position) == expected
