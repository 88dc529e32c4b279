"""Transcript loaders — per-page text from PDF and form-feed delimited text files."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

from oral_history_rag.config import settings
from oral_history_rag.ingestion.models import Document

logger = logging.getLogger(__name__)

PAGE_DELIMITER = "\f"
SUPPORTED_SUFFIXES = (".pdf", ".txt")


def load_pdf(path: str | Path) -> list[str]:
    """Return the page texts of a single PDF file."""
    pages = PyPDFLoader(str(path)).load()
    return [page.page_content.strip() for page in pages]


def load_text(path: str | Path) -> list[str]:
    """Return the page texts of a plain-text transcript split on form feeds."""
    text = Path(path).read_text(encoding="utf-8")
    return [page.strip() for page in text.split(PAGE_DELIMITER)]


def resolve_document_id(title: str, position: int, pattern: str | None = None) -> str:
    """Return the catalog id for the file *title*.

    The number captured by *pattern* wins; otherwise the file's 1-based
    *position* in ingestion order is used.
    """
    match = re.search(pattern or settings.document_id_pattern, title)
    if match and match.groups():
        return str(int(match.group(1)))
    return str(position)


def load_directory(path: str | Path, *, id_pattern: str | None = None) -> list[Document]:
    """Load every supported transcript from *path* in sorted file-name order.

    Files that fail to extract are logged and skipped; the remaining files
    are still returned.

    Parameters
    ----------
    path:
        Directory containing ``.pdf`` / ``.txt`` transcripts.
    id_pattern:
        Regex whose first group is the document id; defaults to
        ``settings.document_id_pattern``.

    Returns
    -------
    list[Document]
        One document per readable file, with its page texts.
    """
    root = Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"Source directory not found: {root}")

    files = sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES)
    documents: list[Document] = []

    for position, file_path in enumerate(files, 1):
        logger.info("Processing %s...", file_path.name)
        try:
            if file_path.suffix.lower() == ".pdf":
                pages = load_pdf(file_path)
            else:
                pages = load_text(file_path)
        except Exception:
            logger.error("Error processing %s; skipping", file_path.name, exc_info=True)
            continue

        documents.append(
            Document(
                title=file_path.name,
                document_id=resolve_document_id(file_path.name, position, id_pattern),
                pages=pages,
            )
        )
        logger.info("Processed %s: %d pages", file_path.name, len(pages))

    return documents
