"""Transcript catalog — display names keyed by 1-based document id."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from oral_history_rag.retrieval.models import CatalogEntry

logger = logging.getLogger(__name__)

Catalog = dict[str, CatalogEntry]


def parse_catalog(text: str) -> Catalog:
    """Parse CSV *text* with a header row into a catalog.

    Row *n* (1-based) describes document id ``"n"``. Empty lines are not rows,
    but a row of blank values still takes its position.
    """
    reader = csv.DictReader(io.StringIO(text))
    catalog: Catalog = {}
    for position, row in enumerate(reader, 1):
        document_id = str(position)
        fields = {k.strip(): (v or "").strip() for k, v in row.items() if k}
        name = fields.pop("name", "") or "Unknown"
        fields.pop("document_id", None)
        catalog[document_id] = CatalogEntry(document_id=document_id, name=name, **fields)
    return catalog


def load_catalog(path: str | Path) -> Catalog:
    """Load the catalog at *path*.

    A missing or unreadable file yields an empty catalog; results then fall
    back to the name ``"Unknown"``.
    """
    catalog_path = Path(path)
    try:
        text = catalog_path.read_text(encoding="utf-8-sig")
    except OSError:
        logger.warning("Catalog %s could not be read; display names will be 'Unknown'", catalog_path, exc_info=True)
        return {}
    catalog = parse_catalog(text)
    logger.info("Loaded %d catalog records from %s", len(catalog), catalog_path)
    return catalog
