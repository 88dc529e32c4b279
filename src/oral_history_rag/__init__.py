"""Oral-history retrieval — point questions at transcript pages.

Sub-packages
------------
- :mod:`oral_history_rag.ingestion` — load, chunk, embed and persist the corpus.
- :mod:`oral_history_rag.retrieval` — similarity index, aggregation, retriever.
- :mod:`oral_history_rag.chat` — session history and the guide responder.
- :mod:`oral_history_rag.serving` — FastAPI application.
"""

__version__ = "0.1.0"
