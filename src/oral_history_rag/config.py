"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Providers
    openai_api_key: str = Field(default="", description="OpenAI API key used for embeddings and chat")
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model; its tokenizer is also used to size chunks",
    )
    llm_model_name: str = Field(default="gpt-4-turbo-preview", description="Chat model identifier")
    llm_temperature: float = 0.7
    llm_max_tokens: int = 200

    # Artifacts
    source_dir: str = "assets/pdfs"
    corpus_path: str = "embeddings.json"
    catalog_path: str = "metadata.csv"
    document_id_pattern: str = Field(
        default=r"document(\d+)",
        description="Regex whose first group is the document id embedded in a file name",
    )

    # Ingestion
    max_chunk_tokens: int = 500
    embed_batch_size: int = 20
    embed_batch_pause: float = Field(default=1.0, description="Seconds to wait between embedding batches")

    # Retrieval
    retrieval_k: int = 5
    max_documents: int = 2
    max_chunks_per_document: int = 3

    # Chat
    session_history_messages: int = 6

    # Serving
    cors_origins: list[str] = ["https://chatbot11guidingversion.netlify.app"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
