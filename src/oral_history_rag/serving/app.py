"""FastAPI application exposing retrieval and the archive guide over HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from oral_history_rag.chat.responder import GuideResponder
from oral_history_rag.config import settings
from oral_history_rag.retrieval.errors import IndexUnavailableError
from oral_history_rag.retrieval.models import AggregatedResult
from oral_history_rag.retrieval.retriever import ContextRetriever

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class ContextRequest(BaseModel):
    """Question to locate in the transcripts."""

    question: str = ""


class ChatRequest(BaseModel):
    """Incoming chat turn."""

    question: str = ""
    session_id: str = Field(default="default", alias="sessionId")

    model_config = {"populate_by_name": True}


class ChatResponse(BaseModel):
    """Guide answer."""

    response: str


# ── Helpers ───────────────────────────────────────────────────────────
def _retriever(request: Request) -> ContextRetriever:
    retriever = getattr(request.app.state, "retriever", None)
    if retriever is None:
        raise IndexUnavailableError("uninitialized", "retriever not loaded")
    return retriever


def _responder(request: Request) -> GuideResponder:
    responder = getattr(request.app.state, "responder", None)
    if responder is None:
        raise IndexUnavailableError("uninitialized", "chat responder not loaded")
    return responder


def _require_question(question: str) -> str:
    question = question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question is required")
    return question


def create_app(
    retriever: ContextRetriever | None = None,
    responder: GuideResponder | None = None,
) -> FastAPI:
    """Build the application.

    When *retriever* / *responder* are not injected they are created from
    the global settings at startup.  A failed startup leaves the app
    running and reporting retrieval as unavailable.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(level=settings.log_level)
        if app.state.retriever is None:
            try:
                app.state.retriever = ContextRetriever.from_settings()
            except Exception:
                logger.exception("Failed to initialise the context retriever")
        if app.state.responder is None and app.state.retriever is not None:
            try:
                app.state.responder = GuideResponder(app.state.retriever)
            except Exception:
                logger.exception("Failed to initialise the chat responder")
        yield

    app = FastAPI(
        title="Oral History Guide API",
        version="0.1.0",
        description="Locates oral-history transcript pages relevant to a question.",
        lifespan=lifespan,
    )
    app.state.retriever = retriever
    app.state.responder = responder
    if responder is not None and retriever is None:
        app.state.retriever = responder.retriever

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin"],
        expose_headers=["Content-Type"],
        max_age=600,
    )

    @app.exception_handler(IndexUnavailableError)
    async def _index_unavailable(request: Request, exc: IndexUnavailableError) -> JSONResponse:
        logger.error("Retrieval unavailable: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"error": "Retrieval is currently unavailable", "status": "unavailable"},
        )

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/")
    async def root() -> dict[str, str]:
        return {"message": "API is running"}

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Readiness probe — 503 until the index is ready."""
        retriever = getattr(request.app.state, "retriever", None)
        if retriever is None:
            return JSONResponse(status_code=503, content={"status": "uninitialized"})
        report = retriever.health()
        status_code = 200 if retriever.index.is_ready else 503
        return JSONResponse(status_code=status_code, content=report)

    @app.post("/api/context")
    def context(body: ContextRequest, request: Request) -> list[dict]:
        """Return at most two transcript references for the question."""
        question = _require_question(body.question)
        results: list[AggregatedResult] = _retriever(request).find_relevant_context(question)
        return [r.model_dump(by_alias=True) for r in results]

    @app.get("/api/chat")
    async def chat_hint() -> dict[str, str]:
        return {"message": "Please use POST method for chat requests"}

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(body: ChatRequest, request: Request) -> ChatResponse:
        """Run one guide turn for the session."""
        question = _require_question(body.question)
        responder = _responder(request)
        try:
            answer = responder.respond(question, body.session_id)
        except IndexUnavailableError:
            raise
        except Exception:
            logger.exception("Error in chat endpoint")
            raise HTTPException(
                status_code=500,
                detail="An error occurred while processing your request",
            ) from None
        return ChatResponse(response=answer)

    return app


app = create_app()
