"""Guide responder — retrieval, prompt, chat model, session history."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from langchain_core.messages import AIMessage, HumanMessage

from oral_history_rag.chat.prompts import build_guide_prompt
from oral_history_rag.chat.session import InMemorySessionStore, SessionStore

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from oral_history_rag.retrieval.retriever import ContextRetriever

logger = logging.getLogger(__name__)


class GuideResponder:
    """Answer a question by pointing at transcript pages.

    Parameters
    ----------
    retriever:
        Source of aggregated transcript references.
    llm:
        Chat model; defaults to :func:`~oral_history_rag.chat.llm.get_llm`.
    sessions:
        Conversation history store; defaults to an in-memory store.
    """

    def __init__(
        self,
        retriever: ContextRetriever,
        llm: BaseChatModel | None = None,
        sessions: SessionStore | None = None,
    ) -> None:
        if llm is None:
            from oral_history_rag.chat.llm import get_llm

            llm = get_llm()
        self._retriever = retriever
        self._llm = llm
        self.sessions = sessions if sessions is not None else InMemorySessionStore()

    @property
    def retriever(self) -> ContextRetriever:
        return self._retriever

    def respond(self, question: str, session_id: str = "default") -> str:
        """Return the guide's answer and record the turn in the session.

        Raises
        ------
        IndexUnavailableError
            When retrieval is unavailable; the caller reports it.
        """
        logger.info("session=%s role=user content=%r", session_id, question)

        history = self.sessions.get(session_id)
        context = self._retriever.find_relevant_context(question)
        messages = build_guide_prompt(question, context, history)

        reply: Any = self._llm.invoke(messages)
        answer = reply.content if hasattr(reply, "content") else str(reply)

        self.sessions.append(session_id, [HumanMessage(content=question), AIMessage(content=answer)])
        logger.info("session=%s role=assistant content=%r", session_id, answer)
        return answer
