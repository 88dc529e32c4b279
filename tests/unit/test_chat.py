"""Unit tests for the chat layer — session history, prompts, and the guide responder."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from oral_history_rag.chat.prompts import GUIDE_SYSTEM, build_guide_prompt, format_context
from oral_history_rag.chat.responder import GuideResponder
from oral_history_rag.chat.session import InMemorySessionStore
from oral_history_rag.retrieval.errors import IndexUnavailableError
from oral_history_rag.retrieval.models import AggregatedResult

CONTEXT = [
    AggregatedResult(id="14", name="Jane Smith", pages=[6, "8-9"], relevance_score=0.91, text="secret content"),
]


class TestInMemorySessionStore:
    def test_trims_to_last_six_messages(self) -> None:
        store = InMemorySessionStore(max_messages=6)
        for turn in range(5):
            store.append("s1", [HumanMessage(content=f"q{turn}"), AIMessage(content=f"a{turn}")])

        history = store.get("s1")
        assert len(history) == 6
        assert [m.content for m in history] == ["q2", "a2", "q3", "a3", "q4", "a4"]

    def test_sessions_are_independent(self) -> None:
        store = InMemorySessionStore()
        store.append("a", [HumanMessage(content="hi")])
        assert store.get("b") == []
        assert len(store) == 1

    def test_get_returns_a_copy(self) -> None:
        store = InMemorySessionStore()
        store.append("a", [HumanMessage(content="hi")])
        store.get("a").append(HumanMessage(content="tampered"))
        assert len(store.get("a")) == 1

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            InMemorySessionStore(max_messages=-1)


class TestGuidePrompt:
    def test_message_order(self) -> None:
        history = [HumanMessage(content="earlier"), AIMessage(content="reply")]
        messages = build_guide_prompt("Where is activism discussed?", CONTEXT, history)

        assert isinstance(messages[0], SystemMessage)
        assert messages[1:3] == history
        assert isinstance(messages[-1], HumanMessage)
        assert messages[-1].content == "Where is activism discussed?"

    def test_system_prompt_embeds_context(self) -> None:
        system = build_guide_prompt("q", CONTEXT)[0].content
        assert system.startswith(GUIDE_SYSTEM)
        assert '"relevanceScore": 0.91' in system

    def test_format_context_shape(self) -> None:
        payload = json.loads(format_context(CONTEXT))
        assert payload == [
            {
                "interview": {
                    "id": "14",
                    "name": "Jane Smith",
                    "pages": [6, "8-9"],
                    "relevanceScore": 0.91,
                    "text": "secret content",
                }
            }
        ]


class TestGuideResponder:
    def test_respond_records_history(self) -> None:
        retriever = MagicMock()
        retriever.find_relevant_context.return_value = CONTEXT
        llm = FakeListChatModel(responses=["You can find it on page 6.", "Second answer."])
        responder = GuideResponder(retriever, llm=llm)

        assert responder.respond("first?", "s1") == "You can find it on page 6."
        assert responder.respond("second?", "s1") == "Second answer."

        history = responder.sessions.get("s1")
        assert [m.content for m in history] == [
            "first?",
            "You can find it on page 6.",
            "second?",
            "Second answer.",
        ]
        retriever.find_relevant_context.assert_called_with("second?")

    def test_unavailable_retrieval_propagates_and_leaves_history(self) -> None:
        retriever = MagicMock()
        retriever.find_relevant_context.side_effect = IndexUnavailableError("failed")
        responder = GuideResponder(retriever, llm=FakeListChatModel(responses=["unused"]))

        with pytest.raises(IndexUnavailableError):
            responder.respond("anything", "s1")
        assert responder.sessions.get("s1") == []
