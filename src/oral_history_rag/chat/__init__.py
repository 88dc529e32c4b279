"""
Chat — turn retrieved transcript references into a location-only answer.

The retrieval core stays stateless; per-session conversation history lives
in an injected :class:`SessionStore`.

Public API
----------
- :class:`GuideResponder` — question + session id → answer text.
- :class:`SessionStore` / :class:`InMemorySessionStore` — conversation history.
- :func:`build_guide_prompt` — the prompt sent to the chat model.
"""

from oral_history_rag.chat.prompts import build_guide_prompt
from oral_history_rag.chat.responder import GuideResponder
from oral_history_rag.chat.session import InMemorySessionStore, SessionStore

__all__ = [
    "GuideResponder",
    "InMemorySessionStore",
    "SessionStore",
    "build_guide_prompt",
]
