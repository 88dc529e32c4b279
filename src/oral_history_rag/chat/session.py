"""Per-session conversation history.

The in-memory store trims each session to its last few messages but never
evicts whole sessions; a long-running process with many distinct session
ids grows without bound.  Swap in a store with expiry for such deployments.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from langchain_core.messages import BaseMessage

from oral_history_rag.config import settings


class SessionStore(ABC):
    """History capability injected into the chat layer."""

    def __init__(self, max_messages: int = settings.session_history_messages) -> None:
        if max_messages < 0:
            raise ValueError(f"max_messages must be >= 0, got {max_messages}")
        self.max_messages = max_messages

    @abstractmethod
    def get(self, session_id: str) -> list[BaseMessage]:
        """Return the stored history for *session_id* (oldest first)."""
        ...

    @abstractmethod
    def append(self, session_id: str, messages: Sequence[BaseMessage]) -> list[BaseMessage]:
        """Append *messages*, trim to :attr:`max_messages`, and return the new history."""
        ...

    def trim(self, history: Sequence[BaseMessage]) -> list[BaseMessage]:
        if self.max_messages == 0:
            return []
        return list(history[-self.max_messages :])


class InMemorySessionStore(SessionStore):
    """Process-local session history."""

    def __init__(self, max_messages: int = settings.session_history_messages) -> None:
        super().__init__(max_messages)
        self._sessions: dict[str, list[BaseMessage]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> list[BaseMessage]:
        with self._lock:
            return list(self._sessions.get(session_id, []))

    def append(self, session_id: str, messages: Sequence[BaseMessage]) -> list[BaseMessage]:
        with self._lock:
            history = self.trim([*self._sessions.get(session_id, []), *messages])
            self._sessions[session_id] = history
            return list(history)

    def __len__(self) -> int:
        return len(self._sessions)
