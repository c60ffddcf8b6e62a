"""Conversation sessions and the history block injected into prompts."""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional, Sequence

from ledger_assistant.clients.sqlite_store import LedgerStore
from ledger_assistant.schemas import ConversationMessage, ResponseData

HISTORY_HEADER = "\n\n## Recent Conversation History\n"
HISTORY_FOOTER = "\n---\nCurrent message:\n"
MAX_HISTORY_MESSAGES = 10
MESSAGE_PREVIEW_CHARS = 500

logger = logging.getLogger(__name__)


def format_history(messages: Sequence[ConversationMessage]) -> str:
    """Render prior turns as the preamble placed before the current message."""
    if not messages:
        return ""

    lines: List[str] = [HISTORY_HEADER]
    for message in list(messages)[-MAX_HISTORY_MESSAGES:]:
        role = "User" if message.role == "user" else "Assistant"
        content = message.content
        if len(content) > MESSAGE_PREVIEW_CHARS:
            content = content[:MESSAGE_PREVIEW_CHARS] + "..."
        lines.append(f"{role}: {content}\n")
    lines.append(HISTORY_FOOTER)
    return "".join(lines)


class ConversationContext:
    """Handle on the caller's current conversation session.

    Each caller owns its own handle; nothing here is process-global. The
    pipeline snapshots :meth:`get_or_create_current` once per request and
    passes that id explicitly to the history read and the turn write.
    """

    def __init__(self, store: LedgerStore, *, history_limit: int = MAX_HISTORY_MESSAGES) -> None:
        self._store = store
        self._history_limit = min(history_limit, MAX_HISTORY_MESSAGES)
        self._current: Optional[str] = None

    @property
    def current_session_id(self) -> Optional[str]:
        return self._current

    async def get_or_create_current(self) -> str:
        if self._current is None:
            return await self.start_new()
        return self._current

    async def start_new(self) -> str:
        session = await self._store.create_session()
        session_id = session.id
        self._current = session_id
        logger.info("Started conversation session %s", session_id)
        return session_id

    async def clear(self) -> str:
        """Forget the current session and begin a fresh one; old rows are kept."""
        self._current = None
        return await self.start_new()

    async def recent_history(
        self,
        limit: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> List[ConversationMessage]:
        target = session_id or self._current
        if target is None:
            return []
        effective = self._history_limit if limit is None else min(limit, MAX_HISTORY_MESSAGES)
        if effective <= 0:
            return []
        return await self._store.recent_messages(target, effective)

    async def record_turn(
        self,
        question: str,
        response: ResponseData,
        session_id: Optional[str] = None,
    ) -> None:
        """Persist the user's question and a one-line summary of the reply.

        Error cards are summarised like any other reply. Storage failures are
        logged and never reach the caller.
        """
        target = session_id or self._current
        if target is None:
            logger.warning("No active conversation session; turn not recorded")
            return

        try:
            await self._store.add_message(target, "user", question)
            summary = response.summary()
            if summary is not None:
                await self._store.add_message(target, "assistant", summary)
        except sqlite3.Error:
            logger.warning("Failed to record conversation turn for session %s", target, exc_info=True)


__all__ = [
    "ConversationContext",
    "HISTORY_FOOTER",
    "HISTORY_HEADER",
    "MAX_HISTORY_MESSAGES",
    "format_history",
]
