"""Natural-language questions answered from the ledger."""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional, Tuple

from ledger_assistant.clients.provider_client import ProviderClient
from ledger_assistant.clients.sqlite_store import LedgerStore
from ledger_assistant.core.errors import (
    ProviderNotConfiguredError,
    SqlExecutionError,
    SqlSafetyError,
)
from ledger_assistant.schemas import ProviderConfig, QueryAnalysis, ResponseData
from ledger_assistant.services import prompts
from ledger_assistant.services.conversation import ConversationContext, format_history
from ledger_assistant.services.response_parser import cards_parser, parse_analysis, parse_cards

EMPTY_RESULT_MESSAGE = (
    "I don't have any data matching that query yet. Try uploading some financial "
    "documents or receipts first, and then I can help you analyze your spending!"
)

logger = logging.getLogger(__name__)


def ensure_read_only(sql: str) -> str:
    """Reject anything that does not start with ``SELECT`` once trimmed."""
    if not sql.strip().upper().startswith("SELECT"):
        raise SqlSafetyError(sql)
    return sql


def sql_error_message(exc: Exception, sql: str) -> str:
    return f"I couldn't retrieve that data. Error: {exc} in {sql}"


class QueryPipeline:
    """Classify a question, run generated SQL when needed, and render cards.

    ANALYZE decides between the data path (EXECUTE_SQL, then EMPTY_RESULT or
    FORMAT) and the CONVERSATIONAL path. Provider and transport failures
    propagate; everything the model says is recovered into cards.
    """

    def __init__(self, provider_client: ProviderClient, store: LedgerStore) -> None:
        self._client = provider_client
        self._store = store

    async def process_query(
        self,
        question: str,
        *,
        provider: Optional[ProviderConfig],
        conversation: Optional[ConversationContext] = None,
    ) -> ResponseData:
        if provider is None:
            raise ProviderNotConfiguredError()

        logger.info("Processing question with %s: %s", provider.label(), question)

        session_id: Optional[str] = None
        history_block = ""
        if conversation is not None:
            session_id, history_block = await self._load_history(conversation)

        analysis = await self._analyze(provider, question, history_block)

        if analysis.needs_data:
            response = await self._answer_from_data(
                provider, question, analysis.sql_query or "", history_block
            )
        else:
            response = await self._converse(provider, question, history_block)

        if conversation is not None:
            await conversation.record_turn(question, response, session_id=session_id)

        logger.info("Answered with %d card(s)", len(response.cards))
        return response

    async def _load_history(
        self, conversation: ConversationContext
    ) -> Tuple[Optional[str], str]:
        session_id: Optional[str] = None
        try:
            session_id = await conversation.get_or_create_current()
            history = await conversation.recent_history(session_id=session_id)
        except sqlite3.Error:
            logger.warning("Conversation history unavailable; answering without it", exc_info=True)
            return session_id, ""
        logger.info("Loaded %d messages from session %s", len(history), session_id)
        return session_id, format_history(history)

    async def _analyze(
        self, provider: ProviderConfig, question: str, history_block: str
    ) -> QueryAnalysis:
        raw = await self._client.complete(
            provider,
            f"{history_block}{question}",
            prompts.ANALYSIS_SYSTEM_PROMPT,
        )
        analysis = parse_analysis(raw)
        logger.info(
            "Analysis: needs_data=%s type=%s sql=%s",
            analysis.needs_data,
            analysis.query_type,
            analysis.sql_query,
        )
        return analysis

    async def _answer_from_data(
        self,
        provider: ProviderConfig,
        question: str,
        sql: str,
        history_block: str,
    ) -> ResponseData:
        try:
            ensure_read_only(sql)
            result = await self._store.execute_select(sql)
        except (SqlSafetyError, SqlExecutionError) as exc:
            logger.error("SQL step failed: %s | SQL: %s", exc, sql)
            return ResponseData.text(sql_error_message(exc, sql), is_error=True)

        if result.row_count == 0:
            logger.info("No rows returned; skipping the formatting call")
            return ResponseData.text(EMPTY_RESULT_MESSAGE)

        logger.info("Formatting %d row(s)", result.row_count)
        raw = await self._client.complete(
            provider,
            prompts.format_prompt(history_block, question, result.to_json()),
            prompts.FORMAT_SYSTEM_PROMPT,
        )
        outcome = cards_parser.attempt(raw)
        if outcome.ok:
            return outcome.unwrap()
        return ResponseData.text(raw, is_error=True)

    async def _converse(
        self, provider: ProviderConfig, question: str, history_block: str
    ) -> ResponseData:
        raw = await self._client.complete(
            provider,
            f"{history_block}{question}",
            prompts.CONVERSATIONAL_SYSTEM_PROMPT,
        )
        return parse_cards(raw)


__all__ = ["EMPTY_RESULT_MESSAGE", "QueryPipeline", "ensure_read_only", "sql_error_message"]
