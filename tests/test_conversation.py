import sqlite3
from datetime import datetime, timezone

import pytest

from ledger_assistant.clients import LedgerStore
from ledger_assistant.schemas import (
    ChartCard,
    ChartContent,
    ChartDataPoint,
    ConversationMessage,
    ConversationSession,
    ResponseData,
    TableCard,
    TableContent,
)
from ledger_assistant.services.conversation import ConversationContext, format_history


def _message(role: str, content: str) -> ConversationMessage:
    return ConversationMessage(role=role, content=content)


def test_empty_history_renders_nothing():
    assert format_history([]) == ""


def test_history_block_layout():
    block = format_history([_message("user", "hi"), _message("assistant", "Hello!")])

    assert block == (
        "\n\n## Recent Conversation History\n"
        "User: hi\n"
        "Assistant: Hello!\n"
        "\n---\nCurrent message:\n"
    )


def test_long_messages_are_truncated():
    block = format_history([_message("user", "x" * 600)])

    assert f"User: {'x' * 500}...\n" in block
    assert "x" * 501 not in block


def test_at_most_ten_messages_are_rendered():
    messages = [_message("user", f"message {index}") for index in range(12)]

    block = format_history(messages)

    assert "message 1\n" not in block
    assert "message 2\n" in block
    assert "message 11\n" in block


@pytest.mark.asyncio
async def test_current_session_is_reused_until_cleared(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))

    first = await conversation.get_or_create_current()
    again = await conversation.get_or_create_current()
    fresh = await conversation.clear()

    assert first == again
    assert fresh != first
    assert conversation.current_session_id == fresh


@pytest.mark.asyncio
async def test_clear_keeps_old_messages(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))
    old_session = await conversation.get_or_create_current()
    await conversation.record_turn("hi", ResponseData.text("Hello!"))

    await conversation.clear()

    assert await conversation.recent_history() == []
    old = await conversation.recent_history(session_id=old_session)
    assert [message.content for message in old] == ["hi", "Hello!"]


@pytest.mark.asyncio
async def test_recent_history_is_newest_messages_in_order(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))
    await conversation.start_new()
    for index in range(6):
        await conversation.record_turn(f"question {index}", ResponseData.text(f"answer {index}"))

    history = await conversation.recent_history(limit=4)

    assert [message.content for message in history] == [
        "question 4",
        "answer 4",
        "question 5",
        "answer 5",
    ]
    assert len(await conversation.recent_history()) == 10


@pytest.mark.asyncio
async def test_history_without_session_is_empty(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))

    assert await conversation.recent_history() == []


@pytest.mark.asyncio
async def test_chart_and_table_replies_are_summarised(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))
    await conversation.start_new()
    chart = ResponseData(
        cards=[
            ChartCard(
                content=ChartContent(
                    chart_type="pie",
                    title="Spending by category",
                    data=[ChartDataPoint(label="Dining", value=42.5)],
                )
            )
        ]
    )
    table = ResponseData(
        cards=[TableCard(content=TableContent(title="Recent transactions", columns=["Date"], rows=[["2025-01-03"]]))]
    )

    await conversation.record_turn("breakdown?", chart)
    await conversation.record_turn("recent?", table)

    contents = [message.content for message in await conversation.recent_history()]
    assert contents == ["breakdown?", "[Chart: Spending by category]", "recent?", "[Table: Recent transactions]"]


@pytest.mark.asyncio
async def test_error_reply_is_recorded_as_assistant_turn(tmp_path):
    conversation = ConversationContext(LedgerStore(str(tmp_path / "ledger.db")))
    await conversation.start_new()

    await conversation.record_turn("drop it", ResponseData.text("nope", is_error=True))

    history = await conversation.recent_history()
    assert [(message.role, message.content) for message in history] == [
        ("user", "drop it"),
        ("assistant", "nope"),
    ]


@pytest.mark.asyncio
async def test_separate_handles_keep_separate_sessions(tmp_path):
    store = LedgerStore(str(tmp_path / "ledger.db"))
    alice = ConversationContext(store)
    bob = ConversationContext(store)

    alice_session = await alice.get_or_create_current()
    bob_session = await bob.get_or_create_current()
    await alice.record_turn("alice asks", ResponseData.text("alice answer"), session_id=alice_session)
    await bob.record_turn("bob asks", ResponseData.text("bob answer"), session_id=bob_session)

    assert alice_session != bob_session
    assert [m.content for m in await alice.recent_history()] == ["alice asks", "alice answer"]
    assert [m.content for m in await bob.recent_history()] == ["bob asks", "bob answer"]


class BrokenStore:
    async def create_session(self) -> ConversationSession:
        now = datetime.now(timezone.utc)
        return ConversationSession(id="session-1", created_at=now, updated_at=now)

    async def add_message(self, session_id: str, role: str, content: str) -> str:
        raise sqlite3.OperationalError("database is locked")


@pytest.mark.asyncio
async def test_record_turn_swallows_storage_failures():
    conversation = ConversationContext(BrokenStore())
    await conversation.start_new()

    await conversation.record_turn("hi", ResponseData.text("Hello!"))


@pytest.mark.asyncio
async def test_record_turn_without_session_is_a_no_op():
    conversation = ConversationContext(BrokenStore())

    await conversation.record_turn("hi", ResponseData.text("Hello!"))
