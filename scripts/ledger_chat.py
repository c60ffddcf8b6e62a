#!/usr/bin/env python
"""Lightweight CLI for asking the ledger assistant questions."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ledger_assistant.core.config import get_settings  # noqa: E402
from ledger_assistant.core.errors import LedgerAssistantError  # noqa: E402
from ledger_assistant.core.logging import configure_logging  # noqa: E402
from ledger_assistant.dependencies import (  # noqa: E402
    get_document_parser,
    get_ledger_store,
    get_provider_client,
    get_query_pipeline,
    get_settings_provider,
    get_statement_importer,
    new_conversation,
)
from ledger_assistant.schemas import (  # noqa: E402
    ChartCard,
    ChartContent,
    MixedCard,
    ResponseData,
    TableCard,
    TextCard,
)
from ledger_assistant.services import ConversationContext  # noqa: E402


def _print_chart(chart: ChartContent) -> None:
    print(f"== {chart.title} ({chart.chart_type} chart) ==")
    for point in chart.data:
        print(f"  {point.label}: {point.value:,.2f}")
    if chart.caption:
        print(chart.caption)


def _print_response(response: ResponseData) -> None:
    for card in response.cards:
        if isinstance(card, TextCard):
            prefix = "[error] " if card.content.is_error else ""
            print(f"{prefix}{card.content.body}")
        elif isinstance(card, TableCard):
            print(f"== {card.content.title} ==")
            print(" | ".join(card.content.columns))
            for row in card.content.rows:
                print(" | ".join(row))
            if card.content.summary:
                print(card.content.summary)
        elif isinstance(card, ChartCard):
            _print_chart(card.content)
        elif isinstance(card, MixedCard):
            print(card.content.body)
            _print_chart(card.content.chart)
        print()


async def _ask(message: str, conversation: ConversationContext) -> None:
    provider = await get_settings_provider().get_active_provider()
    response = await get_query_pipeline().process_query(
        message, provider=provider, conversation=conversation
    )
    _print_response(response)


async def run_once(message: str) -> int:
    await _ask(message, new_conversation())
    return 0


async def run_interactive() -> int:
    conversation = new_conversation()
    print("Interactive ledger session. Type 'exit' or 'quit' to end, 'clear' to reset.\n")
    while True:
        try:
            message = await asyncio.to_thread(input, "You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return 0
        command = message.strip().lower()
        if command in {"exit", "quit"}:
            print("Goodbye!")
            return 0
        if command == "clear":
            await conversation.clear()
            print("Started a new conversation.\n")
            continue
        if not command:
            continue
        await _ask(message, conversation)


async def run_models(kind: str, endpoint: str, api_key: str | None) -> int:
    for model in await get_provider_client().list_models(kind, endpoint, api_key):
        print(model)
    return 0


async def run_test() -> int:
    provider = await get_settings_provider().get_active_provider()
    await get_provider_client().test_connection(provider)
    print(f"Connected to {provider.label()} ({provider.model}).")
    return 0


async def run_statement(path: str) -> int:
    provider = await get_settings_provider().get_active_provider()
    categories = await get_ledger_store().category_names()
    transactions = await get_statement_importer().import_file(provider, path, categories)
    for transaction in transactions:
        print(transaction.model_dump_json())
    print(f"\n{len(transactions)} transaction(s)")
    return 0


async def run_receipt(path: str) -> int:
    provider = await get_settings_provider().get_active_provider()
    categories = await get_ledger_store().category_names()
    receipt = await get_document_parser().parse_receipt_file(provider, path, categories)
    print(receipt.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Ask questions about your ledger or run an interactive chat session."
    )
    subparsers = parser.add_subparsers(dest="command")

    ask = subparsers.add_parser("ask", help="Send a single question.")
    ask.add_argument("message")

    subparsers.add_parser("chat", help="Start an interactive session.")
    subparsers.add_parser("test", help="Check the configured provider responds.")

    models = subparsers.add_parser("models", help="List models offered by a provider.")
    models.add_argument("kind")
    models.add_argument("endpoint")
    models.add_argument("--api-key", dest="api_key", default=None)

    statement = subparsers.add_parser(
        "statement", help="Extract transactions from a statement (PDF, image, TXT or CSV)."
    )
    statement.add_argument("path")

    receipt = subparsers.add_parser("receipt", help="Extract items from a receipt image.")
    receipt.add_argument("path")

    args = parser.parse_args(argv)
    configure_logging(get_settings().log_level)

    if args.command == "ask":
        job = run_once(args.message)
    elif args.command == "models":
        job = run_models(args.kind, args.endpoint, args.api_key)
    elif args.command == "test":
        job = run_test()
    elif args.command == "statement":
        job = run_statement(args.path)
    elif args.command == "receipt":
        job = run_receipt(args.path)
    else:
        job = run_interactive()

    try:
        return asyncio.run(job)
    except LedgerAssistantError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
