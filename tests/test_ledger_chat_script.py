"""Tests for the developer chat CLI."""

from __future__ import annotations

import pytest

from ledger_assistant import dependencies
from ledger_assistant.core.config import get_settings
from ledger_assistant.schemas import (
    ChartCard,
    ChartContent,
    ChartDataPoint,
    ResponseData,
    TableCard,
    TableContent,
    TextCard,
    TextContent,
)
from scripts import ledger_chat


def _reset_caches() -> None:
    get_settings.cache_clear()
    dependencies._settings.cache_clear()
    dependencies.get_ledger_store.cache_clear()
    dependencies.get_provider_client.cache_clear()
    dependencies.get_settings_provider.cache_clear()


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGER_DATABASE_PATH", str(tmp_path / "ledger.db"))
    for key in ("KIND", "ENDPOINT", "MODEL", "API_KEY", "NAME"):
        monkeypatch.delenv(f"LEDGER_PROVIDER__{key}", raising=False)
    monkeypatch.chdir(tmp_path)
    _reset_caches()
    yield
    _reset_caches()


def test_models_command_lists_static_catalogue(isolated_settings, capsys):
    exit_code = ledger_chat.main(["models", "google", "https://generativelanguage.googleapis.com/v1beta"])

    assert exit_code == 0
    printed = [line for line in capsys.readouterr().out.splitlines() if " | " not in line]
    assert printed == [
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
    ]


def test_ask_without_provider_reports_error(isolated_settings, capsys):
    exit_code = ledger_chat.main(["ask", "how much did I spend?"])

    assert exit_code == 1
    assert "No LLM provider configured" in capsys.readouterr().err


def test_cards_are_printed_as_plain_text(capsys):
    response = ResponseData(
        cards=[
            TextCard(content=TextContent(body="Dining came to **$42.50**.")),
            ChartCard(
                content=ChartContent(
                    chart_type="bar",
                    title="By merchant",
                    data=[ChartDataPoint(label="Corner Bistro", value=30)],
                )
            ),
            TableCard(content=TableContent(title="Recent", columns=["Date", "Amount"], rows=[["2025-01-03", "-30.0"]])),
        ]
    )

    ledger_chat._print_response(response)

    out = capsys.readouterr().out
    assert "Dining came to **$42.50**." in out
    assert "== By merchant (bar chart) ==" in out
    assert "  Corner Bistro: 30.00" in out
    assert "Date | Amount" in out
    assert "2025-01-03 | -30.0" in out
