import json

import httpx
import pytest

from ledger_assistant.clients import ProviderClient
from ledger_assistant.core.errors import (
    ProviderConfigurationError,
    ProviderError,
    ProviderResponseError,
    TransportError,
    VisionNotSupportedError,
)
from ledger_assistant.schemas import ProviderConfig, ProviderKind


def _client(responder):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responder(request)

    return ProviderClient(transport=httpx.MockTransport(handler)), requests


def _body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def _provider(kind: str, endpoint: str, model: str, api_key: str | None = None) -> ProviderConfig:
    return ProviderConfig(type=kind, name=kind.title(), endpoint=endpoint, apiKey=api_key, model=model)


ANTHROPIC = _provider("anthropic", "https://api.anthropic.com/v1/", "claude-3-5-haiku-20241022", "sk-ant")
OPENAI = _provider("openai", "https://api.openai.com/v1", "gpt-4o-mini", "sk-openai")
OPENROUTER = _provider("openrouter", "https://openrouter.ai/api/v1", "openai/gpt-4o", "sk-or")
LMSTUDIO = _provider("lmstudio", "http://localhost:1234/v1", "local-model")
OLLAMA = _provider("ollama", "http://localhost:11434", "llama3.2")
GOOGLE = _provider("google", "https://generativelanguage.googleapis.com/v1beta", "gemini-2.0-flash", "g-key")


@pytest.mark.asyncio
async def test_anthropic_text_request_shape():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"content": [{"type": "text", "text": "hi"}]})
    )

    reply = await client.complete(ANTHROPIC, "Question?", "Be terse.")

    assert reply == "hi"
    request = requests[0]
    assert str(request.url) == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "sk-ant"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert "anthropic-beta" not in request.headers
    assert _body(request) == {
        "model": "claude-3-5-haiku-20241022",
        "max_tokens": 16384,
        "messages": [{"role": "user", "content": "Question?"}],
        "system": "Be terse.",
    }


@pytest.mark.asyncio
async def test_anthropic_omits_system_when_absent():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"content": [{"text": "ok"}]})
    )

    await client.complete(ANTHROPIC, "Question?")

    assert "system" not in _body(requests[0])


@pytest.mark.asyncio
async def test_anthropic_requires_api_key():
    client, requests = _client(lambda request: httpx.Response(200, json={}))
    keyless = ANTHROPIC.model_copy(update={"api_key": None})

    with pytest.raises(ProviderConfigurationError):
        await client.complete(keyless, "Question?")
    assert requests == []


@pytest.mark.asyncio
async def test_anthropic_pdf_vision_uses_document_block_and_beta_header():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"content": [{"text": "[]"}]})
    )

    reply = await client.complete_with_vision(
        ANTHROPIC, "Extract.", "JVBERi0=", "application/pdf", "You parse statements."
    )

    assert reply == "[]"
    request = requests[0]
    assert request.headers["anthropic-beta"] == "pdfs-2024-09-25"
    body = _body(request)
    assert body["max_tokens"] == 4096
    assert body["system"] == "You parse statements."
    content = body["messages"][0]["content"]
    assert content[0] == {
        "type": "document",
        "source": {"type": "base64", "media_type": "application/pdf", "data": "JVBERi0="},
    }
    assert content[1] == {"type": "text", "text": "Extract."}


@pytest.mark.asyncio
async def test_anthropic_image_vision_uses_image_block():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"content": [{"text": "{}"}]})
    )

    await client.complete_with_vision(ANTHROPIC, "Read.", "iVBOR", "image/png")

    request = requests[0]
    assert "anthropic-beta" not in request.headers
    block = _body(request)["messages"][0]["content"][0]
    assert block["type"] == "image"
    assert block["source"]["media_type"] == "image/png"


@pytest.mark.asyncio
async def test_openai_compatible_text_request_shape():
    client, requests = _client(
        lambda request: httpx.Response(
            200, json={"choices": [{"message": {"role": "assistant", "content": "hello"}}]}
        )
    )

    reply = await client.complete(OPENAI, "Question?", "Be terse.")

    assert reply == "hello"
    request = requests[0]
    assert str(request.url) == "https://api.openai.com/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-openai"
    assert _body(request) == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "Be terse."},
            {"role": "user", "content": "Question?"},
        ],
        "max_tokens": 16384,
    }


@pytest.mark.asyncio
async def test_lmstudio_sends_no_authorization_without_key():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})
    )

    await client.complete(LMSTUDIO, "Question?")

    request = requests[0]
    assert str(request.url) == "http://localhost:1234/v1/chat/completions"
    assert "authorization" not in request.headers
    assert _body(request)["messages"] == [{"role": "user", "content": "Question?"}]


@pytest.mark.asyncio
async def test_openrouter_vision_uses_data_url():
    client, requests = _client(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "[]"}}]})
    )

    await client.complete_with_vision(OPENROUTER, "Extract.", "AAAA", "image/webp", "System.")

    body = _body(requests[0])
    assert body["max_tokens"] == 4096
    assert body["messages"][0] == {"role": "system", "content": "System."}
    assert body["messages"][1]["content"] == [
        {"type": "image_url", "image_url": {"url": "data:image/webp;base64,AAAA"}},
        {"type": "text", "text": "Extract."},
    ]


@pytest.mark.asyncio
async def test_ollama_request_shape():
    client, requests = _client(lambda request: httpx.Response(200, json={"response": "yo"}))

    reply = await client.complete(OLLAMA, "Question?")

    assert reply == "yo"
    request = requests[0]
    assert str(request.url) == "http://localhost:11434/api/generate"
    assert _body(request) == {
        "model": "llama3.2",
        "prompt": "Question?",
        "system": "",
        "stream": False,
    }


@pytest.mark.asyncio
async def test_google_system_prompt_becomes_acknowledged_turn():
    client, requests = _client(
        lambda request: httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "sure"}]}}]}
        )
    )

    reply = await client.complete(GOOGLE, "Question?", "Be terse.")

    assert reply == "sure"
    request = requests[0]
    assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
    assert request.url.params["key"] == "g-key"
    assert _body(request) == {
        "contents": [
            {"role": "user", "parts": [{"text": "Be terse."}]},
            {"role": "model", "parts": [{"text": "Understood. I will follow these instructions."}]},
            {"role": "user", "parts": [{"text": "Question?"}]},
        ]
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", [LMSTUDIO, OLLAMA, GOOGLE])
async def test_vision_unsupported_backends_fail_before_any_request(provider):
    client, requests = _client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(VisionNotSupportedError):
        await client.complete_with_vision(provider, "Read.", "AAAA", "image/png")
    assert requests == []


def test_supports_vision_by_kind():
    client = ProviderClient()

    assert client.supports_vision(ProviderKind.ANTHROPIC)
    assert client.supports_vision("openai")
    assert client.supports_vision("openrouter")
    assert not client.supports_vision("lmstudio")
    assert not client.supports_vision("ollama")
    assert not client.supports_vision("google")


@pytest.mark.asyncio
async def test_non_success_status_carries_vendor_message():
    client, _ = _client(
        lambda request: httpx.Response(401, json={"error": {"message": "invalid x-api-key"}})
    )

    with pytest.raises(ProviderError) as excinfo:
        await client.complete(ANTHROPIC, "Question?")

    assert excinfo.value.http_status == 401
    assert excinfo.value.message == "invalid x-api-key"
    assert excinfo.value.backend == "anthropic"


@pytest.mark.asyncio
async def test_non_json_error_body_falls_back_to_text_then_unknown():
    client, _ = _client(lambda request: httpx.Response(502, text="Bad gateway"))
    with pytest.raises(ProviderError) as excinfo:
        await client.complete(OLLAMA, "Question?")
    assert excinfo.value.message == "Bad gateway"

    client, _ = _client(lambda request: httpx.Response(500))
    with pytest.raises(ProviderError) as excinfo:
        await client.complete(OLLAMA, "Question?")
    assert excinfo.value.message == "Unknown error"


@pytest.mark.asyncio
async def test_missing_envelope_is_a_response_error():
    client, _ = _client(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(ProviderResponseError):
        await client.complete(OPENAI, "Question?")


@pytest.mark.asyncio
async def test_connection_failure_is_a_transport_error():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(refuse)

    with pytest.raises(TransportError):
        await client.complete(OLLAMA, "Question?")


@pytest.mark.asyncio
async def test_list_models_ollama_and_lmstudio():
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": "llama3.2"}, {"name": "qwen2"}]})
        return httpx.Response(200, json={"data": [{"id": "local-a"}, {"id": "local-b"}]})

    client, requests = _client(respond)

    assert await client.list_models("ollama", "http://localhost:11434") == ["llama3.2", "qwen2"]
    assert await client.list_models("lmstudio", "http://localhost:1234/v1") == ["local-a", "local-b"]
    assert str(requests[1].url) == "http://localhost:1234/v1/models"


@pytest.mark.asyncio
async def test_list_models_openai_filters_gpt_ids():
    client, requests = _client(
        lambda request: httpx.Response(
            200,
            json={"data": [{"id": "gpt-4o"}, {"id": "whisper-1"}, {"id": "gpt-4o-mini"}, {"id": "dall-e-3"}]},
        )
    )

    models = await client.list_models("openai", "https://api.openai.com/v1", "sk-openai")

    assert models == ["gpt-4o", "gpt-4o-mini"]
    assert requests[0].headers["authorization"] == "Bearer sk-openai"


@pytest.mark.asyncio
async def test_list_models_openrouter_keeps_first_twenty():
    client, _ = _client(
        lambda request: httpx.Response(200, json={"data": [{"id": f"model-{i}"} for i in range(30)]})
    )

    models = await client.list_models("openrouter", "https://openrouter.ai/api/v1", "sk-or")

    assert models == [f"model-{i}" for i in range(20)]


@pytest.mark.asyncio
async def test_list_models_requires_key_for_hosted_catalogues():
    client, requests = _client(lambda request: httpx.Response(200, json={"data": []}))

    with pytest.raises(ProviderConfigurationError):
        await client.list_models("openai", "https://api.openai.com/v1")
    with pytest.raises(ProviderConfigurationError):
        await client.list_models("openrouter", "https://openrouter.ai/api/v1", "")
    assert requests == []


@pytest.mark.asyncio
async def test_static_model_lists():
    client, requests = _client(lambda request: httpx.Response(500))

    assert await client.list_models("anthropic", "https://api.anthropic.com/v1") == [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
    ]
    assert await client.list_models("google", "https://example.com") == [
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
    ]
    assert requests == []


@pytest.mark.asyncio
async def test_unknown_kind_is_a_configuration_error():
    client = ProviderClient()

    with pytest.raises(ProviderConfigurationError):
        await client.list_models("mistral", "https://example.com")


@pytest.mark.asyncio
async def test_connection_check_sends_say_hello():
    client, requests = _client(lambda request: httpx.Response(200, json={"response": "Hello!"}))

    await client.test_connection(OLLAMA)

    assert _body(requests[0])["prompt"] == "Say hello"
