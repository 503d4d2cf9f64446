import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from listing_optimizer.services.openai_service import (
    OpenAIService,
    OpenAIServiceError,
    parse_json_payload,
    strip_code_fence,
)


def test_strip_code_fence_handles_json_fence():
    raw = '```json\n{"title": "Mug"}\n```'

    assert strip_code_fence(raw) == '{"title": "Mug"}'


def test_strip_code_fence_handles_bare_fence():
    raw = '```\n{"title": "Mug"}\n```'

    assert strip_code_fence(raw) == '{"title": "Mug"}'


def test_strip_code_fence_leaves_unwrapped_text():
    assert strip_code_fence('  {"title": "Mug"}  ') == '{"title": "Mug"}'


def test_parse_json_payload_is_fence_agnostic():
    payload = {"title": "Mug", "tags": ["coffee", "ceramic"]}
    unwrapped = json.dumps(payload)

    assert parse_json_payload(f"```json\n{unwrapped}\n```") == parse_json_payload(unwrapped)


def test_parse_json_payload_raises_on_garbage():
    with pytest.raises(json.JSONDecodeError):
        parse_json_payload("```json\nnot json at all\n```")


def _service_with_client(completion):
    service = OpenAIService()
    create = AsyncMock(return_value=completion)
    service.client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return service, create


@pytest.mark.asyncio
async def test_generate_json_uses_structured_output_schema(fake_chat_completion):
    service, create = _service_with_client(fake_chat_completion('{"ok": true}'))
    schema = {"type": "object", "properties": {"ok": {"type": "boolean"}}}

    result = await service.generate_json(
        system_message="system",
        user_message="user",
        model="gpt-4o",
        response_schema=schema,
        schema_name="check",
        temperature=0.5,
    )

    assert result == '{"ok": true}'
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["temperature"] == 0.5
    assert kwargs["response_format"]["type"] == "json_schema"
    assert kwargs["response_format"]["json_schema"]["name"] == "check"
    assert kwargs["response_format"]["json_schema"]["schema"] == schema
    assert "web_search_options" not in kwargs


@pytest.mark.asyncio
async def test_generate_json_web_search_embeds_schema_in_instruction(fake_chat_completion):
    service, create = _service_with_client(fake_chat_completion('```json\n{"ok": true}\n```'))
    schema = {"type": "object", "required": ["ok"]}

    result = await service.generate_json(
        system_message="Extract things.",
        user_message="https://www.etsy.com/listing/1/x",
        model="gpt-4o-search-preview",
        response_schema=schema,
        web_search=True,
    )

    assert result.startswith("```json")
    kwargs = create.await_args.kwargs
    assert kwargs["web_search_options"] == {}
    assert "response_format" not in kwargs
    assert "temperature" not in kwargs
    system_content = kwargs["messages"][0]["content"]
    assert system_content.startswith("Extract things.")
    assert json.dumps(schema) in system_content


@pytest.mark.asyncio
async def test_generate_json_rejects_empty_response(fake_chat_completion):
    service, _ = _service_with_client(fake_chat_completion(None))

    with pytest.raises(OpenAIServiceError):
        await service.generate_json(system_message="s", user_message="u", model="gpt-4o")


@pytest.mark.asyncio
async def test_generate_json_without_api_key(monkeypatch):
    monkeypatch.setattr("listing_optimizer.services.openai_service.settings.OPENAI_API_KEY", None)
    service = OpenAIService()

    with pytest.raises(OpenAIServiceError) as exc_info:
        await service.generate_json(system_message="s", user_message="u", model="gpt-4o")

    assert exc_info.value.recoverable is False


@pytest.mark.asyncio
async def test_health_check_reports_configuration(monkeypatch):
    monkeypatch.setattr("listing_optimizer.services.openai_service.settings.OPENAI_API_KEY", "sk-test")

    health = await OpenAIService().health_check()

    assert health["healthy"] is True
    assert health["client_initialized"] is False
    assert "model" in health["configuration"]
