"""Unit tests for the provider HTTP clients"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from icarus_finance.domain.exceptions import ConfigurationError, ExternalServiceError, LLMAPIError
from icarus_finance.config import Settings
from icarus_finance.infrastructure.clients.infosimples import InfoSimplesClient
from icarus_finance.infrastructure.clients.llm import (
    AnthropicClient,
    LLMReply,
    OpenAIClient,
    ToolInvocation,
    ToolSpec,
    extract_message_text,
)
from icarus_finance.infrastructure.clients.registry import ClientRegistry

TOOL = ToolSpec(name="estoque_disponivel", description="Estoque", parameters={"type": "object", "properties": {}})


def response(status: int, payload, url: str = "https://api.test/x") -> httpx.Response:
    return httpx.Response(status, json=payload, request=httpx.Request("POST", url))


def test_extract_message_text():
    assert extract_message_text("oi") == "oi"
    assert extract_message_text([{"type": "text", "text": "a"}, {"type": "tool_use"}, "b"]) == "a\nb"
    assert extract_message_text(None) == ""
    assert extract_message_text(42) == ""


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_anthropic_parses_tool_use(mock_post: AsyncMock):
    mock_post.return_value = response(
        200,
        {
            "content": [
                {"type": "text", "text": "Consultando estoque."},
                {"type": "tool_use", "id": "tu_1", "name": "estoque_disponivel", "input": {"regiao": "Sul"}},
            ]
        },
    )
    client = AnthropicClient(api_key="k", model="claude")

    reply = await client.chat("sistema", [{"role": "user", "content": "oi"}], tools=[TOOL])

    assert reply.text == "Consultando estoque."
    assert reply.tool_invocations == [ToolInvocation(id="tu_1", name="estoque_disponivel", arguments={"regiao": "Sul"})]
    payload = mock_post.call_args.kwargs["json"]
    assert payload["system"] == "sistema"
    assert payload["tools"][0]["input_schema"] == TOOL.parameters
    assert mock_post.call_args.kwargs["headers"]["x-api-key"] == "k"

    messages = client.tool_result_messages(reply, {"tu_1": {"sucesso": True}})
    assert messages[0]["role"] == "assistant"
    assert messages[1]["content"][0]["tool_use_id"] == "tu_1"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_openai_parses_tool_calls(mock_post: AsyncMock):
    mock_post.return_value = response(
        200,
        {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": "call_1",
                                "type": "function",
                                "function": {"name": "estoque_disponivel", "arguments": '{"regiao": "Sul"}'},
                            }
                        ],
                    }
                }
            ]
        },
    )
    client = OpenAIClient(api_key="k", model="gpt")

    reply = await client.chat("sistema", [{"role": "user", "content": "oi"}], tools=[TOOL])

    assert reply.text == ""
    assert reply.tool_invocations[0].arguments == {"regiao": "Sul"}
    payload = mock_post.call_args.kwargs["json"]
    assert payload["messages"][0] == {"role": "system", "content": "sistema"}
    assert payload["tool_choice"] == "auto"

    messages = client.tool_result_messages(reply, {"call_1": {"sucesso": True}})
    assert messages[1] == {"role": "tool", "tool_call_id": "call_1", "content": '{"sucesso": true}'}


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_http_error_maps_to_llm_api_error(mock_post: AsyncMock):
    mock_post.return_value = response(529, {"error": "overloaded"})

    with pytest.raises(LLMAPIError, match="529"):
        await AnthropicClient(api_key="k", model="claude").chat("s", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_timeout_maps_to_llm_api_error(mock_post: AsyncMock):
    mock_post.side_effect = httpx.TimeoutException("slow")

    with pytest.raises(LLMAPIError, match="timeout"):
        await OpenAIClient(api_key="k", model="gpt", timeout=5).chat("s", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_unexpected_shape_maps_to_llm_api_error(mock_post: AsyncMock):
    mock_post.return_value = response(200, {"choices": []})

    with pytest.raises(LLMAPIError, match="shape"):
        await OpenAIClient(api_key="k", model="gpt").chat("s", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_infosimples_sends_token_and_maps_errors(mock_post: AsyncMock):
    mock_post.return_value = response(200, {"code": 200, "data": []})
    client = InfoSimplesClient(api_key="tok", base_url="https://api.infosimples.com/api/v2/consultas/anvisa/")

    await client.consultar_registro("80146170001")

    assert mock_post.call_args.args[0] == "https://api.infosimples.com/api/v2/consultas/anvisa/registro"
    assert mock_post.call_args.kwargs["json"] == {"token": "tok", "numero_registro": "80146170001"}

    mock_post.return_value = response(502, {})
    with pytest.raises(ExternalServiceError, match="API error: 502"):
        await client.buscar_registros("stent")


def test_registry_prefers_anthropic_and_reuses_client():
    registry = ClientRegistry(Settings(anthropic_api_key="a", openai_api_key="o"))

    llm = registry.llm()
    assert isinstance(llm, AnthropicClient)
    assert registry.llm() is llm


def test_registry_falls_back_to_openai_at_zero_temperature():
    llm = ClientRegistry(Settings(anthropic_api_key="", openai_api_key="o")).llm()

    assert isinstance(llm, OpenAIClient)
    assert llm.temperature == 0.0


def test_registry_without_keys_raises_configuration_error():
    registry = ClientRegistry(Settings(anthropic_api_key="", openai_api_key="", infosimples_api_key=""))

    with pytest.raises(ConfigurationError):
        registry.llm()
    with pytest.raises(ConfigurationError, match="INFOSIMPLES_API_KEY"):
        registry.infosimples()


def test_reply_defaults():
    reply = LLMReply(text="x")
    assert reply.tool_invocations == []
    assert reply.assistant_message == {}
