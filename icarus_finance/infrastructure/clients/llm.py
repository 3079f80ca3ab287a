"""Chat-completion clients for Anthropic and OpenAI with tool calling"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx

from icarus_finance.domain.exceptions import LLMAPIError
from icarus_finance.infrastructure.observability.metrics import external_failure_counter, llm_latency_histogram


@dataclass
class ToolSpec:
    """Provider-neutral function declaration (JSON Schema parameters)"""

    name: str
    description: str
    parameters: Dict[str, Any]


@dataclass
class ToolInvocation:
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class LLMReply:
    """
    Result of one chat call.

    `assistant_message` is the provider-native assistant turn, echoed back
    when sending tool results.
    """

    text: str
    tool_invocations: List[ToolInvocation] = field(default_factory=list)
    assistant_message: Dict[str, Any] = field(default_factory=dict)


class LLMClient(Protocol):
    provider: str

    async def chat(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolSpec]] = None,
    ) -> LLMReply: ...

    def tool_result_messages(self, reply: LLMReply, outputs: Dict[str, Any]) -> List[Dict[str, Any]]: ...


def extract_message_text(content: Any) -> str:
    """
    Flatten message content to text.

    Strings pass through, lists of content blocks have their text blocks
    joined by newlines, anything else yields "".
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "\n".join(parts)
    return ""


class _HTTPChatClient:
    """Shared POST + error mapping for provider clients"""

    provider = "generic"

    def __init__(self, timeout: float):
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        raise NotImplementedError

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with llm_latency_histogram.labels(provider=self.provider).time():
                    response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                external_failure_counter.labels(service=self.provider).inc()
                raise LLMAPIError(f"{self.provider} API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                external_failure_counter.labels(service=self.provider).inc()
                raise LLMAPIError(
                    f"{self.provider} API error: {e.response.status_code} {e.response.text}"
                ) from e
            except httpx.RequestError as e:
                external_failure_counter.labels(service=self.provider).inc()
                raise LLMAPIError(f"{self.provider} API unreachable: {e}") from e
            except ValueError as e:
                raise LLMAPIError(f"Invalid JSON from {self.provider}: {e}") from e


class AnthropicClient(_HTTPChatClient):
    """Client for the Anthropic Messages API"""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.anthropic.com/v1",
        version: str = "2023-06-01",
        temperature: float = 0.2,
        max_tokens: int = 4096,
        timeout: float = 30.0,
    ):
        super().__init__(timeout)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.version,
            "content-type": "application/json",
        }

    async def chat(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolSpec]] = None,
    ) -> LLMReply:
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system,
            "messages": messages,
        }
        if tools:
            payload["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.parameters} for t in tools
            ]

        data = await self._post(f"{self.base_url}/messages", payload)

        try:
            content = data["content"]
            invocations = [
                ToolInvocation(id=block["id"], name=block["name"], arguments=block.get("input") or {})
                for block in content
                if block.get("type") == "tool_use"
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise LLMAPIError(f"Unexpected anthropic response shape: {e}") from e

        return LLMReply(
            text=extract_message_text(content),
            tool_invocations=invocations,
            assistant_message={"role": "assistant", "content": content},
        )

    def tool_result_messages(self, reply: LLMReply, outputs: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            reply.assistant_message,
            {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": invocation.id,
                        "content": json.dumps(outputs.get(invocation.id), ensure_ascii=False, default=str),
                    }
                    for invocation in reply.tool_invocations
                ],
            },
        ]


class OpenAIClient(_HTTPChatClient):
    """Client for the OpenAI Chat Completions API"""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        timeout: float = 30.0,
    ):
        super().__init__(timeout)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[ToolSpec]] = None,
    ) -> LLMReply:
        payload: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "system", "content": system}, *messages],
        }
        if tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {"name": t.name, "description": t.description, "parameters": t.parameters},
                }
                for t in tools
            ]
            payload["tool_choice"] = "auto"

        data = await self._post(f"{self.base_url}/chat/completions", payload)

        try:
            message = data["choices"][0]["message"]
            invocations = [
                ToolInvocation(
                    id=call["id"],
                    name=call["function"]["name"],
                    arguments=json.loads(call["function"].get("arguments") or "{}"),
                )
                for call in message.get("tool_calls") or []
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMAPIError(f"Unexpected openai response shape: {e}") from e

        return LLMReply(
            text=extract_message_text(message.get("content")),
            tool_invocations=invocations,
            assistant_message=message,
        )

    def tool_result_messages(self, reply: LLMReply, outputs: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            reply.assistant_message,
            *[
                {
                    "role": "tool",
                    "tool_call_id": invocation.id,
                    "content": json.dumps(outputs.get(invocation.id), ensure_ascii=False, default=str),
                }
                for invocation in reply.tool_invocations
            ],
        ]
