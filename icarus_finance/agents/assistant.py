"""Tool-calling OPME assistant"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from icarus_finance.agents.prompts import OPME_ASSISTANT_PROMPT
from icarus_finance.domain.exceptions import LLMAPIError
from icarus_finance.infrastructure.clients.llm import LLMClient, ToolSpec
from icarus_finance.infrastructure.tools.opme import OPME_TOOLS

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Desculpe, ocorreu um erro ao processar sua solicitação. Tente novamente."


class ToolExecutor(Protocol):
    async def execute(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]: ...


@dataclass
class AssistantReply:
    resposta: str
    ferramentas_usadas: List[str] = field(default_factory=list)
    dados_estruturados: Dict[str, Any] = field(default_factory=dict)


class OpmeAssistant:
    """
    Answers a user message with at most two LLM calls.

    The first call carries the tool schema. Requested tools run sequentially,
    and if any ran, a second call with their results writes the final answer.
    A failed second call keeps the first call's text.
    """

    def __init__(self, llm: LLMClient, tools: ToolExecutor, tool_specs: Optional[List[ToolSpec]] = None):
        self.llm = llm
        self.tools = tools
        self.tool_specs = tool_specs if tool_specs is not None else OPME_TOOLS

    async def process(self, mensagem: str, contexto: Optional[Dict[str, Any]] = None) -> AssistantReply:
        system = OPME_ASSISTANT_PROMPT.format(
            context=json.dumps(contexto or {}, ensure_ascii=False, default=str)
        )
        messages: List[Dict[str, Any]] = [{"role": "user", "content": mensagem}]

        first = await self.llm.chat(system, messages, tools=self.tool_specs)
        reply = AssistantReply(resposta=first.text)

        outputs: Dict[str, Any] = {}
        for invocation in first.tool_invocations:
            result = await self.tools.execute(invocation.name, invocation.arguments)
            outputs[invocation.id] = result
            reply.ferramentas_usadas.append(invocation.name)
            reply.dados_estruturados[invocation.name] = result

        if not outputs:
            return reply

        follow_up = messages + self.llm.tool_result_messages(first, outputs)
        try:
            second = await self.llm.chat(system, follow_up, tools=self.tool_specs)
        except LLMAPIError as e:
            logger.warning(f"Follow-up LLM call failed, keeping first reply: {e}")
            return reply

        if second.text:
            reply.resposta = second.text
        return reply
