"""Unit tests for the OPME assistant loop"""

from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest

from fakes import FakeLLM
from icarus_finance.agents.assistant import OpmeAssistant
from icarus_finance.domain.exceptions import LLMAPIError
from icarus_finance.infrastructure.clients.llm import LLMReply, ToolInvocation


class RecordingTools:
    def __init__(self):
        self.calls: List[tuple] = []

    async def execute(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((name, args))
        return {"sucesso": True, "tool": name}


def tool_reply(*names: str) -> LLMReply:
    return LLMReply(
        text="Vou consultar.",
        tool_invocations=[ToolInvocation(id=f"call-{i}", name=name, arguments={"produto_id": "p1"})
                          for i, name in enumerate(names)],
    )


async def test_plain_answer_uses_single_call():
    llm = FakeLLM(["A RDC 751/2022 trata do registro de dispositivos médicos."])
    tools = RecordingTools()

    reply = await OpmeAssistant(llm, tools).process("O que é a RDC 751?")

    assert reply.resposta.startswith("A RDC 751/2022")
    assert reply.ferramentas_usadas == []
    assert reply.dados_estruturados == {}
    assert len(llm.calls) == 1
    assert {spec.name for spec in llm.calls[0]["tools"]} >= {"estoque_disponivel", "validar_anvisa_infosimples"}


async def test_tools_run_in_order_then_second_call_answers():
    llm = FakeLLM([tool_reply("estoque_disponivel", "previsao_vencimento_lote"), "Há 25 unidades disponíveis."])
    tools = RecordingTools()

    reply = await OpmeAssistant(llm, tools).process("Tem stent em SP?", {"usuario": "ana"})

    assert [name for name, _ in tools.calls] == ["estoque_disponivel", "previsao_vencimento_lote"]
    assert reply.ferramentas_usadas == ["estoque_disponivel", "previsao_vencimento_lote"]
    assert reply.dados_estruturados["estoque_disponivel"] == {"sucesso": True, "tool": "estoque_disponivel"}
    assert reply.resposta == "Há 25 unidades disponíveis."

    follow_up = llm.calls[1]["messages"]
    assert follow_up[0] == {"role": "user", "content": "Tem stent em SP?"}
    assert follow_up[-1]["content"][0]["tool_result"]["call-1"]["tool"] == "previsao_vencimento_lote"


async def test_context_is_rendered_into_system_prompt():
    llm = FakeLLM(["ok"])
    await OpmeAssistant(llm, RecordingTools()).process("oi", {"hospital": "HC"})

    assert 'Contexto adicional: {"hospital": "HC"}' in llm.calls[0]["system"]


async def test_failed_follow_up_keeps_first_text():
    llm = FakeLLM([tool_reply("estoque_disponivel"), LLMAPIError("anthropic API error: 529")])

    reply = await OpmeAssistant(llm, RecordingTools()).process("Estoque?")

    assert reply.resposta == "Vou consultar."
    assert reply.ferramentas_usadas == ["estoque_disponivel"]


async def test_first_call_failure_propagates():
    llm = FakeLLM([LLMAPIError("openai API unreachable")])
    tools = AsyncMock()

    with pytest.raises(LLMAPIError, match="unreachable"):
        await OpmeAssistant(llm, tools).process("Estoque?")
    tools.execute.assert_not_called()
