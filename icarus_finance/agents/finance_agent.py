"""Finance agent - plan, execute and analyze over finance tools"""

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Protocol

from icarus_finance.agents.prompts import ANALYSIS_PROMPT_TEMPLATE, FINANCE_AGENT_PROMPT
from icarus_finance.agents.state import (
    AgentPhase,
    AgentResponse,
    ExecuteToolPlan,
    FinanceAgentState,
    NeedInfoPlan,
    ParseFailure,
    RespondPlan,
    ToolCall,
    ToolResult,
    next_phase,
    parse_plan,
)
from icarus_finance.infrastructure.clients.llm import LLMClient

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.7


class ToolRunner(Protocol):
    async def run(self, tool: str, params: Dict[str, Any], empresa_id: str) -> ToolResult: ...


@dataclass
class AgentRun:
    """Final state of one agent invocation"""

    state: FinanceAgentState

    @property
    def outcome(self) -> str:
        if self.state.response is not None:
            return self.state.response.action
        if self.state.parse_failure is not None:
            return "parse_failure"
        return "empty"

    @property
    def tools_used(self) -> List[str]:
        return [result.tool for result in self.state.tool_results]


class FinanceAgent:
    """
    Three-phase agent: one planning LLM call, sequential tool execution,
    one analysis LLM call. No retries, no cycles.

    A planning reply that is not a valid directive stops the run with
    `state.parse_failure` set; callers decide how to surface it.
    """

    def __init__(self, llm: LLMClient, tools: ToolRunner):
        self.llm = llm
        self.tools = tools

    async def plan(self, state: FinanceAgentState) -> None:
        context = json.dumps(state.context, ensure_ascii=False, default=str)
        reply = await self.llm.chat(
            FINANCE_AGENT_PROMPT,
            [{"role": "user", "content": f"Tarefa: {state.task}\nContexto: {context}"}],
        )

        plan = parse_plan(reply.text)
        if isinstance(plan, ExecuteToolPlan):
            state.tool_calls = [ToolCall(tool=plan.tool, params=plan.params, reason=plan.reason)]
        elif isinstance(plan, RespondPlan):
            state.response = AgentResponse(data=plan.data, confidence=plan.confidence)
        elif isinstance(plan, NeedInfoPlan):
            state.response = AgentResponse(
                action="need_info",
                data={"questions": plan.questions},
                confidence=0.0,
            )
        else:
            logger.warning(f"Unparsable plan from LLM: {plan.reason}")
            state.parse_failure = plan

    async def execute(self, state: FinanceAgentState) -> None:
        results = []
        for call in state.tool_calls:
            results.append(await self.tools.run(call.tool, call.params, state.empresa_id))
        state.tool_results = results

    async def analyze(self, state: FinanceAgentState) -> None:
        if not state.tool_results:
            return

        results = json.dumps([asdict(r) for r in state.tool_results], ensure_ascii=False, indent=2, default=str)
        reply = await self.llm.chat(
            FINANCE_AGENT_PROMPT,
            [{"role": "user", "content": ANALYSIS_PROMPT_TEMPLATE.format(task=state.task, results=results)}],
        )

        plan = parse_plan(reply.text)
        if isinstance(plan, RespondPlan):
            state.response = AgentResponse(data=plan.data, confidence=plan.confidence)
        else:
            state.response = AgentResponse(data={"resumo": reply.text}, confidence=FALLBACK_CONFIDENCE)

    async def step(self, state: FinanceAgentState) -> None:
        """Run the current phase and advance to the next one"""
        if state.phase == AgentPhase.PLANNING:
            await self.plan(state)
        elif state.phase == AgentPhase.EXECUTING:
            await self.execute(state)
        elif state.phase == AgentPhase.ANALYZING:
            await self.analyze(state)
        state.phase = next_phase(state)

    async def run(
        self,
        task: str,
        context: Optional[Dict[str, Any]],
        empresa_id: str,
        user_id: str,
    ) -> AgentRun:
        state = FinanceAgentState(task=task, context=context or {}, empresa_id=empresa_id, user_id=user_id)
        while state.phase != AgentPhase.DONE:
            await self.step(state)
        return AgentRun(state=state)


def describe_failure(failure: ParseFailure) -> Dict[str, Any]:
    return {"raw": failure.raw, "reason": failure.reason}
