"""Finance agent state, plan directives and phase transitions"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class AgentPhase(str, Enum):
    PLANNING = "planning"
    EXECUTING = "executing"
    ANALYZING = "analyzing"
    DONE = "done"


@dataclass
class ToolCall:
    tool: str
    params: Dict[str, Any]
    reason: str = ""


@dataclass
class ToolResult:
    """Uniform outcome of one tool execution"""

    tool: str
    success: bool
    data: Any = None
    error: Optional[str] = None


@dataclass
class AgentResponse:
    data: Dict[str, Any]
    confidence: float
    action: str = "respond"


@dataclass
class ExecuteToolPlan:
    tool: str
    params: Dict[str, Any]
    reason: str


@dataclass
class RespondPlan:
    data: Dict[str, Any]
    confidence: float = 0.9


@dataclass
class NeedInfoPlan:
    questions: List[str]


@dataclass
class ParseFailure:
    """LLM output that could not be read as a directive"""

    raw: str
    reason: str


PlanResult = Union[ExecuteToolPlan, RespondPlan, NeedInfoPlan, ParseFailure]

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def _load_json_object(text: str) -> Dict[str, Any]:
    stripped = text.strip()
    fenced = _FENCE_RE.match(stripped)
    if fenced:
        stripped = fenced.group(1)
    payload = json.loads(stripped)
    if not isinstance(payload, dict):
        raise ValueError("directive is not a JSON object")
    return payload


def parse_plan(text: str) -> PlanResult:
    """
    Read an LLM reply as a plan directive.

    Accepted shapes:
        {"action": "execute_tool", "tool": ..., "params": {...}, "reason": ...}
        {"action": "respond", "data": {...}, "confidence": 0.95}
        {"action": "need_info", "questions": [...]}

    Anything else becomes a ParseFailure carrying the raw text.
    """
    try:
        payload = _load_json_object(text)
    except ValueError as e:
        return ParseFailure(raw=text, reason=f"invalid JSON: {e}")

    action = payload.get("action")
    if action == "execute_tool":
        tool = payload.get("tool")
        if not isinstance(tool, str) or not tool:
            return ParseFailure(raw=text, reason="execute_tool without tool name")
        params = payload.get("params") or {}
        if not isinstance(params, dict):
            return ParseFailure(raw=text, reason="params must be an object")
        return ExecuteToolPlan(tool=tool, params=params, reason=str(payload.get("reason") or ""))

    if action == "respond":
        data = payload.get("data")
        if not isinstance(data, dict):
            return ParseFailure(raw=text, reason="respond without data object")
        confidence = payload.get("confidence")
        if confidence is None:
            return RespondPlan(data=data)
        try:
            return RespondPlan(data=data, confidence=float(confidence))
        except (TypeError, ValueError):
            return ParseFailure(raw=text, reason=f"invalid confidence: {confidence!r}")

    if action == "need_info":
        questions = payload.get("questions") or []
        return NeedInfoPlan(questions=[str(q) for q in questions])

    return ParseFailure(raw=text, reason=f"unknown action: {action!r}")


@dataclass
class FinanceAgentState:
    task: str
    context: Dict[str, Any]
    empresa_id: str
    user_id: str
    phase: AgentPhase = AgentPhase.PLANNING
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_results: List[ToolResult] = field(default_factory=list)
    response: Optional[AgentResponse] = None
    parse_failure: Optional[ParseFailure] = None


def next_phase(state: FinanceAgentState) -> AgentPhase:
    """
    Transition function of the plan -> execute -> analyze flow.

    Planning ends the run unless a tool call was planned; there are no
    back-edges.
    """
    if state.phase == AgentPhase.PLANNING:
        return AgentPhase.EXECUTING if state.tool_calls else AgentPhase.DONE
    if state.phase == AgentPhase.EXECUTING:
        return AgentPhase.ANALYZING
    return AgentPhase.DONE
