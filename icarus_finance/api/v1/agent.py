"""POST /v1/finance-agent - plan/execute/analyze finance agent"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from icarus_finance.agents.finance_agent import FinanceAgent, describe_failure
from icarus_finance.api.dependencies import get_clients, get_finance_toolbox, get_request_id
from icarus_finance.api.v1.schemas import FinanceAgentRequest, FinanceAgentResponse
from icarus_finance.domain.exceptions import ConfigurationError, LLMAPIError
from icarus_finance.infrastructure.clients.registry import ClientRegistry
from icarus_finance.infrastructure.database.session import get_db
from icarus_finance.infrastructure.observability.logging import log_agent_run
from icarus_finance.infrastructure.observability.metrics import agent_run_counter
from icarus_finance.infrastructure.tools.finance import FinanceToolbox

router = APIRouter()


@router.post("/finance-agent", response_model=FinanceAgentResponse)
async def run_finance_agent(
    request_body: FinanceAgentRequest,
    request: Request,
    db: Session = Depends(get_db),
    clients: ClientRegistry = Depends(get_clients),
    toolbox: FinanceToolbox = Depends(get_finance_toolbox),
):
    """
    Run the finance agent for one task.

    Flow:
    1. Ask the LLM for a directive (tool call, answer or clarifying questions)
    2. Execute the requested tool against the company's data
    3. Ask the LLM to analyze the tool results
    4. Commit alerts and suggestions written by the tools
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        agent = FinanceAgent(clients.llm(), toolbox.registry())
        run = await agent.run(
            request_body.task,
            request_body.context,
            request_body.empresa_id,
            request_body.user_id,
        )
        db.commit()

    except ConfigurationError as e:
        db.rollback()
        agent_run_counter.labels(agent="finance", outcome="error").inc()
        logging.error(f"Finance agent misconfigured: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=str(e))

    except LLMAPIError as e:
        db.rollback()
        agent_run_counter.labels(agent="finance", outcome="error").inc()
        logging.error(f"LLM API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="LLM service unavailable")

    except Exception as e:
        db.rollback()
        agent_run_counter.labels(agent="finance", outcome="error").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    agent_run_counter.labels(agent="finance", outcome=run.outcome).inc()
    log_agent_run(request_id, request_body.empresa_id, run.outcome, run.tools_used, duration_ms)

    state = run.state
    if state.response is not None:
        return FinanceAgentResponse(
            action=state.response.action,
            data=state.response.data,
            confidence=state.response.confidence,
            tools_used=run.tools_used,
        )
    if state.parse_failure is not None:
        return FinanceAgentResponse(
            action="parse_failure",
            data=describe_failure(state.parse_failure),
            confidence=0.0,
            tools_used=run.tools_used,
        )
    return FinanceAgentResponse(action=run.outcome, data={}, confidence=0.0, tools_used=run.tools_used)
