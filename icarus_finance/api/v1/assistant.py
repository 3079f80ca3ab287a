"""POST /v1/assistant - OPME assistant with tool calling"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from icarus_finance.agents.assistant import FALLBACK_REPLY, OpmeAssistant
from icarus_finance.api.dependencies import get_clients, get_opme_toolbox, get_request_id
from icarus_finance.api.v1.schemas import AssistantRequest, AssistantResponse
from icarus_finance.infrastructure.clients.registry import ClientRegistry
from icarus_finance.infrastructure.database.repositories import AgentAuditRepository
from icarus_finance.infrastructure.database.session import get_db
from icarus_finance.infrastructure.observability.metrics import agent_run_counter
from icarus_finance.infrastructure.tools.opme import OpmeToolbox

router = APIRouter()


@router.post("/assistant", response_model=AssistantResponse)
async def ask_assistant(
    request_body: AssistantRequest,
    request: Request,
    db: Session = Depends(get_db),
    clients: ClientRegistry = Depends(get_clients),
    toolbox: OpmeToolbox = Depends(get_opme_toolbox),
):
    """Answer an OPME question, calling stock, lot, surgery and ANVISA tools as needed"""
    request_id = get_request_id(request)

    if not request_body.mensagem.strip():
        return JSONResponse(status_code=400, content={"error": "Mensagem é obrigatória"})

    try:
        assistant = OpmeAssistant(clients.llm(), toolbox)
        reply = await assistant.process(request_body.mensagem, request_body.contexto)

        if request_body.usuario_id:
            AgentAuditRepository(db).upsert_chat_session(
                usuario_id=request_body.usuario_id,
                last_message=request_body.mensagem,
                last_response=reply.resposta,
                tools_used=reply.ferramentas_usadas,
            )
        db.commit()

    except Exception as e:
        db.rollback()
        agent_run_counter.labels(agent="assistant", outcome="error").inc()
        logging.error(f"Assistant error: {e}", extra={"request_id": request_id})
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(e) or "Erro interno do servidor",
                "resposta": FALLBACK_REPLY,
            },
        )

    agent_run_counter.labels(agent="assistant", outcome="respond").inc()
    return AssistantResponse(
        resposta=reply.resposta,
        ferramentas_usadas=reply.ferramentas_usadas,
        dados_estruturados=reply.dados_estruturados,
    )
