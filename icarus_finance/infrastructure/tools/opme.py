"""OPME assistant tools: stock, lot expiry, surgeries and ANVISA registry"""

import logging
import re
import time
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from icarus_finance.domain.exceptions import DomainException
from icarus_finance.infrastructure.clients.infosimples import InfoSimplesClient
from icarus_finance.infrastructure.clients.llm import ToolSpec
from icarus_finance.infrastructure.database.repositories import (
    AgentAuditRepository,
    StockRepository,
    SurgeryRepository,
    row_to_dict,
)
from icarus_finance.infrastructure.observability.logging import log_tool_call
from icarus_finance.infrastructure.observability.metrics import record_tool_call
from icarus_finance.utils.date_utils import parse_iso_date

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 90
REGIONS = ["Norte", "Nordeste", "Centro-Oeste", "Sudeste", "Sul"]

OPME_TOOLS: List[ToolSpec] = [
    ToolSpec(
        name="estoque_disponivel",
        description=(
            "Retorna estoque físico, reservado e disponível por depósito/região. "
            "Use para verificar disponibilidade de produtos."
        ),
        parameters={
            "type": "object",
            "properties": {
                "produto_id": {"type": "string", "description": "UUID do produto ou código interno"},
                "produto_nome": {"type": "string", "description": "Nome ou descrição do produto para busca"},
                "regiao": {
                    "type": "string",
                    "enum": REGIONS,
                    "description": "Região geográfica para filtrar depósitos",
                },
                "deposito_id": {"type": "string", "description": "UUID específico do depósito (opcional)"},
            },
            "required": [],
        },
    ),
    ToolSpec(
        name="previsao_vencimento_lote",
        description=(
            "Retorna os lotes que vencem mais próximo para um produto. Essencial para gestão FEFO "
            "(First Expire, First Out) conforme RDC 59/2008."
        ),
        parameters={
            "type": "object",
            "properties": {
                "produto_id": {"type": "string", "description": "UUID do produto"},
                "produto_nome": {"type": "string", "description": "Nome do produto para busca"},
                "vencimento_minimo": {"type": "string", "description": "Data mínima de vencimento (YYYY-MM-DD)"},
                "limite": {"type": "integer", "description": "Quantidade de lotes a retornar (padrão: 3)"},
            },
            "required": [],
        },
    ),
    ToolSpec(
        name="verificar_cirurgia_agendada",
        description=(
            "Consulta detalhes de cirurgias agendadas, incluindo produtos necessários e status de disponibilidade."
        ),
        parameters={
            "type": "object",
            "properties": {
                "data_cirurgia": {"type": "string", "description": "Data da cirurgia (YYYY-MM-DD)"},
                "hospital": {"type": "string", "description": "Nome ou código do hospital"},
                "tipo_procedimento": {
                    "type": "string",
                    "description": "Tipo de procedimento (ex: angioplastia, artroplastia)",
                },
            },
            "required": [],
        },
    ),
    ToolSpec(
        name="validar_anvisa_infosimples",
        description=(
            "Consulta em tempo real o registro ANVISA via InfoSimples API. Verifica se um produto tem registro "
            "válido, classe de risco, data de validade e situação atual. Essencial para conformidade RDC 751/2022."
        ),
        parameters={
            "type": "object",
            "properties": {
                "numero_registro": {"type": "string", "description": "Número do registro ANVISA (apenas números)"},
                "produto_id": {"type": "string", "description": "UUID do produto no sistema (opcional)"},
            },
            "required": ["numero_registro"],
        },
    ),
    ToolSpec(
        name="buscar_registros_anvisa",
        description=(
            "Busca registros ANVISA por termo (nome do produto, fabricante, etc). "
            "Retorna lista de produtos encontrados na base da ANVISA."
        ),
        parameters={
            "type": "object",
            "properties": {
                "termo": {"type": "string", "description": "Termo de busca (mínimo 3 caracteres)"},
                "limite": {"type": "integer", "description": "Quantidade máxima de resultados (padrão: 10)"},
            },
            "required": ["termo"],
        },
    ),
]


def _failure(message: str, **extra: Any) -> Dict[str, Any]:
    return {"erro": message, "sucesso": False, **extra}


def _describe_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'argumentos'}: {err['msg']}"
        for err in error.errors()
    )


def _iso_date(value: Any) -> Any:
    """Accept the ISO date or datetime strings the LLM sends"""
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("esperada data ISO (AAAA-MM-DD)")
    return parse_iso_date(value) if value else None


class EstoqueDisponivelParams(BaseModel):
    produto_id: Optional[str] = None
    produto_nome: Optional[str] = None
    regiao: Optional[str] = None
    deposito_id: Optional[str] = None


class PrevisaoVencimentoParams(BaseModel):
    produto_id: Optional[str] = None
    produto_nome: Optional[str] = None
    vencimento_minimo: Optional[date] = None
    limite: Optional[int] = Field(None, ge=1, le=50)

    @field_validator("vencimento_minimo", mode="before")
    @classmethod
    def parse_vencimento(cls, value: Any) -> Any:
        return _iso_date(value)


class CirurgiaAgendadaParams(BaseModel):
    data_cirurgia: Optional[date] = None
    hospital: Optional[str] = None
    tipo_procedimento: Optional[str] = None

    @field_validator("data_cirurgia", mode="before")
    @classmethod
    def parse_data(cls, value: Any) -> Any:
        return _iso_date(value)


class ValidarAnvisaParams(BaseModel):
    numero_registro: str = ""

    @field_validator("numero_registro", mode="before")
    @classmethod
    def digits_as_text(cls, value: Any) -> Any:
        # registration numbers sometimes arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return "" if value is None else value


class BuscarRegistrosParams(BaseModel):
    termo: str = ""
    limite: Optional[int] = Field(None, ge=1, le=50)


def registry_status(registro: Dict[str, Any], today: Optional[date] = None) -> str:
    """Registry situation, downgrading ATIVO to VENCIDO past its validity date"""
    situacao = registro.get("situacao")
    valido_ate = registro.get("valido_ate")
    if valido_ate and situacao == "ATIVO":
        try:
            if parse_iso_date(str(valido_ate)) < (today or date.today()):
                return "VENCIDO"
        except ValueError:
            return situacao
    return situacao


class OpmeToolbox:
    """
    Assistant tool handlers for one request.

    Every execution is written to ai_agent_tools_log. Handlers return the
    `{sucesso, ...}` / `{erro, sucesso: False}` payloads sent back to the LLM.
    """

    def __init__(self, db: Session, infosimples_client: Callable[[], InfoSimplesClient]):
        self.db = db
        self.infosimples_client = infosimples_client
        self.handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "estoque_disponivel": self.estoque_disponivel,
            "previsao_vencimento_lote": self.previsao_vencimento_lote,
            "verificar_cirurgia_agendada": self.verificar_cirurgia_agendada,
            "validar_anvisa_infosimples": self.validar_anvisa_infosimples,
            "buscar_registros_anvisa": self.buscar_registros_anvisa,
        }

    async def estoque_disponivel(self, args: Dict[str, Any]) -> Dict[str, Any]:
        p = EstoqueDisponivelParams.model_validate(args)
        positions = StockRepository(self.db).positions(
            produto_id=p.produto_id,
            produto_nome=p.produto_nome,
            regiao=p.regiao,
            deposito_id=p.deposito_id,
        )
        depositos = []
        for position in positions:
            item = row_to_dict(position)
            item["quantidade_disponivel"] = position.quantidade_fisica - position.quantidade_reservada
            depositos.append(item)

        return {
            "sucesso": True,
            "produto": p.produto_nome or p.produto_id,
            "regiao": p.regiao or "Todas",
            "depositos": depositos,
            "total_depositos": len(depositos),
        }

    async def previsao_vencimento_lote(self, args: Dict[str, Any]) -> Dict[str, Any]:
        p = PrevisaoVencimentoParams.model_validate(args)
        lots = StockRepository(self.db).nearest_expiring_lots(
            produto_id=p.produto_id,
            vencimento_minimo=p.vencimento_minimo,
            limit=p.limite or 3,
        )

        warning_limit = date.today() + timedelta(days=EXPIRY_WARNING_DAYS)
        lotes = []
        for lot in lots:
            item = row_to_dict(lot)
            item["status_alerta"] = "atenção" if lot.data_vencimento <= warning_limit else "ok"
            lotes.append(item)

        return {
            "sucesso": True,
            "produto": p.produto_nome or p.produto_id,
            "lotes": lotes,
            "total_lotes": len(lotes),
            "alertas": [lote for lote in lotes if lote["status_alerta"] == "atenção"],
        }

    async def verificar_cirurgia_agendada(self, args: Dict[str, Any]) -> Dict[str, Any]:
        p = CirurgiaAgendadaParams.model_validate(args)
        surgeries = SurgeryRepository(self.db).search(
            data_cirurgia=p.data_cirurgia,
            hospital=p.hospital,
            procedimento=p.tipo_procedimento,
        )
        return {
            "sucesso": True,
            "filtros": args,
            "cirurgias": [row_to_dict(s) for s in surgeries],
            "total": len(surgeries),
        }

    async def validar_anvisa_infosimples(self, args: Dict[str, Any]) -> Dict[str, Any]:
        p = ValidarAnvisaParams.model_validate(args)
        numero = re.sub(r"\D", "", p.numero_registro)
        if len(numero) < 8:
            return _failure("Número de registro inválido")

        data = await self.infosimples_client().consultar_registro(numero)
        if data.get("code") != 200 or not data.get("data"):
            return _failure(
                data.get("code_message") or "Registro não encontrado na ANVISA",
                numero_consultado=numero,
            )

        registro = data["data"][0]
        situacao = registry_status(registro)
        return {
            "sucesso": True,
            "valido": situacao == "ATIVO",
            "registro": {
                "numero_registro": registro.get("numero_registro"),
                "nome_comercial": registro.get("nome_comercial"),
                "titular": registro.get("titular"),
                "situacao": situacao,
                "valido_ate": registro.get("valido_ate"),
                "classe_risco": registro.get("classe_risco"),
                "motivo_cancelamento": registro.get("motivo_cancelamento"),
            },
            "conformidade_rdc_751_2022": situacao == "ATIVO",
        }

    async def buscar_registros_anvisa(self, args: Dict[str, Any]) -> Dict[str, Any]:
        p = BuscarRegistrosParams.model_validate(args)
        termo = p.termo.strip()
        if len(termo) < 3:
            return _failure("Termo deve ter pelo menos 3 caracteres")

        data = await self.infosimples_client().buscar_registros(termo, p.limite or 10)
        if data.get("code") != 200:
            return _failure(data.get("code_message") or "Erro na busca ANVISA", registros=[])

        registros = data.get("data") or []
        return {
            "sucesso": True,
            "termo_buscado": termo,
            "total": len(registros),
            "registros": [
                {
                    "numero_registro": r.get("numero_registro"),
                    "nome_comercial": r.get("nome_comercial"),
                    "titular": r.get("titular"),
                    "situacao": r.get("situacao"),
                    "classe_risco": r.get("classe_risco"),
                }
                for r in registros
            ],
        }

    async def execute(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        """Run a tool by name and record it in the tool log"""
        started = time.time()
        handler = self.handlers.get(name)

        if handler is None:
            result = _failure(f"Ferramenta desconhecida: {name}")
        else:
            try:
                result = await handler(args)
            except ValidationError as e:
                result = _failure(f"Parâmetros inválidos: {_describe_errors(e)}")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Database error in tool {name}: {e}")
                result = _failure("Erro ao acessar o banco de dados")
            except DomainException as e:
                result = _failure(str(e))

        elapsed_ms = int((time.time() - started) * 1000)
        success = result.get("sucesso") is not False
        AgentAuditRepository(self.db).log_tool(name, args, result, elapsed_ms, success)
        record_tool_call(name, success)
        log_tool_call(name, success, elapsed_ms, result.get("erro"))
        return result
