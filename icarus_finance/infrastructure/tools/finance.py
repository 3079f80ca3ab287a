"""Finance agent tools backed by the database and the pluggy-sync edge function"""

from dataclasses import asdict
from datetime import date
from typing import Any, Callable, Dict, Literal, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from icarus_finance.agents.state import ToolResult
from icarus_finance.domain.tariffs import build_tariff_summary
from icarus_finance.infrastructure.clients.pluggy import PluggySyncClient
from icarus_finance.infrastructure.database.repositories import (
    BankTransactionRepository,
    FinanceAlertRepository,
    FinanceSuggestionRepository,
    InvoiceRepository,
    row_to_dict,
)
from icarus_finance.infrastructure.tools.registry import ToolRegistry
from icarus_finance.utils.date_utils import calculate_period_start

AI_CONFIDENCE = 85


class ConsultarTransacoesParams(BaseModel):
    conta_id: Optional[str] = None
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    tipo: Optional[Literal["credito", "debito"]] = None
    categoria: Optional[str] = None


class AnalisarTarifasParams(BaseModel):
    periodo: Literal["mes", "trimestre", "ano"] = "mes"


class ConsultarFaturasParams(BaseModel):
    status: Optional[Literal["pendente", "paga", "vencida"]] = None
    cliente_id: Optional[str] = None


class GerarAlertaParams(BaseModel):
    tipo: str
    severidade: Literal["info", "baixa", "media", "alta", "critica"]
    titulo: str
    descricao: str
    valor: Optional[float] = None


class CriarSugestaoParams(BaseModel):
    tipo: Literal["emprestimo", "quitacao", "renegociacao", "troca_banco", "investimento"]
    titulo: str
    descricao: str
    economia_estimada: Optional[float] = None
    prioridade: Literal["baixa", "media", "alta"]


class SincronizarPluggyParams(BaseModel):
    conta_id: str


class FinanceToolbox:
    """Tool handlers for one request, bound to its database session"""

    def __init__(self, db: Session, pluggy_client: Callable[[], PluggySyncClient]):
        self.db = db
        # Resolved lazily so missing Supabase credentials only fail this tool
        self.pluggy_client = pluggy_client

    async def consultar_transacoes(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = ConsultarTransacoesParams.model_validate(params)
        rows = BankTransactionRepository(self.db).search(
            empresa_id,
            conta_id=p.conta_id,
            data_inicio=p.data_inicio,
            data_fim=p.data_fim,
            tipo=p.tipo,
            categoria=p.categoria,
        )
        return ToolResult(tool="consultar_transacoes", success=True, data=[row_to_dict(r) for r in rows])

    async def analisar_tarifas(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = AnalisarTarifasParams.model_validate(params)
        since = calculate_period_start(p.periodo)
        fees = BankTransactionRepository(self.db).fees_since(empresa_id, since)
        summary = build_tariff_summary([row_to_dict(r) for r in fees], p.periodo)
        return ToolResult(tool="analisar_tarifas", success=True, data=asdict(summary))

    async def consultar_faturas(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = ConsultarFaturasParams.model_validate(params)
        invoices = InvoiceRepository(self.db).search(empresa_id, status=p.status, cliente_id=p.cliente_id)

        faturas = []
        por_status: Dict[str, int] = {}
        for invoice in invoices:
            item = row_to_dict(invoice)
            item["parcelas"] = [row_to_dict(parcela) for parcela in invoice.parcelas]
            item["cliente"] = (
                {"nome": invoice.cliente.nome, "razao_social": invoice.cliente.razao_social}
                if invoice.cliente
                else None
            )
            faturas.append(item)
            por_status[invoice.status] = por_status.get(invoice.status, 0) + 1

        return ToolResult(
            tool="consultar_faturas",
            success=True,
            data={
                "total": len(invoices),
                "valor_total": sum(invoice.valor_liquido or 0 for invoice in invoices),
                "por_status": por_status,
                "faturas": faturas,
            },
        )

    async def gerar_alerta(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = GerarAlertaParams.model_validate(params)
        alert = FinanceAlertRepository(self.db).create_alert(
            empresa_id=empresa_id,
            tipo=p.tipo,
            severidade=p.severidade,
            titulo=p.titulo,
            descricao=p.descricao,
            valor_envolvido=p.valor,
            confianca_ia=AI_CONFIDENCE,
        )
        return ToolResult(tool="gerar_alerta", success=True, data=row_to_dict(alert))

    async def criar_sugestao(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = CriarSugestaoParams.model_validate(params)
        suggestion = FinanceSuggestionRepository(self.db).create_suggestion(
            empresa_id=empresa_id,
            tipo=p.tipo,
            titulo=p.titulo,
            descricao=p.descricao,
            prioridade=p.prioridade,
            economia_estimada=p.economia_estimada,
            confianca_ia=AI_CONFIDENCE,
        )
        return ToolResult(tool="criar_sugestao", success=True, data=row_to_dict(suggestion))

    async def sincronizar_pluggy(self, params: Dict[str, Any], empresa_id: str) -> ToolResult:
        p = SincronizarPluggyParams.model_validate(params)
        data = await self.pluggy_client().sync_account(p.conta_id, empresa_id)
        return ToolResult(tool="sincronizar_pluggy", success=True, data=data)

    def registry(self) -> ToolRegistry:
        return ToolRegistry(
            {
                "consultar_transacoes": self.consultar_transacoes,
                "analisar_tarifas": self.analisar_tarifas,
                "consultar_faturas": self.consultar_faturas,
                "gerar_alerta": self.gerar_alerta,
                "criar_sugestao": self.criar_sugestao,
                "sincronizar_pluggy": self.sincronizar_pluggy,
            },
            on_db_error=self.db.rollback,
        )
