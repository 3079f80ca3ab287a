"""Data access layer for finance and OPME entities"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from icarus_finance.domain.models import FinancialAccount
from icarus_finance.infrastructure.database.models import (
    AgentToolLog,
    BankTransaction,
    ChatSession,
    FinanceAlert,
    FinanceSuggestion,
    FinancialAccountRecord,
    Invoice,
    Lot,
    StockPosition,
    Surgery,
)


def row_to_dict(row: Any) -> Dict[str, Any]:
    """Serialize an ORM row's columns, dates as ISO strings"""
    data = {}
    for column in row.__table__.columns:
        value = getattr(row, column.name)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        data[column.name] = value
    return data


class AccountRepository:
    """Repository for receivables and payables"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_company(self, empresa_id: str, since: Optional[date] = None) -> List[FinancialAccount]:
        query = self.db.query(FinancialAccountRecord).filter(FinancialAccountRecord.empresa_id == empresa_id)
        if since is not None:
            query = query.filter(FinancialAccountRecord.due_date >= since)

        return [
            FinancialAccount(
                id=row.id,
                type=row.type,
                status=row.status,
                category=row.category,
                final_amount=row.final_amount,
                due_date=row.due_date.isoformat(),
                payment_date=row.payment_date.isoformat() if row.payment_date else None,
                amount=row.amount,
                description=row.description,
                issue_date=row.issue_date.isoformat() if row.issue_date else None,
            )
            for row in query.order_by(FinancialAccountRecord.due_date.asc()).all()
        ]


class BankTransactionRepository:
    """Repository for bank statement lines"""

    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        empresa_id: str,
        conta_id: Optional[str] = None,
        data_inicio: Optional[date] = None,
        data_fim: Optional[date] = None,
        tipo: Optional[str] = None,
        categoria: Optional[str] = None,
        limit: int = 100,
    ) -> List[BankTransaction]:
        """Fetch company transactions, newest first"""
        query = self.db.query(BankTransaction).filter(BankTransaction.empresa_id == empresa_id)
        if conta_id:
            query = query.filter(BankTransaction.conta_bancaria_id == conta_id)
        if data_inicio:
            query = query.filter(BankTransaction.data_transacao >= data_inicio)
        if data_fim:
            query = query.filter(BankTransaction.data_transacao <= data_fim)
        if tipo:
            query = query.filter(BankTransaction.tipo == tipo)
        if categoria:
            query = query.filter(BankTransaction.categoria == categoria)

        return query.order_by(BankTransaction.data_transacao.desc()).limit(limit).all()

    def fees_since(self, empresa_id: str, since: date) -> List[BankTransaction]:
        return (
            self.db.query(BankTransaction)
            .filter(
                BankTransaction.empresa_id == empresa_id,
                BankTransaction.is_tarifa.is_(True),
                BankTransaction.data_transacao >= since,
            )
            .all()
        )


class InvoiceRepository:
    """Repository for invoices with installments and client names"""

    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        empresa_id: str,
        status: Optional[str] = None,
        cliente_id: Optional[str] = None,
    ) -> List[Invoice]:
        query = (
            self.db.query(Invoice)
            .options(joinedload(Invoice.parcelas), joinedload(Invoice.cliente))
            .filter(Invoice.empresa_id == empresa_id)
        )
        if status:
            query = query.filter(Invoice.status == status)
        if cliente_id:
            query = query.filter(Invoice.cliente_id == cliente_id)

        return query.order_by(Invoice.data_vencimento.asc()).all()


class FinanceAlertRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_alert(
        self,
        empresa_id: str,
        tipo: str,
        severidade: str,
        titulo: str,
        descricao: str,
        valor_envolvido: Optional[float] = None,
        confianca_ia: float = 85,
    ) -> FinanceAlert:
        alert = FinanceAlert(
            empresa_id=empresa_id,
            tipo=tipo,
            severidade=severidade,
            titulo=titulo,
            descricao=descricao,
            valor_envolvido=valor_envolvido,
            confianca_ia=confianca_ia,
        )
        self.db.add(alert)
        self.db.flush()
        return alert


class FinanceSuggestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_suggestion(
        self,
        empresa_id: str,
        tipo: str,
        titulo: str,
        descricao: str,
        prioridade: str,
        economia_estimada: Optional[float] = None,
        confianca_ia: float = 85,
    ) -> FinanceSuggestion:
        suggestion = FinanceSuggestion(
            empresa_id=empresa_id,
            tipo=tipo,
            titulo=titulo,
            descricao=descricao,
            economia_estimada=economia_estimada,
            prioridade=prioridade,
            confianca_ia=confianca_ia,
        )
        self.db.add(suggestion)
        self.db.flush()
        return suggestion


class StockRepository:
    """Repository for depot stock positions and lots"""

    def __init__(self, db: Session):
        self.db = db

    def positions(
        self,
        produto_id: Optional[str] = None,
        produto_nome: Optional[str] = None,
        regiao: Optional[str] = None,
        deposito_id: Optional[str] = None,
    ) -> List[StockPosition]:
        query = self.db.query(StockPosition)
        if produto_id:
            query = query.filter(StockPosition.produto_id == produto_id)
        elif produto_nome:
            query = query.filter(StockPosition.produto_nome.ilike(f"%{produto_nome}%"))
        if regiao:
            query = query.filter(StockPosition.regiao == regiao)
        if deposito_id:
            query = query.filter(StockPosition.deposito_id == deposito_id)
        return query.order_by(StockPosition.deposito_nome.asc()).all()

    def nearest_expiring_lots(
        self,
        produto_id: Optional[str] = None,
        vencimento_minimo: Optional[date] = None,
        limit: int = 3,
    ) -> List[Lot]:
        """Lots ordered first-expire-first-out"""
        query = self.db.query(Lot).filter(Lot.quantidade > 0)
        if produto_id:
            query = query.filter(Lot.produto_id == produto_id)
        if vencimento_minimo:
            query = query.filter(Lot.data_vencimento >= vencimento_minimo)
        return query.order_by(Lot.data_vencimento.asc()).limit(limit).all()


class SurgeryRepository:
    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        data_cirurgia: Optional[date] = None,
        hospital: Optional[str] = None,
        procedimento: Optional[str] = None,
        limit: int = 10,
    ) -> List[Surgery]:
        query = self.db.query(Surgery)
        if data_cirurgia:
            query = query.filter(Surgery.data_cirurgia == data_cirurgia)
        if hospital:
            query = query.filter(Surgery.hospital_nome.ilike(f"%{hospital}%"))
        if procedimento:
            query = query.filter(Surgery.procedimento.ilike(f"%{procedimento}%"))
        return query.order_by(Surgery.data_cirurgia.asc()).limit(limit).all()


class AgentAuditRepository:
    """Tool execution log and chat session persistence"""

    def __init__(self, db: Session):
        self.db = db

    def log_tool(
        self,
        tool_name: str,
        tool_input: Dict[str, Any],
        tool_output: Dict[str, Any],
        execution_time_ms: int,
        success: bool,
    ) -> AgentToolLog:
        entry = AgentToolLog(
            tool_name=tool_name,
            tool_input=tool_input,
            tool_output=tool_output,
            execution_time_ms=execution_time_ms,
            success=success,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def upsert_chat_session(
        self,
        usuario_id: str,
        last_message: str,
        last_response: str,
        tools_used: List[str],
    ) -> ChatSession:
        session = self.db.get(ChatSession, usuario_id)
        if session is None:
            session = ChatSession(id=usuario_id)
            self.db.add(session)

        session.last_message = last_message
        session.last_response = last_response
        session.tools_used = tools_used
        session.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return session
