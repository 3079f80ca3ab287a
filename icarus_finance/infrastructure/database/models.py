"""SQLAlchemy ORM models for the finance and OPME tables"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class FinancialAccountRecord(Base):
    """Receivable / payable ledger row"""

    __tablename__ = "financial_accounts"

    id = Column(String(36), primary_key=True, default=_uuid)
    empresa_id = Column(String(36), nullable=False, index=True)
    type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False, default=0)
    final_amount = Column(Float, nullable=False)
    issue_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BankTransaction(Base):
    """Bank statement line, optionally flagged as a bank fee"""

    __tablename__ = "transacoes_bancarias"

    id = Column(String(36), primary_key=True, default=_uuid)
    empresa_id = Column(String(36), nullable=False, index=True)
    conta_bancaria_id = Column(String(36), nullable=False)
    data_transacao = Column(Date, nullable=False)
    descricao = Column(Text, nullable=False)
    descricao_original = Column(Text, nullable=True)
    valor = Column(Float, nullable=False)
    tipo = Column(Text, nullable=False)  # credito | debito
    categoria = Column(Text, nullable=True)
    is_tarifa = Column(Boolean, nullable=True, default=False)
    tipo_tarifa = Column(Text, nullable=True)


class Client(Base):
    __tablename__ = "clientes"

    id = Column(String(36), primary_key=True, default=_uuid)
    nome = Column(Text, nullable=True)
    razao_social = Column(Text, nullable=True)


class Invoice(Base):
    """Customer invoice with its installments"""

    __tablename__ = "faturas"

    id = Column(String(36), primary_key=True, default=_uuid)
    empresa_id = Column(String(36), nullable=False, index=True)
    cliente_id = Column(String(36), ForeignKey("clientes.id"), nullable=True)
    valor_liquido = Column(Float, nullable=False, default=0)
    status = Column(Text, nullable=False)  # pendente | paga | vencida
    data_vencimento = Column(Date, nullable=False)

    cliente = relationship("Client")
    parcelas = relationship("InvoiceInstallment", back_populates="fatura", cascade="all, delete-orphan")


class InvoiceInstallment(Base):
    __tablename__ = "parcelas"

    id = Column(String(36), primary_key=True, default=_uuid)
    fatura_id = Column(String(36), ForeignKey("faturas.id", ondelete="CASCADE"), nullable=False)
    valor = Column(Float, nullable=False)
    status = Column(Text, nullable=False)
    numero_parcela = Column(Integer, nullable=True)

    fatura = relationship("Invoice", back_populates="parcelas")


class FinanceAlert(Base):
    """Alert raised by the finance agent"""

    __tablename__ = "alertas_financeiros"

    id = Column(String(36), primary_key=True, default=_uuid)
    empresa_id = Column(String(36), nullable=False, index=True)
    tipo = Column(Text, nullable=False)
    severidade = Column(Text, nullable=False)  # info | baixa | media | alta | critica
    titulo = Column(Text, nullable=False)
    descricao = Column(Text, nullable=True)
    valor_envolvido = Column(Float, nullable=True)
    confianca_ia = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FinanceSuggestion(Base):
    """Savings / financing suggestion raised by the finance agent"""

    __tablename__ = "sugestoes_financeiras"

    id = Column(String(36), primary_key=True, default=_uuid)
    empresa_id = Column(String(36), nullable=False, index=True)
    tipo = Column(Text, nullable=False)
    titulo = Column(Text, nullable=False)
    descricao = Column(Text, nullable=False)
    economia_estimada = Column(Float, nullable=True)
    prioridade = Column(Text, nullable=False)  # baixa | media | alta
    confianca_ia = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class StockPosition(Base):
    """Physical and reserved stock of a product in one depot"""

    __tablename__ = "estoque_depositos"

    id = Column(String(36), primary_key=True, default=_uuid)
    produto_id = Column(String(36), nullable=False, index=True)
    produto_nome = Column(Text, nullable=True)
    deposito_id = Column(String(36), nullable=False)
    deposito_nome = Column(Text, nullable=True)
    regiao = Column(Text, nullable=True)
    quantidade_fisica = Column(Integer, nullable=False, default=0)
    quantidade_reservada = Column(Integer, nullable=False, default=0)


class Lot(Base):
    __tablename__ = "lotes"

    id = Column(String(36), primary_key=True, default=_uuid)
    produto_id = Column(String(36), nullable=False, index=True)
    numero_lote = Column(Text, nullable=False)
    data_vencimento = Column(Date, nullable=False)
    quantidade = Column(Integer, nullable=False, default=0)


class Surgery(Base):
    __tablename__ = "cirurgias"

    id = Column(String(36), primary_key=True, default=_uuid)
    data_cirurgia = Column(Date, nullable=False)
    hospital_nome = Column(Text, nullable=False)
    procedimento = Column(Text, nullable=False)
    medico = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="agendada")


class AgentToolLog(Base):
    """Audit row for every assistant tool execution"""

    __tablename__ = "ai_agent_tools_log"

    id = Column(String(36), primary_key=True, default=_uuid)
    tool_name = Column(Text, nullable=False)
    tool_input = Column(JSON, nullable=True)
    tool_output = Column(JSON, nullable=True)
    execution_time_ms = Column(Integer, nullable=False, default=0)
    success = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ChatSession(Base):
    """Last exchange per user with the assistant"""

    __tablename__ = "chat_sessions"

    id = Column(String(36), primary_key=True)
    last_message = Column(Text, nullable=True)
    last_response = Column(Text, nullable=True)
    tools_used = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
