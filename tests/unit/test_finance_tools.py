"""Unit tests for finance agent tools against the test database"""

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from fakes import FakeClients
from icarus_finance.domain.exceptions import ExternalServiceError
from icarus_finance.infrastructure.database.models import (
    BankTransaction,
    Client,
    FinanceAlert,
    FinanceSuggestion,
    Invoice,
    InvoiceInstallment,
)
from icarus_finance.infrastructure.tools.finance import FinanceToolbox

EMPRESA = "emp-1"


@pytest.fixture
def seeded(db):
    today = date.today()
    db.add_all(
        [
            BankTransaction(
                empresa_id=EMPRESA, conta_bancaria_id="c1", data_transacao=today - timedelta(days=2),
                descricao="TED enviada", valor=-15.0, tipo="debito", is_tarifa=True, tipo_tarifa="ted",
            ),
            BankTransaction(
                empresa_id=EMPRESA, conta_bancaria_id="c1", data_transacao=today - timedelta(days=1),
                descricao="Tarifa pacote", valor=-120.0, tipo="debito", is_tarifa=True, tipo_tarifa="pacote",
            ),
            BankTransaction(
                empresa_id=EMPRESA, conta_bancaria_id="c2", data_transacao=today,
                descricao="Recebimento hospital", valor=8000.0, tipo="credito", categoria="vendas",
            ),
            BankTransaction(
                empresa_id="outra", conta_bancaria_id="c9", data_transacao=today,
                descricao="Outra empresa", valor=1.0, tipo="credito",
            ),
        ]
    )
    cliente = Client(nome="Hospital Central", razao_social="Hospital Central S.A.")
    db.add(cliente)
    db.flush()
    fatura = Invoice(
        empresa_id=EMPRESA, cliente_id=cliente.id, valor_liquido=3000.0, status="pendente",
        data_vencimento=today + timedelta(days=10),
    )
    fatura.parcelas = [
        InvoiceInstallment(valor=1500.0, status="pendente", numero_parcela=1),
        InvoiceInstallment(valor=1500.0, status="pendente", numero_parcela=2),
    ]
    db.add(fatura)
    db.add(
        Invoice(empresa_id=EMPRESA, valor_liquido=500.0, status="vencida", data_vencimento=today - timedelta(days=5))
    )
    db.commit()
    return db


def toolbox(db, pluggy=None) -> FinanceToolbox:
    return FinanceToolbox(db, pluggy_client=FakeClients(pluggy=pluggy).pluggy)


async def test_consultar_transacoes_newest_first_scoped_to_company(seeded):
    result = await toolbox(seeded).registry().run("consultar_transacoes", {}, EMPRESA)

    assert result.success is True
    assert [tx["descricao"] for tx in result.data] == ["Recebimento hospital", "Tarifa pacote", "TED enviada"]


async def test_consultar_transacoes_filters(seeded):
    result = await toolbox(seeded).registry().run(
        "consultar_transacoes", {"tipo": "credito", "conta_id": "c2"}, EMPRESA
    )
    assert [tx["valor"] for tx in result.data] == [8000.0]


async def test_analisar_tarifas(seeded):
    result = await toolbox(seeded).registry().run("analisar_tarifas", {"periodo": "mes"}, EMPRESA)

    assert result.success is True
    assert result.data["total"] == 135.0
    assert result.data["quantidade"] == 2
    assert result.data["comparativo_mercado"]["pacote"] == {"pago": 120.0, "mercado": 100.0, "diferenca": 20.0}


async def test_consultar_faturas_with_installments(seeded):
    result = await toolbox(seeded).registry().run("consultar_faturas", {}, EMPRESA)

    data = result.data
    assert data["total"] == 2
    assert data["valor_total"] == 3500.0
    assert data["por_status"] == {"pendente": 1, "vencida": 1}
    assert data["faturas"][0]["status"] == "vencida"
    pendente = data["faturas"][1]
    assert len(pendente["parcelas"]) == 2
    assert pendente["cliente"]["nome"] == "Hospital Central"


async def test_gerar_alerta_persists_with_ai_confidence(db):
    result = await toolbox(db).registry().run(
        "gerar_alerta",
        {"tipo": "tarifa", "severidade": "alta", "titulo": "Tarifa alta", "descricao": "Pacote caro", "valor": 120},
        EMPRESA,
    )

    assert result.success is True
    stored = db.query(FinanceAlert).one()
    assert stored.confianca_ia == 85
    assert stored.valor_envolvido == 120
    assert result.data["id"] == stored.id


async def test_criar_sugestao(db):
    result = await toolbox(db).registry().run(
        "criar_sugestao",
        {"tipo": "troca_banco", "titulo": "Trocar banco", "descricao": "Tarifas menores", "prioridade": "media"},
        EMPRESA,
    )

    assert result.success is True
    assert db.query(FinanceSuggestion).one().tipo == "troca_banco"


async def test_invalid_params_become_failed_result(db):
    result = await toolbox(db).registry().run(
        "gerar_alerta", {"tipo": "x", "severidade": "gigante", "titulo": "t", "descricao": "d"}, EMPRESA
    )

    assert result.success is False
    assert result.error.startswith("Parâmetros inválidos")
    assert db.query(FinanceAlert).count() == 0


async def test_sincronizar_pluggy_without_credentials(db):
    result = await toolbox(db).registry().run("sincronizar_pluggy", {"conta_id": "c1"}, EMPRESA)

    assert result.success is False
    assert "SUPABASE_URL" in result.error


async def test_sincronizar_pluggy_calls_edge_function(db):
    pluggy = AsyncMock()
    pluggy.sync_account.return_value = {"synced": 12}

    result = await toolbox(db, pluggy).registry().run("sincronizar_pluggy", {"conta_id": "c1"}, EMPRESA)

    assert result.success is True
    assert result.data == {"synced": 12}
    pluggy.sync_account.assert_awaited_once_with("c1", EMPRESA)


async def test_sincronizar_pluggy_http_failure(db):
    pluggy = AsyncMock()
    pluggy.sync_account.side_effect = ExternalServiceError("Erro ao sincronizar Pluggy: Bad Gateway")

    result = await toolbox(db, pluggy).registry().run("sincronizar_pluggy", {"conta_id": "c1"}, EMPRESA)

    assert result.success is False
    assert result.error == "Erro ao sincronizar Pluggy: Bad Gateway"


def test_registry_lists_all_tools(db):
    assert toolbox(db).registry().names == [
        "analisar_tarifas",
        "consultar_faturas",
        "consultar_transacoes",
        "criar_sugestao",
        "gerar_alerta",
        "sincronizar_pluggy",
    ]
