"""Bank fee analysis against market reference prices"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence

# Monthly market reference per fee type, in BRL
MARKET_REFERENCE: Dict[str, float] = {
    "ted": 12.0,
    "doc": 5.0,
    "pix": 0.0,
    "manutencao": 50.0,
    "pacote": 100.0,
}

PERIOD_MONTHS = {"mes": 1, "trimestre": 3, "ano": 12}


@dataclass
class TariffComparison:
    pago: float
    mercado: float
    diferenca: float


@dataclass
class TariffAnalysis:
    total: float
    quantidade: int
    por_tipo: Dict[str, float] = field(default_factory=dict)
    media_mensal: float = 0.0
    comparativo_mercado: Dict[str, TariffComparison] = field(default_factory=dict)


def build_tariff_summary(transactions: Sequence[Mapping[str, Any]], period: str = "mes") -> TariffAnalysis:
    """
    Summarise fee transactions by type and compare with market prices.

    Each transaction needs `valor` and optionally `tipo_tarifa` (defaults to
    "outros"). Amounts are taken in absolute value.
    """
    total = sum(abs(tx["valor"]) for tx in transactions)

    por_tipo: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        tipo = (tx.get("tipo_tarifa") or "outros").lower()
        por_tipo[tipo] += abs(tx["valor"])

    months = PERIOD_MONTHS.get(period, 1)
    comparativo = {}
    for tipo, valor in por_tipo.items():
        mercado = MARKET_REFERENCE.get(tipo, 0.0) * months
        comparativo[tipo] = TariffComparison(pago=valor, mercado=mercado, diferenca=valor - mercado)

    return TariffAnalysis(
        total=total,
        quantidade=len(transactions),
        por_tipo=dict(por_tipo),
        media_mensal=total / months,
        comparativo_mercado=comparativo,
    )
