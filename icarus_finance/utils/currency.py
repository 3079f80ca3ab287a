"""Brazilian real formatting"""


def format_brl(value: float) -> str:
    """
    Format an amount as pt-BR currency.

    Example:
        1234.5 -> "R$ 1.234,50"
        -10 -> "-R$ 10,00"
    """
    sign = "-" if value < 0 else ""
    integer_part, decimal_part = f"{abs(value):,.2f}".split(".")
    integer_part = integer_part.replace(",", ".")
    return f"{sign}R$ {integer_part},{decimal_part}"
