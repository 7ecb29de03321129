"""
Formato de moneda para Colombia (es-CO, COP, sin decimales)
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def to_decimal(value) -> Decimal:
    """Convierte int/float/str a Decimal; valores inválidos → 0"""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def format_currency(amount, symbol: str = "$") -> str:
    """
    Formatea un monto en pesos colombianos: `$ 1.234.567`.

    Se redondea al peso (COP no usa centavos en la presentación).
    """
    value = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.0f}".replace(",", ".")  # 1,234,567 -> 1.234.567
    return f"{sign}{symbol} {digits}"
