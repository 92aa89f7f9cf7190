"""Shared currency formatting.

Every figure shown on screen or written to the report goes through
format_currency, so both always agree on rounding.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from finmaster.domain.numbers import coerce_amount

CURRENCY_SYMBOL = "R$"
CENTAVOS = Decimal("0.01")


def _context_precision(amount: Decimal) -> int:
    """Enough significant digits to hold every integer digit plus centavos."""
    return max(28, amount.adjusted() + 4)


def round_currency(value: float) -> Decimal:
    """Round an amount to centavos, half away from zero.

    Args:
        value: Amount in reais (invalid input counts as 0).

    Returns:
        Decimal with exactly two decimal places.
    """
    amount = Decimal(str(coerce_amount(value)))
    with localcontext() as ctx:
        ctx.prec = _context_precision(amount)
        rounded = amount.quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return Decimal("0.00")
    return rounded


def format_currency(value: float) -> str:
    """Format an amount in Brazilian reais.

    Uses "." for thousands and "," for decimals.

    Args:
        value: Amount in reais.

    Returns:
        Formatted string, e.g. "R$ 1.234,56" or "-R$ 10,00".
    """
    rounded = round_currency(value)
    with localcontext() as ctx:
        ctx.prec = _context_precision(rounded)
        digits = f"{abs(rounded):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {digits}"
