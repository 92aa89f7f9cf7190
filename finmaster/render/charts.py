"""Terminal histograms for the chart feeds, drawn with rich markup."""

from rich.console import Console

from finmaster.domain.chart import EXPENSE_COLOR, INCOME_COLOR, CategoryPoint, MonthlyPoint, calculate_bar_length
from finmaster.domain.currency import format_currency
from finmaster.domain.models import Money

BAR_CHAR = "█"
MONTHLY_BAR_WIDTH = 30
CATEGORY_BAR_WIDTH = 40


def money_markup(value: Money) -> str:
    """Format an amount in green (non-negative) or red (negative)."""
    color = "green" if value >= 0 else "red"
    return f"[{color}]{format_currency(value)}[/{color}]"


def _bar(amount: Money, max_amount: Money, width: int, color: str) -> str:
    length = calculate_bar_length(amount, max_amount, width)
    return f"[{color}]{BAR_CHAR * length}[/{color}]"


def render_monthly_chart(console: Console, points: tuple[MonthlyPoint, ...]) -> None:
    """Render expenses vs income per month, with the month's balance.

    Args:
        console: Output console.
        points: Monthly series.
    """
    if not points:
        console.print("  [dim]Nenhum mês cadastrado[/dim]")
        return

    max_amount = Money(max(max(abs(p.total_expenses), abs(p.total_income)) for p in points))

    for point in points:
        console.print(f"  [bold]{point.label}[/bold]  Balanço: {money_markup(point.balance)}")
        expenses_bar = _bar(point.total_expenses, max_amount, MONTHLY_BAR_WIDTH, EXPENSE_COLOR)
        income_bar = _bar(point.total_income, max_amount, MONTHLY_BAR_WIDTH, INCOME_COLOR)
        console.print(f"    {'Despesas':10} {format_currency(point.total_expenses):>16} {expenses_bar}")
        console.print(f"    {'Receitas':10} {format_currency(point.total_income):>16} {income_bar}")


def render_category_chart(console: Console, points: tuple[CategoryPoint, ...]) -> None:
    """Render one colored bar per expense category."""
    if not points:
        console.print("  [dim]Nenhum gasto categorizado[/dim]")
        return

    max_amount = Money(max(abs(p.value) for p in points))

    for point in points:
        bar = _bar(point.value, max_amount, CATEGORY_BAR_WIDTH, point.color)
        console.print(f"  {point.label:20} {format_currency(point.value):>16} {bar}")
