from decimal import Decimal

from .crud import round_amount
from .schemas import BudgetDetail, BudgetTotals

TAX_RATE = Decimal("0.21")


def subtotal(budget: BudgetDetail) -> Decimal:
    return sum((line.product.price * line.quantity for line in budget.lines), Decimal("0"))


def total_with_tax(budget: BudgetDetail) -> Decimal:
    return subtotal(budget) * (1 + TAX_RATE)


def unit_count(budget: BudgetDetail) -> int:
    return sum(line.quantity for line in budget.lines)


def summarize(budget: BudgetDetail) -> BudgetTotals:
    """Totals for display, rounded half-up to cents."""
    return BudgetTotals(
        subtotal=round_amount(subtotal(budget)),
        total_with_tax=round_amount(total_with_tax(budget)),
        unit_count=unit_count(budget),
    )
