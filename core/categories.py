from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Tuple

from core.config import DEFAULT_CATEGORY_COLOR
from core.domain import ALL, EXPENSE, INCOME, Category, Transaction
from core.formatting import round_half_up
from core.functional import safe_category
from core.transforms import total_expense, total_income


@dataclass(frozen=True)
class CategoryShare:
    amount: float
    percentage: int
    color: str


@dataclass(frozen=True)
class CategoryStats:
    total_categories: int
    income_categories: int
    expense_categories: int
    most_used: Tuple[Tuple[str, int], ...]


def iter_of_type(trans: Iterable[Transaction], tx_type: str) -> Iterator[Transaction]:
    for t in trans:
        if t.type == tx_type:
            yield t


def sum_by_category(trans: Iterable[Transaction], tx_type: str) -> Dict[str, float]:
    """Summed amounts per category name, in order of first appearance."""
    totals: Dict[str, float] = defaultdict(int)
    for t in iter_of_type(trans, tx_type):
        totals[t.category] += t.amount
    return dict(totals)


def category_color(name: str, cats: Iterable[Category]) -> str:
    # Matched by name: renamed or deleted categories fall back to the default.
    return safe_category(cats, name).map(lambda c: c.color).get_or_else(DEFAULT_CATEGORY_COLOR)


def category_breakdown(
    trans: Iterable[Transaction], tx_type: str, cats: Iterable[Category] = ()
) -> Dict[str, CategoryShare]:
    """Per-category amount, rounded percentage of the type total, and colour.

    Ordered by descending amount; equal amounts keep first-appearance order.
    Empty when the type total is zero.
    """
    cats = tuple(cats)
    totals = sum_by_category(trans, tx_type)
    total = sum(totals.values())
    if total == 0:
        return {}

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return {
        name: CategoryShare(
            amount=amount,
            percentage=round_half_up(amount / total * 100),
            color=category_color(name, cats),
        )
        for name, amount in ordered
    }


def income_expense_split(trans: Iterable[Transaction]) -> Tuple[int, int]:
    """Income and expense shares of their combined volume, in percent."""
    trans = tuple(trans)
    income = total_income(trans)
    expense = total_expense(trans)
    combined = income + expense
    if combined <= 0:
        return 0, 0
    return round_half_up(income / combined * 100), round_half_up(expense / combined * 100)


def category_usage(trans: Iterable[Transaction], top: int = 5) -> Tuple[Tuple[str, int], ...]:
    counts = Counter(t.category for t in trans)
    # Counter.most_common keeps first-seen order for equal counts
    return tuple(counts.most_common(max(0, top)))


def category_stats(cats: Iterable[Category], trans: Iterable[Transaction]) -> CategoryStats:
    cats = tuple(cats)
    return CategoryStats(
        total_categories=len(cats),
        income_categories=sum(1 for c in cats if c.type == INCOME),
        expense_categories=sum(1 for c in cats if c.type == EXPENSE),
        most_used=category_usage(trans),
    )


def filter_categories(
    cats: Iterable[Category], tx_type: str = ALL, search: str = ""
) -> Tuple[Category, ...]:
    needle = search.lower()
    return tuple(
        c for c in cats
        if (tx_type == ALL or c.type == tx_type) and needle in c.name.lower()
    )
