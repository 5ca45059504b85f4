import json
from dataclasses import asdict, dataclass
from datetime import datetime
from functools import reduce
from typing import Iterable, Optional, Tuple

from core.domain import EXPENSE, INCOME, Category, Transaction, User, UserProfile


@dataclass(frozen=True)
class TransactionStats:
    total_income: float
    total_expense: float
    balance: float
    transaction_count: int
    categories_used: Tuple[str, ...]


def load_seed(path: str) -> Tuple[Tuple[User, ...], Tuple[Category, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    users = tuple(User.from_dict(u) for u in data.get("users", []))
    categories = tuple(Category.from_dict(c) for c in data.get("categories", []))

    return users, categories


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def replace_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(t if old.id == t.id else old for old in trans)


def remove_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.id != tid, trans))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INCOME, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == EXPENSE, trans))


def total_income(trans: Iterable[Transaction]) -> float:
    return reduce(lambda acc, t: acc + t.amount, income_transactions(trans), 0)


def total_expense(trans: Iterable[Transaction]) -> float:
    return reduce(lambda acc, t: acc + t.amount, expense_transactions(trans), 0)


def balance(trans: Iterable[Transaction]) -> float:
    trans = tuple(trans)
    return total_income(trans) - total_expense(trans)


def transaction_stats(trans: Iterable[Transaction]) -> TransactionStats:
    trans = tuple(trans)
    income = total_income(trans)
    expense = total_expense(trans)
    return TransactionStats(
        total_income=income,
        total_expense=expense,
        balance=income - expense,
        transaction_count=len(trans),
        # dict keeps first-seen order
        categories_used=tuple(dict.fromkeys(t.category for t in trans)),
    )


def export_json(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    profile: Optional[UserProfile],
    exported_at: datetime,
) -> str:
    """Serialize everything the user owns into one pretty-printed JSON document."""
    data = {
        "transactions": [t.to_dict() for t in trans],
        "categories": [c.to_dict() for c in cats],
        "user_profile": asdict(profile) if profile else None,
        "export_date": exported_at.isoformat(),
    }
    return json.dumps(data, ensure_ascii=False, indent=2)
