"""Filtering, sorting and paging of transaction snapshots.

Everything here is pure: inputs are never mutated and results are new tuples.
Sorting relies on the stability of ``sorted`` (also with ``reverse=True``), so
transactions with equal keys keep their relative input order.

The one exception to purity is ``collation_key``: category sorts switch the
process-wide ``LC_COLLATE`` locale category.
"""

import locale
import logging
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Callable, Iterable, Optional, Tuple

from core.config import COLLATION_LOCALE
from core.domain import ALL, Transaction
from core.formatting import parse_date
from core.functional import pipe

logger = logging.getLogger(__name__)

DATE_DESC = "date-desc"
DATE_ASC = "date-asc"
AMOUNT_DESC = "amount-desc"
AMOUNT_ASC = "amount-asc"
CATEGORY_ASC = "category-asc"
CATEGORY_DESC = "category-desc"

SORT_OPTIONS = (DATE_DESC, DATE_ASC, AMOUNT_DESC, AMOUNT_ASC, CATEGORY_ASC, CATEGORY_DESC)
DEFAULT_SORT = DATE_DESC

Predicate = Callable[[Transaction], bool]


@dataclass(frozen=True)
class FilterSpec:
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    type: str = ALL
    category: str = ALL
    limit: Optional[int] = None
    offset: Optional[int] = None


def _tx_date(t: Transaction) -> date:
    return parse_date(t.date) or date.min


def by_date_range(start: Optional[str], end: Optional[str]) -> Predicate:
    start_d = parse_date(start) if start else None
    end_d = parse_date(end) if end else None

    def _filter(t: Transaction) -> bool:
        d = _tx_date(t)
        if start_d is not None and d < start_d:
            return False
        if end_d is not None and d > end_d:
            return False
        return True

    return _filter


def by_type(tx_type: Optional[str]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return not tx_type or tx_type == ALL or t.type == tx_type

    return _filter


def by_category(name: Optional[str]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return not name or name == ALL or t.category == name

    return _filter


def spec_predicates(spec: FilterSpec) -> Tuple[Predicate, ...]:
    return (
        by_date_range(spec.start_date, spec.end_date),
        by_type(spec.type),
        by_category(spec.category),
    )


def filter_transactions(
    trans: Iterable[Transaction], spec: FilterSpec
) -> Tuple[Transaction, ...]:
    preds = spec_predicates(spec)
    return tuple(t for t in trans if all(p(t) for p in preds))


def fallback_collation(s: str) -> str:
    return s.casefold().replace("ё", "е\uffff")


@lru_cache(maxsize=None)
def locale_available(locale_name: str) -> bool:
    """Whether ``LC_COLLATE`` can be switched to ``locale_name``.

    The answer is cached per name, so a missing locale is logged once.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, locale_name)
    except locale.Error:
        logger.warning("Collation locale %s is unavailable, using fallback ordering", locale_name)
        return False
    return True


def collation_key(locale_name: str = COLLATION_LOCALE) -> Callable[[str], object]:
    """Return a sort key comparing strings by the rules of ``locale_name``.

    This switches the process-wide ``LC_COLLATE`` category to ``locale_name``
    on every call, so ``locale.strcoll``/``locale.strxfrm`` elsewhere in the
    process see the same locale afterwards. The returned ``strxfrm`` reads the
    category when it is called; use it right away, before anything else
    changes the locale.

    Falls back to case-insensitive comparison with 'ё' ordered right after 'е'
    when the locale is not installed. The fallback leaves ``LC_COLLATE`` alone.
    """
    if not locale_available(locale_name):
        return fallback_collation
    locale.setlocale(locale.LC_COLLATE, locale_name)
    return locale.strxfrm


def sort_transactions(
    trans: Iterable[Transaction],
    option: str = DEFAULT_SORT,
    locale_name: str = COLLATION_LOCALE,
) -> Tuple[Transaction, ...]:
    if option not in SORT_OPTIONS:
        logger.debug("Unknown sort option %r, using %s", option, DEFAULT_SORT)
        option = DEFAULT_SORT

    field, direction = option.split("-")
    reverse = direction == "desc"

    if field == "date":
        key = _tx_date
    elif field == "amount":
        key = lambda t: t.amount
    else:
        collate = collation_key(locale_name)
        key = lambda t: collate(t.category)

    return tuple(sorted(trans, key=key, reverse=reverse))


def paginate(
    trans: Tuple[Transaction, ...], offset: Optional[int] = None, limit: Optional[int] = None
) -> Tuple[Transaction, ...]:
    if offset is not None:
        trans = trans[max(0, offset):]
    if limit is not None:
        trans = trans[: max(0, limit)]
    return trans


def query_transactions(
    trans: Iterable[Transaction],
    spec: Optional[FilterSpec] = None,
    sort: str = DEFAULT_SORT,
    locale_name: str = COLLATION_LOCALE,
) -> Tuple[Transaction, ...]:
    """Filter, then sort, then page a snapshot of transactions.

    Category orders collate under ``locale_name``; see ``collation_key``.
    """
    spec = spec or FilterSpec()
    return pipe(
        trans,
        lambda ts: filter_transactions(ts, spec),
        lambda ts: sort_transactions(ts, sort, locale_name),
        lambda ts: paginate(ts, spec.offset, spec.limit),
    )
