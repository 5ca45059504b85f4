from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from core.config import CURRENCY_SYMBOL
from core.domain import INCOME

DISPLAY_DATE_FORMAT = "%d.%m.%Y"


def parse_date(value: str) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` or a full ISO timestamp, dropping the time part.

    Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in ("%Y/%m/%d", "%Y.%m.%d", DISPLAY_DATE_FORMAT):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def round_half_up(value: float) -> int:
    """Round halves away from zero, unlike the built-in banker's round()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Ruble amount without decimals, thousands grouped by spaces: '1 234 ₽'."""
    rounded = round_half_up(abs(amount))
    sign = "-" if amount < 0 and rounded else ""
    grouped = f"{rounded:,}".replace(",", " ")
    return f"{sign}{grouped} {symbol}"


def format_signed(amount: float, tx_type: str) -> str:
    prefix = "+" if tx_type == INCOME else "-"
    return f"{prefix}{format_currency(amount)}"


def format_date(value: str) -> str:
    d = parse_date(value)
    if d is None:
        return value
    return d.strftime(DISPLAY_DATE_FORMAT)
