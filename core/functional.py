import math
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from core.domain import TRANSACTION_TYPES, Category
from core.formatting import parse_date

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right has no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_category(
    cats: Iterable[Category], name: str, tx_type: Optional[str] = None
) -> Maybe[Category]:
    for cat in cats:
        if cat.name == name and (tx_type is None or cat.type == tx_type):
            return Some(cat)
    return Nothing()


# Validation of untyped payloads coming from forms or the store.
# Messages are shown to the user as-is.

def _check_type(data: dict) -> Either[str, dict]:
    if data.get("type") not in TRANSACTION_TYPES:
        return Left("Некорректный тип операции")
    return Right(data)


def _check_amount(data: dict) -> Either[str, dict]:
    amount = data.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return Left("Введите корректную сумму")
    if not math.isfinite(amount) or amount <= 0:
        return Left("Введите корректную сумму")
    return Right(data)


def _check_date(data: dict) -> Either[str, dict]:
    if parse_date(data.get("date") or "") is None:
        return Left("Некорректная дата")
    return Right(data)


def _check_category(data: dict) -> Either[str, dict]:
    if not str(data.get("category") or "").strip():
        return Left("Не выбрана категория")
    return Right(data)


def _check_name(data: dict) -> Either[str, dict]:
    if not str(data.get("name") or "").strip():
        return Left("Название категории не может быть пустым")
    return Right(data)


HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")


def _check_color(data: dict) -> Either[str, dict]:
    color = data.get("color")
    if not isinstance(color, str) or not HEX_COLOR.fullmatch(color):
        return Left("Некорректный цвет")
    return Right(data)


def validate_transaction(data: dict) -> Either[str, dict]:
    return (
        Right(data)
        .bind(_check_type)
        .bind(_check_amount)
        .bind(_check_date)
        .bind(_check_category)
    )


def validate_category(data: dict) -> Either[str, dict]:
    return Right(data).bind(_check_type).bind(_check_name).bind(_check_color)


def pipe(x: Any, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
