"""CRUD services over a key-value store.

Each mutating call reads the stored collection, applies a pure update and
writes it back. Problems are logged and reported through ``Result``; nothing
here raises into the UI.
"""

import dataclasses
import logging
import time
from typing import Any, Dict, Iterable, Optional, Tuple
from uuid import uuid4

from core import events
from core.categories import CategoryStats, category_stats, filter_categories
from core.config import COLLATION_LOCALE, SEED_PATH
from core.domain import ALL, AuthState, Category, Result, Transaction, User, UserProfile
from core.events import EventBus
from core.filters import DEFAULT_SORT, FilterSpec, query_transactions
from core.functional import validate_category, validate_transaction
from core.storage import (
    AUTH_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    USERS_KEY,
    KeyValueStore,
)
from core.transforms import (
    TransactionStats,
    add_transaction,
    load_seed,
    remove_transaction,
    replace_transaction,
    transaction_stats,
)

logger = logging.getLogger(__name__)

TX_NOT_FOUND = "Операция не найдена"
CATEGORY_NOT_FOUND = "Категория не найдена"
CATEGORY_EXISTS = "Категория с таким названием уже существует"
USER_NOT_FOUND = "Пользователь не найден"
USER_EXISTS = "Пользователь с таким email уже существует"
BAD_CREDENTIALS = "Неверный email или пароль"


def new_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid4().hex[:6]}"


def seed_defaults(path=SEED_PATH) -> Tuple[Tuple[User, ...], Tuple[Category, ...]]:
    try:
        return load_seed(str(path))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning("Could not load seed data from %s: %s", path, e)
        return (), ()


def _parse_all(cls, raw: Any) -> tuple:
    if not isinstance(raw, list):
        return ()
    parsed = []
    for item in raw:
        try:
            parsed.append(cls.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed %s record %r: %s", cls.__name__, item, e)
    return tuple(parsed)


class TransactionService:

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[EventBus] = None,
        collation_locale: str = COLLATION_LOCALE,
    ):
        self.store = store
        self.bus = bus or EventBus()
        self.collation_locale = collation_locale

    def list(self) -> Tuple[Transaction, ...]:
        return _parse_all(Transaction, self.store.read(TRANSACTIONS_KEY, []))

    def save(self, trans: Iterable[Transaction]) -> bool:
        return self.store.write(TRANSACTIONS_KEY, [t.to_dict() for t in trans])

    def query(self, spec: Optional[FilterSpec] = None, sort: str = DEFAULT_SORT) -> Result:
        return Result.success(query_transactions(self.list(), spec, sort, self.collation_locale))

    def create(self, data: Dict[str, Any]) -> Result:
        checked = validate_transaction(data)
        if checked.is_left():
            return Result.fail(checked.get_error())

        t = Transaction.from_dict({**data, "id": new_id()})
        if not self.save(add_transaction(self.list(), t)):
            return Result.fail("Ошибка при добавлении операции")

        logger.info("Added %s transaction %s (%s)", t.type, t.id, t.category)
        self.bus.publish(events.TRANSACTION_ADDED, {"transaction": t})
        return Result.success(t)

    def update(self, tid: str, data: Dict[str, Any]) -> Result:
        trans = self.list()
        if not any(t.id == tid for t in trans):
            return Result.fail(TX_NOT_FOUND)

        checked = validate_transaction(data)
        if checked.is_left():
            return Result.fail(checked.get_error())

        t = Transaction.from_dict({**data, "id": tid})
        if not self.save(replace_transaction(trans, t)):
            return Result.fail("Ошибка при обновлении операции")

        self.bus.publish(events.TRANSACTION_UPDATED, {"transaction": t})
        return Result.success(t)

    def delete(self, tid: str) -> Result:
        trans = self.list()
        remaining = remove_transaction(trans, tid)
        if len(remaining) == len(trans):
            return Result.fail(TX_NOT_FOUND)
        if not self.save(remaining):
            return Result.fail("Ошибка при удалении операции")

        self.bus.publish(events.TRANSACTION_DELETED, {"id": tid})
        return Result.success()

    def clear(self) -> Result:
        if not self.save(()):
            return Result.fail("Ошибка при очистке операций")
        logger.info("Cleared all transactions")
        self.bus.publish(events.TRANSACTIONS_CLEARED)
        return Result.success()

    def stats(self) -> TransactionStats:
        return transaction_stats(self.list())


class CategoryService:

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[EventBus] = None,
        defaults: Optional[Iterable[Category]] = None,
    ):
        self.store = store
        self.bus = bus or EventBus()
        self.defaults = tuple(defaults) if defaults is not None else seed_defaults()[1]

    def list(self) -> Tuple[Category, ...]:
        raw = self.store.read(CATEGORIES_KEY, None)
        if raw is None:
            return self.defaults
        return _parse_all(Category, raw)

    def save(self, cats: Iterable[Category]) -> bool:
        ok = self.store.write(CATEGORIES_KEY, [c.to_dict() for c in cats])
        if ok:
            self.bus.publish(events.CATEGORY_CHANGED)
        return ok

    def filtered(self, tx_type: str = ALL, search: str = "") -> Tuple[Category, ...]:
        return filter_categories(self.list(), tx_type, search)

    @staticmethod
    def _taken(cats: Iterable[Category], name: str, tx_type: str, skip_id: str = "") -> bool:
        return any(c.id != skip_id and c.name == name and c.type == tx_type for c in cats)

    def create(self, data: Dict[str, Any]) -> Result:
        checked = validate_category(data)
        if checked.is_left():
            return Result.fail(checked.get_error())

        cats = self.list()
        if self._taken(cats, data["name"], data["type"]):
            return Result.fail(CATEGORY_EXISTS)

        cat = Category.from_dict({**data, "id": new_id()})
        if not self.save(cats + (cat,)):
            return Result.fail("Ошибка при добавлении категории")
        return Result.success(cat)

    def update(self, cid: str, **updates) -> Result:
        cats = self.list()
        current = next((c for c in cats if c.id == cid), None)
        if current is None:
            return Result.fail(CATEGORY_NOT_FOUND)

        updates.pop("id", None)
        try:
            updated = dataclasses.replace(current, **updates)
        except TypeError as e:
            logger.warning("Rejected category update %r: %s", updates, e)
            return Result.fail("Некорректные данные категории")
        checked = validate_category(updated.to_dict())
        if checked.is_left():
            return Result.fail(checked.get_error())
        if self._taken(cats, updated.name, updated.type, skip_id=cid):
            return Result.fail(CATEGORY_EXISTS)

        if not self.save(tuple(updated if c.id == cid else c for c in cats)):
            return Result.fail("Ошибка при обновлении категории")
        return Result.success(updated)

    def delete(self, cid: str) -> Result:
        # Transactions keep the category name; nothing cascades.
        cats = self.list()
        remaining = tuple(c for c in cats if c.id != cid)
        if len(remaining) == len(cats):
            return Result.fail(CATEGORY_NOT_FOUND)
        if not self.save(remaining):
            return Result.fail("Ошибка при удалении категории")
        return Result.success()

    def reset(self) -> Result:
        if not self.save(self.defaults):
            return Result.fail("Ошибка при сбросе категорий")
        return Result.success(self.defaults)

    def stats(self, trans: Iterable[Transaction]) -> CategoryStats:
        return category_stats(self.list(), trans)


class AuthService:

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[EventBus] = None,
        default_users: Optional[Iterable[User]] = None,
    ):
        self.store = store
        self.bus = bus or EventBus()
        self.default_users = (
            tuple(default_users) if default_users is not None else seed_defaults()[0]
        )

    def users(self) -> Tuple[User, ...]:
        raw = self.store.read(USERS_KEY, None)
        if raw is None:
            return self.default_users
        return _parse_all(User, raw)

    def _save_users(self, users: Iterable[User]) -> bool:
        return self.store.write(USERS_KEY, [u.to_dict() for u in users])

    def current(self) -> AuthState:
        raw = self.store.read(AUTH_KEY, None)
        if not raw:
            return AuthState()
        try:
            return AuthState.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed auth state: %s", e)
            return AuthState()

    def _set_state(self, state: AuthState) -> AuthState:
        self.store.write(AUTH_KEY, state.to_dict())
        self.bus.publish(events.AUTH_CHANGED, {"auth": state})
        return state

    def login(self, email: str, password: str) -> Result:
        user = next(
            (u for u in self.users() if u.email == email and u.password == password),
            None,
        )
        if user is None:
            self._set_state(AuthState(error=BAD_CREDENTIALS))
            return Result.fail(BAD_CREDENTIALS)

        logger.info("User %s logged in", user.id)
        self._set_state(AuthState(is_authenticated=True, user=user))
        return Result.success(user)

    def register(self, email: str, password: str, profile: UserProfile) -> Result:
        users = self.users()
        if any(u.email == email for u in users):
            self._set_state(AuthState(error=USER_EXISTS))
            return Result.fail(USER_EXISTS)

        user = User(id=new_id(), email=email, password=password, profile=profile)
        if not self._save_users(users + (user,)):
            return Result.fail("Ошибка при регистрации")

        logger.info("Registered user %s", user.id)
        self._set_state(AuthState(is_authenticated=True, user=user))
        return Result.success(user)

    def update_profile(self, user_id: str, **changes) -> Result:
        users = self.users()
        user = next((u for u in users if u.id == user_id), None)
        if user is None:
            return Result.fail(USER_NOT_FOUND)

        try:
            profile = dataclasses.replace(user.profile, **changes)
        except TypeError as e:
            logger.warning("Rejected profile update %r: %s", changes, e)
            return Result.fail("Некорректные данные профиля")
        updated = dataclasses.replace(user, profile=profile)
        if not self._save_users(tuple(updated if u.id == user_id else u for u in users)):
            return Result.fail("Ошибка при обновлении профиля")

        state = self.current()
        if state.user and state.user.id == user_id:
            self._set_state(AuthState(is_authenticated=state.is_authenticated, user=updated))
        return Result.success(updated)

    def logout(self) -> AuthState:
        if not self.store.remove(AUTH_KEY):
            logger.error("Could not drop the stored session")
        state = AuthState()
        self.bus.publish(events.AUTH_CHANGED, {"auth": state})
        return state
