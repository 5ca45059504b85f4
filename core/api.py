"""Async facade over the services, imitating a remote backend.

Every call waits a random delay from the configured latency range before it
touches the store. Writes to one collection are serialized with a lock per
collection, so at most one write per collection is in flight.
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.categories import CategoryStats
from core.config import Settings
from core.domain import ALL, AuthState, Category, Result, Transaction, UserProfile
from core.events import EventBus
from core.filters import DEFAULT_SORT, FilterSpec
from core.services import AuthService, CategoryService, TransactionService, seed_defaults
from core.state import AppState
from core.storage import (
    AUTH_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    USERS_KEY,
    JsonFileStore,
    KeyValueStore,
)
from core.transforms import TransactionStats, export_json

logger = logging.getLogger(__name__)


class FinanceApi:

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
    ):
        settings = settings or Settings()
        users, categories = seed_defaults(settings.seed_path)
        self.bus = bus or EventBus()
        self.transactions = TransactionService(store, self.bus, settings.collation_locale)
        self.categories = CategoryService(store, self.bus, defaults=categories)
        self.auth = AuthService(store, self.bus, default_users=users)
        self._latency = settings.latency_range
        self._locks = {
            key: asyncio.Lock()
            for key in (TRANSACTIONS_KEY, CATEGORIES_KEY, USERS_KEY, AUTH_KEY)
        }

    async def _delay(self) -> None:
        low, high = self._latency
        if high > 0:
            await asyncio.sleep(random.uniform(low, high))

    async def _write(self, key: str, call, *args, **kwargs):
        await self._delay()
        async with self._locks[key]:
            return call(*args, **kwargs)

    # snapshot

    async def get_transactions(self) -> Tuple[Transaction, ...]:
        await self._delay()
        return self.transactions.list()

    async def get_categories(self) -> Tuple[Category, ...]:
        await self._delay()
        return self.categories.list()

    async def load_snapshot(self) -> AppState:
        """Load both collections concurrently into a state bound to this bus."""
        trans, cats = await asyncio.gather(self.get_transactions(), self.get_categories())
        logger.debug("Loaded snapshot: %d transactions, %d categories", len(trans), len(cats))
        state = AppState(trans, cats, self.auth.current(), self.transactions.collation_locale)
        return state.bind(self.bus, self.categories.list)

    # transactions

    async def query_transactions(
        self, spec: Optional[FilterSpec] = None, sort: str = DEFAULT_SORT
    ) -> Result:
        await self._delay()
        return self.transactions.query(spec, sort)

    async def create_transaction(self, data: Dict[str, Any]) -> Result:
        return await self._write(TRANSACTIONS_KEY, self.transactions.create, data)

    async def update_transaction(self, tid: str, data: Dict[str, Any]) -> Result:
        return await self._write(TRANSACTIONS_KEY, self.transactions.update, tid, data)

    async def delete_transaction(self, tid: str) -> Result:
        return await self._write(TRANSACTIONS_KEY, self.transactions.delete, tid)

    async def clear_transactions(self) -> Result:
        return await self._write(TRANSACTIONS_KEY, self.transactions.clear)

    async def transaction_stats(self) -> TransactionStats:
        await self._delay()
        return self.transactions.stats()

    # categories

    async def filtered_categories(self, tx_type: str = ALL, search: str = "") -> Tuple[Category, ...]:
        await self._delay()
        return self.categories.filtered(tx_type, search)

    async def create_category(self, data: Dict[str, Any]) -> Result:
        return await self._write(CATEGORIES_KEY, self.categories.create, data)

    async def update_category(self, cid: str, **updates) -> Result:
        return await self._write(CATEGORIES_KEY, self.categories.update, cid, **updates)

    async def delete_category(self, cid: str) -> Result:
        return await self._write(CATEGORIES_KEY, self.categories.delete, cid)

    async def reset_categories(self) -> Result:
        return await self._write(CATEGORIES_KEY, self.categories.reset)

    async def category_stats(self) -> CategoryStats:
        await self._delay()
        return self.categories.stats(self.transactions.list())

    async def clear_all_data(self) -> Result:
        cleared, reset = await asyncio.gather(self.clear_transactions(), self.reset_categories())
        if cleared.ok and reset.ok:
            return Result.success()
        logger.error("Clearing data failed: %s / %s", cleared.error, reset.error)
        return Result.fail(cleared.error or reset.error)

    async def export_data(self) -> str:
        """JSON dump of transactions, categories and the signed-in user's profile."""
        trans, cats = await asyncio.gather(self.get_transactions(), self.get_categories())
        user = self.auth.current().user
        return export_json(trans, cats, user.profile if user else None, datetime.now())

    # auth

    async def login(self, email: str, password: str) -> Result:
        return await self._write(AUTH_KEY, self.auth.login, email, password)

    async def register(self, email: str, password: str, profile: UserProfile) -> Result:
        return await self._write(USERS_KEY, self.auth.register, email, password, profile)

    async def update_profile(self, user_id: str, **changes) -> Result:
        return await self._write(USERS_KEY, self.auth.update_profile, user_id, **changes)

    async def logout(self) -> AuthState:
        return await self._write(AUTH_KEY, self.auth.logout)


def build_api(settings: Optional[Settings] = None) -> FinanceApi:
    settings = settings or Settings()
    return FinanceApi(JsonFileStore(settings.store_path), settings)
