"""In-memory copy of the stored collections plus the UI's view settings.

``AppState`` is a cache: it is filled from a snapshot and reconciled from
service events after every mutation. ``ViewState`` is a plain value the UI
passes into the pure query functions.
"""

from dataclasses import dataclass, field, replace
from typing import Tuple

from core import events
from core.config import COLLATION_LOCALE
from core.domain import AuthState, Category, Transaction
from core.events import Event, EventBus
from core.filters import DEFAULT_SORT, FilterSpec, query_transactions
from core.transforms import add_transaction, remove_transaction, replace_transaction

CHART_VIEWS = ("all", "comparison", "income", "expense")


@dataclass(frozen=True)
class ViewState:
    filters: FilterSpec = field(default_factory=FilterSpec)
    sort: str = DEFAULT_SORT
    chart_view: str = "all"

    def with_filters(self, **changes) -> "ViewState":
        return replace(self, filters=replace(self.filters, **changes))


class AppState:

    def __init__(
        self,
        transactions: Tuple[Transaction, ...] = (),
        categories: Tuple[Category, ...] = (),
        auth: AuthState = AuthState(),
        collation_locale: str = COLLATION_LOCALE,
    ):
        self.transactions = tuple(transactions)
        self.categories = tuple(categories)
        self.auth = auth
        self.collation_locale = collation_locale
        self._category_source = None

    def bind(self, bus: EventBus, category_source=None) -> "AppState":
        """Follow service events on ``bus``.

        ``category_source`` is a zero-argument callable returning the current
        categories; it is re-read whenever categories change.
        """
        self._category_source = category_source
        bus.subscribe(events.TRANSACTION_ADDED, self._on_added)
        bus.subscribe(events.TRANSACTION_UPDATED, self._on_updated)
        bus.subscribe(events.TRANSACTION_DELETED, self._on_deleted)
        bus.subscribe(events.TRANSACTIONS_CLEARED, self._on_cleared)
        bus.subscribe(events.CATEGORY_CHANGED, self._on_categories)
        bus.subscribe(events.AUTH_CHANGED, self._on_auth)
        return self

    def _on_added(self, event: Event) -> None:
        self.transactions = add_transaction(self.transactions, event.payload["transaction"])

    def _on_updated(self, event: Event) -> None:
        self.transactions = replace_transaction(self.transactions, event.payload["transaction"])

    def _on_deleted(self, event: Event) -> None:
        self.transactions = remove_transaction(self.transactions, event.payload["id"])

    def _on_cleared(self, event: Event) -> None:
        self.transactions = ()

    def _on_categories(self, event: Event) -> None:
        if self._category_source is not None:
            self.categories = tuple(self._category_source())

    def _on_auth(self, event: Event) -> None:
        self.auth = event.payload["auth"]

    def visible(self, view: ViewState) -> Tuple[Transaction, ...]:
        return query_transactions(self.transactions, view.filters, view.sort, self.collation_locale)
