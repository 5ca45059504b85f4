import asyncio
import dataclasses
import json

import pytest

from core.api import FinanceApi, build_api
from core.domain import UserProfile
from core.filters import AMOUNT_ASC, CATEGORY_ASC, FilterSpec
from core.state import ViewState
from core.storage import MemoryStore


def salary():
    return {"type": "income", "amount": 5000, "date": "2025-01-01", "category": "Зарплата"}


def groceries():
    return {"type": "expense", "amount": 1000, "date": "2025-01-15", "category": "Продукты"}


@pytest.fixture
def api(fast_settings):
    return FinanceApi(MemoryStore(), fast_settings)


@pytest.mark.asyncio
async def test_load_snapshot_on_empty_store(api):
    state = await api.load_snapshot()
    assert state.transactions == ()
    assert len(state.categories) == 8
    assert not state.auth.is_authenticated


@pytest.mark.asyncio
async def test_state_follows_mutations(api):
    state = await api.load_snapshot()

    created = await api.create_transaction(salary())
    await api.create_transaction(groceries())
    assert [t.category for t in state.transactions] == ["Зарплата", "Продукты"]

    await api.update_transaction(created.value.id, {**salary(), "amount": 6000})
    assert state.transactions[0].amount == 6000

    await api.delete_transaction(created.value.id)
    assert [t.category for t in state.transactions] == ["Продукты"]

    await api.create_category({"name": "Кафе", "type": "expense", "color": "#000000"})
    assert "Кафе" in [c.name for c in state.categories]

    await api.login("demo@example.com", "password123")
    assert state.auth.is_authenticated


@pytest.mark.asyncio
async def test_view_state_drives_visible_list(api):
    state = await api.load_snapshot()
    await api.create_transaction(salary())
    await api.create_transaction(groceries())

    view = ViewState().with_filters(start_date="2025-01-01", end_date="2025-01-10")
    assert [t.category for t in state.visible(view)] == ["Зарплата"]
    assert ViewState().filters == FilterSpec()


@pytest.mark.asyncio
async def test_query_and_stats(api):
    await api.create_transaction(salary())
    await api.create_transaction(groceries())

    result = await api.query_transactions(FilterSpec(), AMOUNT_ASC)
    assert [t.amount for t in result.value] == [1000, 5000]

    stats = await api.transaction_stats()
    assert (stats.total_income, stats.total_expense, stats.balance) == (5000, 1000, 4000)

    cat_stats = await api.category_stats()
    assert cat_stats.total_categories == 8


@pytest.mark.asyncio
async def test_concurrent_creates_are_all_kept(api):
    await asyncio.gather(*(api.create_transaction(groceries()) for _ in range(10)))
    assert len(await api.get_transactions()) == 10


@pytest.mark.asyncio
async def test_clear_all_data(api):
    await api.create_transaction(salary())
    await api.delete_category("1")

    result = await api.clear_all_data()
    assert result.ok
    assert await api.get_transactions() == ()
    assert len(await api.get_categories()) == 8


@pytest.mark.asyncio
async def test_register_update_profile_and_logout(api):
    reg = await api.register("anna@example.com", "secret", UserProfile("Анна", "Петрова"))
    assert reg.ok
    upd = await api.update_profile(reg.value.id, middle_name="Сергеевна")
    assert upd.value.profile.middle_name == "Сергеевна"

    state = await api.logout()
    assert not state.is_authenticated


@pytest.mark.asyncio
async def test_filtered_categories(api):
    cats = await api.filtered_categories("expense")
    assert all(c.type == "expense" for c in cats)
    assert len(cats) == 4


def test_build_api_persists_to_file(fast_settings):
    api = build_api(fast_settings)
    asyncio.run(api.create_transaction(salary()))

    reopened = build_api(fast_settings)
    assert len(asyncio.run(reopened.get_transactions())) == 1
    assert fast_settings.store_path.exists()


@pytest.mark.asyncio
async def test_collation_locale_setting_reaches_sorting(fast_settings):
    settings = dataclasses.replace(fast_settings, collation_locale="xx_NOWHERE.UTF-8")
    api = FinanceApi(MemoryStore(), settings)
    state = await api.load_snapshot()
    await api.create_transaction({**groceries(), "category": "ёлка"})
    await api.create_transaction({**groceries(), "category": "Еда"})

    assert api.transactions.collation_locale == "xx_NOWHERE.UTF-8"
    assert state.collation_locale == "xx_NOWHERE.UTF-8"

    result = await api.query_transactions(FilterSpec(), CATEGORY_ASC)
    assert [t.category for t in result.value] == ["Еда", "ёлка"]
    assert [t.category for t in state.visible(ViewState(sort=CATEGORY_ASC))] == ["Еда", "ёлка"]


@pytest.mark.asyncio
async def test_update_category_reaches_state(api):
    state = await api.load_snapshot()
    result = await api.update_category("1", name="Еда", color="#00FF00")

    assert result.ok
    assert ("Еда", "#00FF00") in [(c.name, c.color) for c in state.categories]
    assert (await api.update_category("1", color="зелёный")).error == "Некорректный цвет"


@pytest.mark.asyncio
async def test_export_data(api):
    await api.login("demo@example.com", "password123")
    await api.create_transaction(salary())

    exported = json.loads(await api.export_data())
    assert [t["category"] for t in exported["transactions"]] == ["Зарплата"]
    assert len(exported["categories"]) == 8
    assert exported["user_profile"]["first_name"] == "Иван"
    assert exported["export_date"]


@pytest.mark.asyncio
async def test_logout_drops_stored_session(fast_settings):
    store = MemoryStore()
    api = FinanceApi(store, fast_settings)
    state = await api.load_snapshot()
    await api.login("demo@example.com", "password123")
    assert store.read("auth") is not None

    await api.logout()
    assert store.read("auth") is None
    assert not state.auth.is_authenticated
