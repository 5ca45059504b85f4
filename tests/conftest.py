import pytest

from core.config import Settings
from core.domain import Category, Transaction


@pytest.fixture
def sample_transactions():
    return (
        Transaction("t1", "income", 5000, "2025-01-01", "Зарплата", "Тестовый доход"),
        Transaction("t2", "expense", 1000, "2025-01-15", "Продукты", "Тестовый расход"),
    )


@pytest.fixture
def categories():
    return (
        Category("1", "Продукты", "expense", "#FF5252"),
        Category("2", "Транспорт", "expense", "#FF7043"),
        Category("5", "Зарплата", "income", "#42A5F5"),
        Category("6", "Фриланс", "income", "#5C6BC0"),
    )


@pytest.fixture
def fast_settings(tmp_path):
    return Settings(
        store_path=tmp_path / "store.json",
        latency_min_ms=0,
        latency_max_ms=0,
    )
