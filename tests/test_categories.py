from core.categories import (
    category_breakdown,
    category_color,
    category_stats,
    category_usage,
    filter_categories,
    income_expense_split,
    sum_by_category,
)
from core.config import DEFAULT_CATEGORY_COLOR
from core.domain import Transaction


def make_sample():
    return (
        Transaction("t1", "expense", 300, "2025-01-01", "Продукты"),
        Transaction("t2", "expense", 200, "2025-01-02", "Транспорт"),
        Transaction("t3", "income", 5000, "2025-01-03", "Зарплата"),
        Transaction("t4", "expense", 700, "2025-01-04", "Продукты"),
        Transaction("t5", "expense", 100, "2025-01-05", "Кафе"),
    )


def test_single_income_category_is_whole_share(categories):
    trans = (Transaction("t1", "income", 5000, "2025-01-01", "Зарплата"),)
    result = category_breakdown(trans, "income", categories)

    assert list(result) == ["Зарплата"]
    assert result["Зарплата"].amount == 5000
    assert result["Зарплата"].percentage == 100
    assert result["Зарплата"].color == "#42A5F5"


def test_sum_by_category_ignores_other_type():
    totals = sum_by_category(make_sample(), "expense")
    assert totals == {"Продукты": 1000, "Транспорт": 200, "Кафе": 100}


def test_breakdown_orders_by_amount(categories):
    result = category_breakdown(make_sample(), "expense", categories)

    assert list(result) == ["Продукты", "Транспорт", "Кафе"]
    assert [s.percentage for s in result.values()] == [77, 15, 8]


def test_breakdown_ties_keep_first_appearance():
    trans = (
        Transaction("t1", "expense", 100, "2025-01-01", "Б"),
        Transaction("t2", "expense", 100, "2025-01-02", "А"),
        Transaction("t3", "expense", 300, "2025-01-03", "В"),
    )
    assert list(category_breakdown(trans, "expense")) == ["В", "Б", "А"]


def test_breakdown_empty_when_total_is_zero(categories):
    assert category_breakdown((), "income", categories) == {}
    assert category_breakdown(make_sample(), "income", ()) != {}
    zero = (Transaction("t1", "expense", 0, "2025-01-01", "Продукты"),)
    assert category_breakdown(zero, "expense", categories) == {}


def test_percentages_sum_close_to_hundred():
    trans = tuple(
        Transaction(f"t{i}", "expense", 1, "2025-01-01", name)
        for i, name in enumerate(["А", "Б", "В"])
    )
    result = category_breakdown(trans, "expense")
    total = sum(s.percentage for s in result.values())
    assert abs(total - 100) <= len(result)


def test_percentage_rounds_half_up():
    trans = (
        Transaction("t1", "expense", 1, "2025-01-01", "А"),
        Transaction("t2", "expense", 7, "2025-01-01", "Б"),
    )
    # 1/8 = 12.5%, 7/8 = 87.5%
    result = category_breakdown(trans, "expense")
    assert result["А"].percentage == 13
    assert result["Б"].percentage == 88


def test_unknown_category_gets_default_color(categories):
    assert category_color("Кафе", categories) == DEFAULT_CATEGORY_COLOR
    assert category_color("Продукты", categories) == "#FF5252"
    result = category_breakdown(make_sample(), "expense", categories)
    assert result["Кафе"].color == DEFAULT_CATEGORY_COLOR


def test_income_expense_split(sample_transactions):
    assert income_expense_split(sample_transactions) == (83, 17)
    assert income_expense_split(()) == (0, 0)


def test_category_usage_counts():
    assert category_usage(make_sample()) == (
        ("Продукты", 2),
        ("Транспорт", 1),
        ("Зарплата", 1),
        ("Кафе", 1),
    )
    assert category_usage(make_sample(), top=1) == (("Продукты", 2),)


def test_category_stats(categories):
    stats = category_stats(categories, make_sample())
    assert stats.total_categories == 4
    assert stats.income_categories == 2
    assert stats.expense_categories == 2
    assert stats.most_used[0] == ("Продукты", 2)


def test_filter_categories_by_type_and_search(categories):
    assert [c.name for c in filter_categories(categories, "income")] == ["Зарплата", "Фриланс"]
    assert [c.name for c in filter_categories(categories, search="ПРОД")] == ["Продукты"]
    assert filter_categories(categories, "income", "прод") == ()
    assert filter_categories(categories) == categories
