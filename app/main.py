import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from core.api import build_api
from core.categories import category_breakdown, income_expense_split
from core.config import ensure_data_directories, setup_logging
from core.domain import ALL, EXPENSE, INCOME, UserProfile
from core.filters import SORT_OPTIONS
from core.formatting import format_currency, format_date, format_signed, parse_date
from core.state import CHART_VIEWS, ViewState
from core.transforms import balance, total_expense, total_income

setup_logging()
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Учёт финансов", layout="wide")

TYPE_LABELS = {ALL: "Все", INCOME: "Доходы", EXPENSE: "Расходы"}
SORT_LABELS = {
    "date-desc": "Дата (новые)",
    "date-asc": "Дата (старые)",
    "amount-desc": "Сумма (по убыванию)",
    "amount-asc": "Сумма (по возрастанию)",
    "category-asc": "Категория (А-Я)",
    "category-desc": "Категория (Я-А)",
}


def run(coro):
    return asyncio.run(coro)


if "api" not in st.session_state:
    ensure_data_directories()
    st.session_state.api = build_api()
    st.session_state.app_state = run(st.session_state.api.load_snapshot())
    st.session_state.view = ViewState()
    logger.info("Started session with %d transactions", len(st.session_state.app_state.transactions))

api = st.session_state.api
state = st.session_state.app_state


def tx_to_df(tx_list):
    rows = [
        {
            "id": t.id,
            "Дата": pd.to_datetime(t.date, errors="coerce"),
            "Тип": TYPE_LABELS[t.type],
            "Категория": t.category,
            "Сумма": t.signed_amount,
            "Описание": t.description,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "Дата", "Тип", "Категория", "Сумма", "Описание"])


def report(result, success_message):
    if result.ok:
        st.success(success_message)
    else:
        st.error(result.error)


def breakdown_chart(tx_type, title):
    shares = category_breakdown(state.transactions, tx_type, state.categories)
    if not shares:
        st.info("Нет данных для отображения")
        return
    df = pd.DataFrame(
        [
            {"Категория": name, "Сумма": s.amount, "Доля": s.percentage, "color": s.color}
            for name, s in shares.items()
        ]
    )
    fig = px.bar(
        df,
        x="Сумма",
        y="Категория",
        orientation="h",
        title=title,
        text=df["Доля"].map(lambda p: f"{p}%"),
        color="Категория",
        color_discrete_map=dict(zip(df["Категория"], df["color"])),
    )
    fig.update_layout(showlegend=False, yaxis={"categoryorder": "total ascending"})
    st.plotly_chart(fig, use_container_width=True)


# ── Auth ─────────────────────────────────────────────────────────────────────

if not state.auth.is_authenticated:
    st.title("💰 Учёт финансов")
    login_tab, register_tab = st.tabs(["Вход", "Регистрация"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email", value="demo@example.com")
            password = st.text_input("Пароль", type="password")
            if st.form_submit_button("Войти"):
                result = run(api.login(email, password))
                if result.ok:
                    st.rerun()
                st.error(result.error)

    with register_tab:
        with st.form("register"):
            email = st.text_input("Email")
            password = st.text_input("Пароль", type="password")
            first_name = st.text_input("Имя")
            last_name = st.text_input("Фамилия")
            profession = st.text_input("Профессия")
            birth_date = st.date_input("Дата рождения", value=date(1990, 1, 1))
            if st.form_submit_button("Зарегистрироваться"):
                profile = UserProfile(
                    first_name=first_name,
                    last_name=last_name,
                    profession=profession,
                    birth_date=birth_date.isoformat(),
                )
                result = run(api.register(email, password, profile))
                if result.ok:
                    st.rerun()
                st.error(result.error)
    st.stop()


user = state.auth.user
st.sidebar.markdown(f"### 👤 {user.profile.first_name} {user.profile.last_name}")
if st.sidebar.button("Выйти"):
    run(api.logout())
    st.rerun()

menu = st.sidebar.radio(
    "Меню",
    ["🏠 Панель", "📜 История", "➕ Добавить", "🗂 Категории", "🙍 Профиль"],
)


if menu == "🏠 Панель":
    st.title("Панель управления")

    bal = balance(state.transactions)
    st.metric("Текущий баланс", format_currency(bal))
    col1, col2 = st.columns(2)
    col1.metric("Доходы", format_currency(total_income(state.transactions)))
    col2.metric("Расходы", format_currency(total_expense(state.transactions)))

    view = st.session_state.view
    chart_view = st.radio(
        "Статистика",
        list(CHART_VIEWS),
        format_func=lambda v: {"all": "Все", "comparison": "Сравнение", "income": "Доходы", "expense": "Расходы"}[v],
        horizontal=True,
        index=list(CHART_VIEWS).index(view.chart_view),
    )
    st.session_state.view = view = ViewState(view.filters, view.sort, chart_view)

    if chart_view in ("all", "comparison"):
        income_pct, expense_pct = income_expense_split(state.transactions)
        if income_pct == 0 and expense_pct == 0:
            st.info("Нет данных для отображения")
        else:
            fig = go.Figure()
            fig.add_trace(go.Bar(y=["Итого"], x=[income_pct], name="Доходы", orientation="h", marker_color="#16A34A"))
            fig.add_trace(go.Bar(y=["Итого"], x=[expense_pct], name="Расходы", orientation="h", marker_color="#DC2626"))
            fig.update_layout(barmode="stack", title="Сравнение доходов и расходов", xaxis={"range": [0, 100]})
            st.plotly_chart(fig, use_container_width=True)
    if chart_view in ("all", "income"):
        breakdown_chart(INCOME, "Доходы по категориям")
    if chart_view in ("all", "expense"):
        breakdown_chart(EXPENSE, "Расходы по категориям")

    st.subheader("Последние операции")
    recent = state.visible(ViewState())[:5]
    for t in recent:
        st.write(f"{format_date(t.date)} · {t.category} · {format_signed(t.amount, t.type)}")


elif menu == "📜 История":
    st.title("История операций")
    view = st.session_state.view
    f = view.filters

    c1, c2, c3, c4, c5 = st.columns(5)
    start = c1.date_input("С", value=None)
    end = c2.date_input("По", value=None)
    tx_type = c3.selectbox("Тип", list(TYPE_LABELS), format_func=TYPE_LABELS.get, index=list(TYPE_LABELS).index(f.type))
    names = [c.name for c in state.categories if tx_type == ALL or c.type == tx_type]
    category = c4.selectbox("Категория", [ALL] + names, format_func=lambda n: "Все" if n == ALL else n)
    sort = c5.selectbox("Сортировка", SORT_OPTIONS, format_func=SORT_LABELS.get, index=SORT_OPTIONS.index(view.sort))

    view = view.with_filters(
        start_date=start.isoformat() if start else None,
        end_date=end.isoformat() if end else None,
        type=tx_type,
        category=category,
    )
    st.session_state.view = view = ViewState(view.filters, sort, view.chart_view)

    visible = state.visible(view)
    if not visible:
        st.info("Операции не найдены")
    else:
        df = tx_to_df(visible)
        df["Дата"] = [format_date(t.date) for t in visible]
        df["Сумма"] = [format_signed(t.amount, t.type) for t in visible]
        st.dataframe(df.drop(columns=["id"]), use_container_width=True, hide_index=True)

        to_delete = st.selectbox(
            "Удалить операцию",
            [""] + [t.id for t in visible],
            format_func=lambda tid: "—" if not tid else next(
                f"{format_date(t.date)} {t.category} {format_currency(t.amount)}" for t in visible if t.id == tid
            ),
        )
        if to_delete and st.button("Удалить"):
            report(run(api.delete_transaction(to_delete)), "Операция удалена")

        to_edit = st.selectbox(
            "Изменить операцию",
            [""] + [t.id for t in visible],
            format_func=lambda tid: "—" if not tid else next(
                f"{format_date(t.date)} {t.category} {format_currency(t.amount)}" for t in visible if t.id == tid
            ),
        )
        if to_edit:
            current = next(t for t in visible if t.id == to_edit)
            edit_type = st.radio(
                "Тип операции",
                [INCOME, EXPENSE],
                format_func={INCOME: "Доход", EXPENSE: "Расход"}.get,
                index=[INCOME, EXPENSE].index(current.type),
                horizontal=True,
                key=f"edit_type_{to_edit}",
            )
            with st.form(f"edit_tx_{to_edit}"):
                amount = st.number_input("Сумма", min_value=0.01, step=100.0, value=max(float(current.amount), 0.01))
                parsed = parse_date(current.date)
                tx_date = st.date_input("Дата", value=parsed or date.today())
                options = [c.name for c in state.categories if c.type == edit_type]
                if current.type == edit_type and current.category not in options:
                    options.insert(0, current.category)
                category = st.selectbox(
                    "Категория",
                    options,
                    index=options.index(current.category) if current.category in options else 0,
                )
                description = st.text_area("Описание", value=current.description)
                if st.form_submit_button("Сохранить изменения"):
                    result = run(api.update_transaction(to_edit, {
                        "type": edit_type,
                        "amount": amount,
                        "date": tx_date.isoformat(),
                        "category": category,
                        "description": description,
                    }))
                    report(result, "Операция обновлена")


elif menu == "➕ Добавить":
    st.title("Новая операция")
    tx_type = st.radio("Тип", [INCOME, EXPENSE], format_func={INCOME: "Доход", EXPENSE: "Расход"}.get, horizontal=True)
    with st.form("add_tx", clear_on_submit=True):
        amount = st.number_input("Сумма", min_value=0.01, step=100.0)
        tx_date = st.date_input("Дата", value=date.today())
        category = st.selectbox("Категория", [c.name for c in state.categories if c.type == tx_type])
        description = st.text_area("Описание")
        if st.form_submit_button("Добавить"):
            result = run(api.create_transaction({
                "type": tx_type,
                "amount": amount,
                "date": tx_date.isoformat(),
                "category": category,
                "description": description,
            }))
            report(result, "Операция добавлена")


elif menu == "🗂 Категории":
    st.title("Категории")
    for tx_type in (INCOME, EXPENSE):
        st.subheader(TYPE_LABELS[tx_type])
        for c in (c for c in state.categories if c.type == tx_type):
            st.markdown(f"<span style='color:{c.color}'>■</span> {c.name}", unsafe_allow_html=True)

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("Название")
        cat_type = st.selectbox("Тип", [INCOME, EXPENSE], format_func=TYPE_LABELS.get)
        color = st.color_picker("Цвет", "#42A5F5")
        if st.form_submit_button("Добавить категорию"):
            report(run(api.create_category({"name": name, "type": cat_type, "color": color})), "Категория добавлена")

    victim = st.selectbox("Удалить категорию", [""] + [c.id for c in state.categories],
                          format_func=lambda cid: "—" if not cid else next(c.name for c in state.categories if c.id == cid))
    if victim and st.button("Удалить категорию"):
        report(run(api.delete_category(victim)), "Категория удалена")

    to_edit = st.selectbox("Изменить категорию", [""] + [c.id for c in state.categories],
                           format_func=lambda cid: "—" if not cid else next(c.name for c in state.categories if c.id == cid))
    if to_edit:
        current = next(c for c in state.categories if c.id == to_edit)
        with st.form(f"edit_category_{to_edit}"):
            name = st.text_input("Новое название", value=current.name)
            color = st.color_picker("Новый цвет", current.color)
            if st.form_submit_button("Сохранить категорию"):
                report(run(api.update_category(to_edit, name=name, color=color)), "Категория обновлена")

    if st.button("Сбросить категории"):
        report(run(api.reset_categories()), "Категории сброшены")


elif menu == "🙍 Профиль":
    st.title("Профиль")
    p = user.profile
    with st.form("profile"):
        first_name = st.text_input("Имя", value=p.first_name)
        last_name = st.text_input("Фамилия", value=p.last_name)
        middle_name = st.text_input("Отчество", value=p.middle_name or "")
        profession = st.text_input("Профессия", value=p.profession)
        if st.form_submit_button("Сохранить"):
            result = run(api.update_profile(
                user.id,
                first_name=first_name,
                last_name=last_name,
                middle_name=middle_name or None,
                profession=profession,
            ))
            report(result, "Профиль обновлён")

    st.subheader("Данные")
    stats = run(api.transaction_stats())
    st.write(f"Операций: {stats.transaction_count}, категорий использовано: {len(stats.categories_used)}")
    exported = run(api.export_data())
    st.download_button(
        "Экспорт данных",
        exported.encode("utf-8"),
        file_name=f"finance-tracker-export-{date.today().isoformat()}.json",
        mime="application/json",
    )
    if st.button("Очистить все данные"):
        report(run(api.clear_all_data()), "Данные очищены")
