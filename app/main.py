import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime, time

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from budgetapp import config
from budgetapp.domain import TEMPLATE_CATEGORIES, BudgetCategory, Expense, Income, PaymentMethod
from budgetapp.errors import LimitExceededError, ValidationError
from budgetapp.events import EventBus, register_default_handlers
from budgetapp.filters import by_category
from budgetapp.services import BudgetManager
from budgetapp.transforms import (
    categories_frame,
    monthly_totals,
    net_balance,
    top_categories,
    total_expenses,
    total_income,
    transactions_frame,
)

config.configure_logging()
st.set_page_config(page_title="Budget Manager", layout="wide")

if "manager" not in st.session_state:
    st.session_state.manager = BudgetManager(bus=register_default_handlers(EventBus()))
if "alerts" not in st.session_state:
    st.session_state.alerts = []

manager: BudgetManager = st.session_state.manager


def money(value: float) -> str:
    return config.format_money(value)


def sorted_categories():
    return sorted(manager.get_categories(), key=lambda c: c.name.casefold())


def category_picker(label: str, key: str):
    cats = sorted_categories()
    if not cats:
        st.info("No categories yet. Add one on the Categories page.")
        return None
    idx = st.selectbox(
        label,
        options=list(range(len(cats))),
        format_func=lambda i: f"{cats[i].name} ({money(cats[i].spent_so_far)} / {money(cats[i].limit)})",
        key=key,
    )
    return cats[idx]


def show_transactions(trans, file_name: str):
    df = transactions_frame(trans)
    if df.empty:
        st.info("No transactions match.")
        return
    disp = df.drop(columns=["id"]).assign(
        date_time=lambda x: x["date_time"].dt.strftime(config.DATETIME_FORMAT),
        amount=lambda x: x["amount"].map(money),
        fee=lambda x: x["fee"].map(money),
        effective_amount=lambda x: x["effective_amount"].map(money),
    )
    st.dataframe(disp, use_container_width=True, hide_index=True)
    st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name=file_name, mime="text/csv")


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🗂 Categories", "🧾 Transactions", "🔎 Queries"]
)

if st.session_state.alerts:
    with st.sidebar:
        st.markdown("### ⚠️ Alerts")
        for alert in st.session_state.alerts[-5:]:
            st.warning(alert)

if menu == "🏠 Overview":
    st.title("🏠 Overview")
    everything = manager.get_all_transactions()

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Categories", len(manager.get_categories()))
    with k2:
        st.metric("Income", money(total_income(everything)))
    with k3:
        st.metric("Expenses", money(total_expenses(everything)))
    with k4:
        st.metric("Net Balance", money(net_balance(everything)))

    cat_df = categories_frame(manager.get_categories())
    if not cat_df.empty:
        fig_cat = go.Figure()
        fig_cat.add_trace(go.Bar(x=cat_df["name"], y=cat_df["limit"], name="Limit"))
        fig_cat.add_trace(go.Bar(x=cat_df["name"], y=cat_df["spent"], name="Spent"))
        fig_cat.update_layout(barmode="group", template="plotly_dark", title="Spent vs Limit",
                              margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_cat, use_container_width=True)

        top = pd.DataFrame(list(top_categories(manager.get_categories(), 5)), columns=["Category", "Spent"])
        if not top.empty:
            st.plotly_chart(px.pie(top, values="Spent", names="Category", title="Top Categories"),
                            use_container_width=True)
    else:
        st.info("No categories defined")

    monthly = monthly_totals(everything)
    if not monthly.empty:
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Scatter(x=monthly.index, y=monthly["income"], mode="lines+markers", name="Income"))
        fig_ts.add_trace(go.Scatter(x=monthly.index, y=monthly["expenses"], mode="lines+markers", name="Expenses"))
        fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)

elif menu == "🗂 Categories":
    st.title("🗂 Budget Categories")

    col_tpl, col_custom = st.columns(2)
    with col_tpl:
        st.subheader("From template")
        tpl_idx = st.selectbox(
            "Template",
            options=list(range(len(TEMPLATE_CATEGORIES))),
            format_func=lambda i: f"{TEMPLATE_CATEGORIES[i].name} ({money(TEMPLATE_CATEGORIES[i].limit)})",
        )
        if st.button("Add template category"):
            manager.add_category(TEMPLATE_CATEGORIES[tpl_idx].build())
            st.success("Category added!")
    with col_custom:
        st.subheader("Custom")
        with st.form("category_form", clear_on_submit=True):
            name = st.text_input("Name")
            limit = st.number_input("Monthly limit", min_value=0.0, step=50.0, format="%.2f")
            if st.form_submit_button("Add category"):
                try:
                    if manager.find_category(name) is not None:
                        raise ValidationError(f"Category {name.strip()} already exists")
                    manager.add_category(BudgetCategory(name, float(limit)))
                    st.success("Category added!")
                except ValidationError as e:
                    st.error(f"Error: {e}")

    st.divider()
    cat_df = categories_frame(manager.get_categories())
    for _, row in cat_df.iterrows():
        st.metric(
            f"Budget: {row['name']}",
            f"{money(row['spent'])} / {money(row['limit'])}",
            f"{money(row['remaining'])} remaining"
        )
        st.progress(min(1.0, max(0.0, row["usage"])))

    st.divider()
    chosen = category_picker("Category", key="manage_category")
    if chosen is not None:
        c1, c2 = st.columns(2)
        with c1:
            if st.button("🔄 Reset expenditure"):
                manager.reset_expenditure(chosen)
                st.rerun()
        with c2:
            if st.button("🗑 Delete category"):
                manager.delete_category(chosen)
                st.rerun()

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    col_inc, col_exp = st.columns(2)

    with col_inc:
        st.subheader("➕ Income")
        with st.form("income_form", clear_on_submit=True):
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f", key="inc_amount")
            source = st.text_input("Source", key="inc_source")
            day = st.date_input("Date", key="inc_date")
            at = st.time_input("Time", value=time(12, 0), key="inc_time")
            if st.form_submit_button("Add income"):
                try:
                    manager.add_income(Income(float(amount), datetime.combine(day, at), source))
                    st.success("Income added!")
                except ValidationError as e:
                    st.error(f"Error: {e}")

    with col_exp:
        st.subheader("➖ Expense")
        category = category_picker("Category", key="exp_category")
        if category is not None:
            with st.form("expense_form", clear_on_submit=True):
                amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f", key="exp_amount")
                method = st.selectbox("Payment method", [m.value for m in PaymentMethod], key="exp_method")
                day = st.date_input("Date", key="exp_date")
                at = st.time_input("Time", value=time(12, 0), key="exp_time")
                if st.form_submit_button("Add expense"):
                    try:
                        results = manager.add_expense(
                            Expense(float(amount), datetime.combine(day, at), category.name, PaymentMethod(method)),
                            category,
                        )
                        st.success("Expense added!")
                        for r in results:
                            if r.get("alert"):
                                st.session_state.alerts.append(r["alert"])
                                st.warning(r["alert"])
                    except (ValidationError, LimitExceededError) as e:
                        st.error(f"Error: {e}")

    st.divider()
    st.subheader("📜 All transactions")
    show_transactions(manager.get_all_transactions(), "transactions.csv")

elif menu == "🔎 Queries":
    st.title("🔎 Queries")
    tab_cat, tab_label, tab_amount, tab_range = st.tabs([
        "By category", "By category name", "Above amount", "Date range"
    ])

    with tab_cat:
        chosen = category_picker("Category", key="query_category")
        if chosen is not None:
            show_transactions(manager.get_expenses_by_category(chosen), "category_expenses.csv")

    with tab_label:
        label = st.text_input("Category name on the expense", key="query_label")
        if label.strip():
            show_transactions(
                list(filter(by_category(label), manager.get_all_expenses())),
                "labelled_expenses.csv",
            )

    with tab_amount:
        threshold = st.number_input("Minimum expense amount", min_value=0.0, value=100.0, step=10.0)
        show_transactions(manager.get_expenses_above_amount(threshold), "large_expenses.csv")

    with tab_range:
        today = date.today()
        date_range = st.date_input("Date Range", value=(today.replace(day=1), today), key="query_range")
        if len(date_range) == 2:
            show_transactions(
                manager.get_transactions_by_date_range(date_range[0], date_range[1]),
                "transactions_range.csv",
            )
        else:
            st.info("Pick both a start and an end date.")
