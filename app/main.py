import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from ledger import aggregation as agg
from ledger.config import load_settings
from ledger.errors import AuthError, PreconditionError, SyncError, ValidationError
from ledger.identity import SupabaseAuth
from ledger.logger import setup_logger
from ledger.months import MonthSelector, month_name
from ledger.report import display_date, money
from ledger.services import BudgetService, ReportService
from ledger.store import EntityStore
from ledger.sync import SyncGateway
from ledger.validation import password_problems

st.set_page_config(page_title="Budget Ledger", layout="wide")

settings = load_settings()

if "store" not in st.session_state:
    setup_logger("ledger", settings.log_level)
    store = EntityStore()
    st.session_state.store = store
    st.session_state.gateway = SyncGateway(
        store,
        SupabaseAuth(settings.auth_url, settings.anon_key, timeout=settings.http_timeout),
        settings.api_url,
        anon_key=settings.anon_key,
        timeout=settings.http_timeout,
    )
    st.session_state.months = MonthSelector()
    st.session_state.pending_email = None

store: EntityStore = st.session_state.store
gateway: SyncGateway = st.session_state.gateway
months: MonthSelector = st.session_state.months

# ---------------------------
# Sidebar: account
# ---------------------------
st.sidebar.markdown("### 👤 Account")
if gateway.signed_in:
    ident = gateway.identity
    st.sidebar.caption(f"Signed in as **{ident.name or ident.email}**")
    if st.sidebar.button("Sign out"):
        gateway.sign_out()
        st.rerun()
else:
    st.sidebar.caption("Not signed in.")
    mode = st.sidebar.radio("Mode", ["Sign in", "Sign up", "Verify code"], horizontal=True)
    with st.sidebar.form("auth_form"):
        email = st.text_input("Email", value=st.session_state.pending_email or "")
        if mode == "Verify code":
            code = st.text_input("One-time code")
        else:
            password = st.text_input("Password", type="password")
        if mode == "Sign up":
            name = st.text_input("Name")
        submitted = st.form_submit_button(mode)

    if mode == "Sign up" and submitted and password:
        for problem in password_problems(password):
            st.sidebar.caption(f"✗ {problem}")

    if submitted:
        try:
            if mode == "Sign in":
                gateway.sign_in(email, password)
                st.rerun()
            elif mode == "Sign up":
                pending = gateway.sign_up(email, password, name)
                st.session_state.pending_email = pending.email
                st.sidebar.success("Account created. Enter the code sent to your email.")
            else:
                gateway.verify_otp(email, code)
                st.session_state.pending_email = None
                st.rerun()
        except ValidationError as e:
            for message in e.messages:
                st.sidebar.error(message)
        except (AuthError, SyncError) as e:
            st.sidebar.error(str(e))

if not gateway.signed_in:
    st.title("💰 Budget Ledger")
    st.markdown(
        "Plan a monthly budget per category, record expenses and download a "
        "monthly Excel report. Sign in or create an account from the sidebar."
    )
    st.stop()

# ---------------------------
# Month navigation
# ---------------------------
current = months.current
nav_prev, nav_title, nav_next, nav_pick = st.columns([1, 4, 1, 3])
with nav_prev:
    if st.button("◀", key="nav_prev"):
        months.navigate("prev")
        st.rerun()
with nav_title:
    marker = " · this month" if months.is_current_calendar_month(current) else ""
    st.subheader(f"📅 {month_name(current)}{marker}")
    if not months.is_current_calendar_month(current) and st.button("Today", key="nav_today"):
        months.go_to_today()
        st.rerun()
with nav_next:
    if st.button("▶", key="nav_next"):
        months.navigate("next")
        st.rerun()
with nav_pick:
    with_data = months.months_with_data(store.expenses)
    if with_data:
        picked = st.selectbox(
            "Months with expenses",
            with_data,
            index=with_data.index(current) if current in with_data else 0,
            format_func=month_name,
        )
        if picked != current and st.button("Go", key="nav_go"):
            months.select_month(picked)
            st.rerun()

view = BudgetService().monthly_report(current, store.expenses, store.categories)
result = view["result"]
month_expenses = view["expenses"]

# ---------------------------
# Overview
# ---------------------------
k1, k2, k3 = st.columns(3)
with k1:
    st.metric("Total Budget", money(result["total_budget"]))
with k2:
    st.metric("Total Spent", money(result["total_spent"]))
    st.progress(min(float(result["percentage_used"]), 100.0) / 100)
    st.caption(f"{result['percentage_used']:.1f}% used")
with k3:
    left = result["remaining"]
    st.metric("Remaining", money(abs(left)))
    if left < 0:
        st.error("Over budget!")

if result["breakdown"]:
    chart_df = pd.DataFrame(
        [{"Category": b.name, "Spent": float(b.spent), "Color": b.color} for b in result["breakdown"]]
    )
    fig = px.pie(
        chart_df,
        values="Spent",
        names="Category",
        color="Category",
        color_discrete_map=dict(zip(chart_df["Category"], chart_df["Color"])),
        title="Spending Breakdown",
    )
    st.plotly_chart(fig, use_container_width=True)

try:
    filename, payload = ReportService().export_month(current, store.expenses, store.categories)
    st.download_button(
        "⬇ Download Excel",
        payload,
        file_name=filename,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
except PreconditionError:
    st.caption("No expenses to download for this month.")

# ---------------------------
# Categories
# ---------------------------
st.header("🗂 Categories")
status_cols = st.columns(3)
for idx, status in enumerate(result["category_status"]):
    c = status.category
    with status_cols[idx % 3]:
        st.markdown(f"#### {c.icon} {c.name}")
        st.caption(f"{money(status.spent)} / {money(c.budget)}")
        st.progress(min(float(status.percentage), 100.0) / 100)
        if status.over_budget:
            st.warning(f"Over by {money(status.over_amount)}")
        with st.expander("Edit"):
            with st.form(f"edit_{c.id}"):
                new_name = st.text_input("Name", value=c.name)
                new_budget = st.number_input("Budget", min_value=0.0, value=float(c.budget), step=10.0)
                new_color = st.color_picker("Color", value=c.color)
                new_icon = st.text_input("Icon", value=c.icon)
                if st.form_submit_button("Save"):
                    store.update_category(c.id, name=new_name, budget=str(new_budget), color=new_color, icon=new_icon)
                    st.rerun()
            if st.button("Delete category", key=f"del_{c.id}"):
                store.delete_category(c.id)
                st.rerun()

with st.expander("➕ Add category"):
    with st.form("add_category", clear_on_submit=True):
        cat_name = st.text_input("Name")
        cat_budget = st.number_input("Monthly budget", min_value=0.0, step=10.0)
        cat_color = st.color_picker("Color", value="#06b6d4")
        cat_icon = st.text_input("Icon", value="📦")
        if st.form_submit_button("Add category") and cat_name.strip():
            store.add_category(cat_name.strip(), str(cat_budget), cat_color, cat_icon)
            st.rerun()

# ---------------------------
# Expenses
# ---------------------------
st.header("💸 Expenses")
if store.categories:
    with st.form("add_expense", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            exp_date = st.date_input("Date", value=date.today())
            exp_amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with col2:
            names = {c.id: f"{c.icon} {c.name}" for c in store.categories}
            exp_cat = st.selectbox("Category", list(names), format_func=names.get)
            exp_desc = st.text_input("Description (optional)")
        if st.form_submit_button("Add expense") and exp_amount > 0:
            store.add_expense(exp_cat, f"{exp_amount:.2f}", exp_desc, exp_date.isoformat())
            st.rerun()
else:
    st.info("Add a category before recording expenses.")

if month_expenses:
    for e in month_expenses:
        row = st.columns([2, 3, 4, 2, 1])
        row[0].write(display_date(e.date))
        row[1].write(agg.category_name(store.categories, e.category_id))
        row[2].write(e.description or "-")
        row[3].write(money(e.amount))
        if row[4].button("🗑", key=f"del_exp_{e.id}"):
            store.delete_expense(e.id)
            st.rerun()
else:
    st.info("No expenses recorded for this month.")
