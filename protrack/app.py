"""Streamlit app for ProTrack.

This module is the presentation layer: it reads user input, writes
through the record store and renders the view models from
:mod:`protrack.dashboard` with the charts from :mod:`protrack.visualization`.
All numbers shown here are computed by the pure helpers; nothing below
does arithmetic on records itself.

To run the app from the command line::

    streamlit run protrack/app.py

or use ``run_protrack.py`` in the project root.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from typing import List, Optional

import streamlit as st

if __package__:
    from . import dashboard as views
    from . import visualization as viz
    from .common.formatting import format_currency, format_date
    from .config import configure_logging, ensure_data_directories
    from .export import expense_export_rows, export_filename, time_entry_export_rows, to_csv_bytes
    from .records import Expense, InvalidTimeRangeError, TimeEntry, build_time_entry
    from .store import SQLiteRecordStore
    from .taxonomy import (
        ACTIVITIES, EXPENSE_CATEGORIES, OTHER, PAYMENT_MODES, activity_icon, category_icon, resolve_choice,
    )
    from .time_math import MINUTES_PER_DAY, format_minutes, to_12_hour
else:
    # Allow ``streamlit run protrack/app.py`` without installing the package.
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from protrack import dashboard as views  # type: ignore
    from protrack import visualization as viz  # type: ignore
    from protrack.common.formatting import format_currency, format_date  # type: ignore
    from protrack.config import configure_logging, ensure_data_directories  # type: ignore
    from protrack.export import (  # type: ignore
        expense_export_rows, export_filename, time_entry_export_rows, to_csv_bytes,
    )
    from protrack.records import Expense, InvalidTimeRangeError, TimeEntry, build_time_entry  # type: ignore
    from protrack.store import SQLiteRecordStore  # type: ignore
    from protrack.taxonomy import (  # type: ignore
        ACTIVITIES, EXPENSE_CATEGORIES, OTHER, PAYMENT_MODES, activity_icon, category_icon, resolve_choice,
    )
    from protrack.time_math import MINUTES_PER_DAY, format_minutes, to_12_hour  # type: ignore

logger = logging.getLogger(__name__)

VIEWS = ["Dashboard", "Expenses", "Time Tracker", "Monthly", "Analytics"]


@st.cache_resource
def get_store() -> SQLiteRecordStore:
    store = SQLiteRecordStore()
    store.init_db()
    return store


def _rerun() -> None:
    st.rerun()


def _form_key(prefix: str, existing) -> str:
    """Widget key prefix for a form editing ``existing`` (or a new record)."""
    return f"{prefix}_{existing.id if existing else 'new'}"


def _select_with_other(label: str, options: tuple, key: str, current: str = "") -> str:
    """Selectbox plus a free-text box that is used when "Other" is picked.

    Widgets inside ``st.form`` only report back on submit, so the text box
    is always rendered rather than revealed by the selection.
    """
    index = options.index(current) if current in options else (options.index(OTHER) if current else 0)
    selected = st.selectbox(label, options, index=index, key=key)
    default = current if current and current not in options else ""
    custom = st.text_input(f"Custom {label.lower()}", value=default, key=f"{key}_custom",
                           help=f'Used when "{OTHER}" is selected')
    return resolve_choice(selected, custom)


def render_dashboard(ctx: views.ProTrackContext) -> None:
    data = ctx.dashboard()
    stats = data["stats"]

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Today's expenses", format_currency(stats["today_expense"]), stats["expense_change_label"],
                delta_color="inverse" if stats["expense_change"] else "off")
    col2.metric("This month", format_currency(stats["month_expense"]))
    col3.metric("Tracked today", stats["today_duration"], f"{stats['remaining_duration']} remaining",
                delta_color="off")
    col4.metric("Productivity", f"{stats['productivity']}%")

    left, right = st.columns(2)
    with left:
        st.subheader("Today's top expenses")
        if not data["top_expenses"]:
            st.info("No expenses recorded today")
        for expense in data["top_expenses"]:
            st.write(f"{category_icon(expense.category)} **{expense.category}** · {expense.payment_mode} "
                     f"· {format_currency(expense.amount)}")
    with right:
        st.subheader("Today's time")
        activities = data["activities"]
        if activities.empty:
            st.info("No time entries recorded today")
        for _, row in activities.iterrows():
            st.write(f"{row['Icon']} {row['Activity']}: {row['Duration']}")
            st.progress(min(1.0, row["Percent"] / 100))

    render_budget(data["budget"])


def render_budget(summary: dict) -> None:
    st.subheader("Monthly budget")
    col1, col2, col3 = st.columns(3)
    col1.metric("Budget", format_currency(summary["budget"]))
    col2.metric("Spent", format_currency(summary["spent"]))
    col3.metric("Balance", format_currency(summary["balance"]))
    st.progress(summary["progress_width"] / 100, text=summary["percentage_label"])
    if summary["budget"] > 0:
        st.plotly_chart(viz.create_budget_gauge(summary["percentage"], summary["budget"], summary["spent"]),
                        width="stretch")
    status = summary["status"].value
    if status == "OverLimit":
        st.error(summary["message"])
    elif status == "Warning":
        st.warning(summary["message"])
    else:
        st.info(summary["message"])


def _budget_form(ctx: views.ProTrackContext, current: float) -> None:
    with st.expander("Edit budget"):
        amount = st.number_input("Monthly budget", min_value=0.0, value=float(current), step=500.0)
        if st.button("Save budget"):
            ctx.store.save_budget(ctx.user_id, amount)
            _rerun()


def _expense_form(ctx: views.ProTrackContext, existing: Optional[Expense]) -> None:
    key = _form_key("expense", existing)
    with st.form(f"{key}_form", clear_on_submit=existing is None):
        day = st.date_input("Date", value=date.fromisoformat(existing.date) if existing else ctx.today,
                            key=f"{key}_date")
        category = _select_with_other("Category", EXPENSE_CATEGORIES, f"{key}_category",
                                      existing.category if existing else "")
        amount = st.number_input("Amount", min_value=0.0, value=existing.amount if existing else 0.0,
                                 key=f"{key}_amount")
        payment = st.selectbox("Payment mode", PAYMENT_MODES,
                               index=PAYMENT_MODES.index(existing.payment_mode)
                               if existing and existing.payment_mode in PAYMENT_MODES else 0,
                               key=f"{key}_payment")
        notes = st.text_input("Notes", value=existing.notes if existing else "", key=f"{key}_notes")
        if st.form_submit_button("Update expense" if existing else "Add expense"):
            ctx.store.save_expense(Expense(
                id=existing.id if existing else "",
                user_id=ctx.user_id,
                date=day.isoformat(),
                category=category,
                amount=float(amount),
                payment_mode=payment,
                notes=notes,
            ))
            _rerun()


def render_expenses(ctx: views.ProTrackContext) -> None:
    records = ctx.snapshot()
    render_budget(views.budget_summary(records, ctx.today))
    _budget_form(ctx, records.budget)

    by_id = {e.id: e for e in records.expenses}
    edit_id = st.selectbox("Edit expense", [""] + list(by_id),
                           format_func=lambda i: "New expense" if not i else
                           f"{format_date(by_id[i].date)} · {by_id[i].category} · {format_currency(by_id[i].amount)}")
    _expense_form(ctx, by_id.get(edit_id))

    st.subheader("Expenses")
    cols = st.columns(5)
    day = cols[0].date_input("Date", value=None, key="expense_day_filter")
    month_key = cols[1].text_input("Month (YYYY-MM)", key="expense_month_filter")
    category = cols[2].selectbox("Category", ("",) + EXPENSE_CATEGORIES, key="expense_category_filter")
    custom = cols[2].text_input("Custom category", key="expense_custom_filter") if category == OTHER else ""
    payment = cols[3].selectbox("Payment mode", ("",) + PAYMENT_MODES, key="expense_payment_filter")
    order = cols[4].selectbox("Sort", ("date-desc", "date-asc", "amount-desc", "amount-asc", "category"))

    view = views.expense_list_view(
        records.expenses,
        day=day.isoformat() if day else None,
        month_key=month_key.strip() or None,
        category=category or None,
        custom_category=custom,
        payment_mode=payment or None,
        order=order,
    )
    if not view["items"]:
        st.info("No expenses found")
    else:
        st.markdown(f"**Total: {format_currency(view['total'])}** ({view['count']} entries)")
        st.dataframe([
            {
                "Date": format_date(e.date),
                "Category": f"{category_icon(e.category)} {e.category}",
                "Amount": format_currency(e.amount),
                "Payment Mode": e.payment_mode,
                "Notes": e.notes or "-",
            }
            for e in view["items"]
        ], width="stretch")
        _delete_control("expense", [e.id for e in view["items"]], ctx.store.delete_expense)

    rows = expense_export_rows(records.expenses)
    if rows:
        st.download_button("Export CSV", to_csv_bytes(rows), file_name=export_filename("expenses"),
                           mime="text/csv")


def _delete_control(kind: str, ids: List[str], delete) -> None:
    with st.expander(f"Delete {kind}"):
        target = st.selectbox(f"{kind.capitalize()} id", ids, key=f"delete_{kind}")
        if st.button(f"Delete {kind}") and target:
            delete(target)
            _rerun()


def _time_form(ctx: views.ProTrackContext, existing: Optional[TimeEntry]) -> None:
    key = _form_key("time", existing)
    with st.form(f"{key}_form", clear_on_submit=existing is None):
        day = st.date_input("Date", value=date.fromisoformat(existing.date) if existing else ctx.today,
                            key=f"{key}_date")
        activity = _select_with_other("Activity", ACTIVITIES, f"{key}_activity",
                                      existing.activity if existing else "")
        start = st.text_input("Start (e.g. 09:00 or 09:00 AM)",
                              value=to_12_hour(existing.start_time) if existing else "", key=f"{key}_start")
        end = st.text_input("End (e.g. 17:30 or 05:30 PM)",
                            value=to_12_hour(existing.end_time) if existing else "", key=f"{key}_end")
        notes = st.text_input("Notes", value=existing.notes if existing else "", key=f"{key}_notes")
        if st.form_submit_button("Update entry" if existing else "Add entry"):
            try:
                entry = build_time_entry(
                    user_id=ctx.user_id,
                    date=day.isoformat(),
                    activity=activity,
                    start_time=start,
                    end_time=end,
                    notes=notes,
                    entry_id=existing.id if existing else "",
                )
            except InvalidTimeRangeError as exc:
                st.error(str(exc))
                return
            booked = ctx.total_minutes_for_date(entry.date, exclude_id=entry.id or None)
            ctx.store.save_time_entry(entry)
            if booked + entry.total_minutes > MINUTES_PER_DAY:
                st.warning(f"Saved, but {format_date(entry.date)} now has more than 24h tracked")
            else:
                _rerun()


def render_time_tracker(ctx: views.ProTrackContext) -> None:
    records = ctx.snapshot()
    by_id = {e.id: e for e in records.time_entries}
    edit_id = st.selectbox("Edit entry", [""] + list(by_id),
                           format_func=lambda i: "New entry" if not i else
                           f"{format_date(by_id[i].date)} · {by_id[i].activity} · {by_id[i].duration}")
    _time_form(ctx, by_id.get(edit_id))

    cols = st.columns(4)
    day = cols[0].date_input("Date", value=None, key="time_day_filter")
    month_key = cols[1].text_input("Month (YYYY-MM)", key="time_month_filter")
    activity = cols[2].selectbox("Activity", ("",) + ACTIVITIES, key="time_activity_filter")
    custom = cols[2].text_input("Custom activity", key="time_custom_filter") if activity == OTHER else ""
    order = cols[3].selectbox("Sort", ("date-desc", "date-asc", "duration-desc", "duration-asc"))

    view = views.time_list_view(
        records.time_entries,
        ctx.today,
        day=day.isoformat() if day else None,
        month_key=month_key.strip() or None,
        activity=activity or None,
        custom_activity=custom,
        order=order,
    )
    summary = view["day_summary"]
    label = f"Total tracked ({format_date(summary['date'])})" if day else "Total tracked (today)"
    col1, col2 = st.columns(2)
    col1.metric(label, summary["tracked"])
    col2.metric("Hours left in day" if day else "Hours left today", summary["remaining"])
    st.progress(summary["progress"] / 100)
    if view["month_minutes"] is not None:
        st.caption(f"Filtered month: {format_minutes(view['month_minutes'])}")

    if not view["items"]:
        st.info("No time entries found")
    else:
        st.dataframe([
            {
                "Date": format_date(e.date),
                "Activity": f"{activity_icon(e.activity)} {e.activity}",
                "Time Range": f"{to_12_hour(e.start_time)} - {to_12_hour(e.end_time)}",
                "Duration": e.duration,
                "Notes": e.notes or "-",
            }
            for e in view["items"]
        ], width="stretch")
        _delete_control("entry", [e.id for e in view["items"]], ctx.store.delete_time_entry)

    rows = time_entry_export_rows(records.time_entries)
    if rows:
        st.download_button("Export CSV", to_csv_bytes(rows), file_name=export_filename("time_entries"),
                           mime="text/csv")


def render_monthly(ctx: views.ProTrackContext) -> None:
    col1, col2 = st.columns(2)
    month = col1.selectbox("Month", list(range(1, 13)), index=ctx.today.month - 1)
    year = int(col2.number_input("Year", min_value=2000, max_value=2100, value=ctx.today.year))
    data = ctx.monthly(month, year)

    st.subheader(data["label"])
    c1, c2, c3 = st.columns(3)
    c1.metric("Total spending", format_currency(data["total_spending"]),
              f"Daily average: {format_currency(data['daily_average'])}", delta_color="off")
    c2.metric("Avg work per day", data["avg_work_duration"])
    c3.metric("Work vs personal", f"{data['work_hours']}h : {data['personal_hours']}h")

    left, right = st.columns(2)
    left.plotly_chart(viz.create_expense_category_chart(data["categories"]), width="stretch")
    right.plotly_chart(viz.create_time_allocation_chart(data["activity_hours"]), width="stretch")
    st.plotly_chart(viz.create_daily_expense_chart(data["daily"]), width="stretch")


def render_analytics(ctx: views.ProTrackContext) -> None:
    data = ctx.analytics()
    st.subheader("Top categories")
    top = data["top_categories"]
    if top.empty:
        st.info("No expenses recorded yet")
    for _, row in top.iterrows():
        st.write(f"{row['Icon']} {row['Category']}: {format_currency(row['Amount'])} ({row['Percent']}%)")

    c1, c2, c3 = st.columns(3)
    c1.metric("Total work time", data["work_duration"])
    c2.metric("Productivity rate", f"{data['productivity_rate']}%")
    c3.metric("Avg daily work", data["avg_daily_work"])

    left, right = st.columns(2)
    left.plotly_chart(viz.create_payment_mode_chart(data["payment_modes"]), width="stretch")
    right.plotly_chart(viz.create_weekly_comparison_chart(data["weekly"]), width="stretch")


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    ensure_data_directories()
    st.set_page_config(page_title="ProTrack", layout="wide", initial_sidebar_state="expanded")
    st.title("ProTrack")

    user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", ""))
    if not user_id.strip():
        st.info("Enter a user name in the sidebar to get started.")
        return
    st.session_state["user_id"] = user_id.strip()
    st.sidebar.caption(date.today().strftime("%A, %d %B %Y"))
    view = st.sidebar.radio("View", VIEWS)

    ctx = views.ProTrackContext(store=get_store(), user_id=user_id.strip(), today=date.today())
    logger.debug("Rendering %s for %s", view, ctx.user_id)

    if view == "Dashboard":
        render_dashboard(ctx)
    elif view == "Expenses":
        render_expenses(ctx)
    elif view == "Time Tracker":
        render_time_tracker(ctx)
    elif view == "Monthly":
        render_monthly(ctx)
    else:
        render_analytics(ctx)


if __name__ == "__main__":
    main()
